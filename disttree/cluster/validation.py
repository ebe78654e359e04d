"""How well does a linkage tree represent its input distances?

The main score is the cophenetic correlation coefficient: the Pearson
correlation between each pair's merge height in the tree and its original
distance. Flat cuts of the tree can additionally be scored with the
silhouette coefficient.
"""

import numpy as np
from scipy.cluster.hierarchy import cophenet, fcluster
from sklearn.metrics import silhouette_score
from rich.console import Console

from disttree.cluster.linkage import LINKAGE_METHODS, check_method, compute_linkage
from disttree.core.errors import DegenerateDataError, PreconditionError

console = Console()


def cophenetic_correlation(tree, matrix):
    """Cophenetic correlation coefficient of ``tree`` against ``matrix``.

    Parameters:
        tree: LinkageTree built from ``matrix``
        matrix: DistanceMatrix the tree was built from

    Returns:
        float in [-1, 1]

    Raises:
        PreconditionError: tree and matrix describe different entities
        DegenerateDataError: fewer than 3 entities, or constant distances
            (the correlation is undefined)
    """
    if tuple(tree.labels) != tuple(matrix.names):
        raise PreconditionError("Linkage tree and distance matrix have different entity names")
    if len(matrix) < 3:
        raise DegenerateDataError(
            f"Cophenetic correlation needs at least 3 entities, got {len(matrix)}"
        )

    y = matrix.condensed()
    coph = cophenet(tree.Z)
    if np.ptp(y) == 0 or np.ptp(coph) == 0:
        raise DegenerateDataError(
            "Cophenetic correlation is undefined when all distances are equal"
        )
    r = np.corrcoef(coph, y)[0, 1]
    return float(np.clip(r, -1.0, 1.0))


def compare_linkage_methods(matrix, methods=LINKAGE_METHODS, optimal_ordering=False):
    """Cluster the same matrix with several methods and score each tree.

    Returns:
        dict: {method: cophenetic correlation}
    """
    scores = {}
    for method in methods:
        check_method(method)
        tree = compute_linkage(matrix, method=method, optimal_ordering=optimal_ordering)
        scores[method] = cophenetic_correlation(tree, matrix)
    best = max(scores, key=scores.get)
    console.print(f"  Best cophenetic correlation: {best} ({scores[best]:.4f})")
    return scores


def cut_tree(tree, n_clusters=None, distance=None):
    """Flat cluster labels (1-based) from a linkage tree.

    Exactly one of ``n_clusters`` and ``distance`` must be given.
    """
    if (n_clusters is None) == (distance is None):
        raise PreconditionError("Give exactly one of n_clusters or distance")
    if tree.n_leaves == 1:
        return np.ones(1, dtype=int)
    if n_clusters is not None:
        if not 1 <= n_clusters <= tree.n_leaves:
            raise PreconditionError(
                f"n_clusters must be between 1 and {tree.n_leaves}, got {n_clusters}"
            )
        return fcluster(tree.Z, n_clusters, criterion='maxclust')
    return fcluster(tree.Z, distance, criterion='distance')


def silhouette_for_cut(matrix, labels):
    """Silhouette score of a flat clustering on precomputed distances.

    Returns None when the score is undefined (fewer than 2 clusters, or every
    entity in its own cluster).
    """
    labels = np.asarray(labels)
    n_labels = np.unique(labels).size
    if not 2 <= n_labels < labels.shape[0]:
        return None
    return float(silhouette_score(np.array(matrix.values), labels, metric='precomputed'))


def summarize_tree(tree):
    """Basic statistics of the merge heights."""
    heights = tree.heights
    if heights.size == 0:
        return {'n_leaves': tree.n_leaves, 'n_merges': 0}
    return {
        'n_leaves': tree.n_leaves,
        'n_merges': int(heights.size),
        'min_height': float(heights.min()),
        'max_height': float(heights.max()),
        'mean_height': float(heights.mean()),
        'median_height': float(np.median(heights)),
        'monotonic': tree.is_monotonic(),
    }


__all__ = [
    'cophenetic_correlation',
    'compare_linkage_methods',
    'cut_tree',
    'silhouette_for_cut',
    'summarize_tree',
]
