"""Agglomerative hierarchical clustering over a DistanceMatrix.

Clusters are merged greedily, closest pair first, and inter-cluster distances
are updated with the Lance-Williams formulas used by scipy's generic linkage
routine. Ties are resolved on the lowest pair of cluster slots, where a
cluster's slot is the smallest leaf index it contains, so results do not
depend on the order scipy's faster algorithms happen to visit pairs in.

The output is a standard scipy linkage matrix, so everything in
scipy.cluster.hierarchy (dendrogram, fcluster, cophenet, ...) works on it.
"""

from collections import namedtuple
from dataclasses import dataclass, field

import numpy as np
from scipy.cluster.hierarchy import (
    cophenet,
    is_monotonic,
    is_valid_linkage,
    leaves_list,
    optimal_leaf_ordering,
    to_tree,
)
from scipy.spatial.distance import squareform
from rich.console import Console

from disttree.core.errors import PreconditionError

console = Console()

LINKAGE_METHODS = ('single', 'complete', 'average', 'centroid', 'ward')
# Methods whose merge heights never decrease.
MONOTONIC_METHODS = ('single', 'complete', 'average', 'ward')

Merge = namedtuple('Merge', ['left', 'right', 'distance', 'size'])

_NEWICK_SPECIAL = set(" \t()[]',:;")


@dataclass(frozen=True, eq=False)
class LinkageTree:
    """Result of a hierarchical clustering run.

    ``Z`` follows scipy's layout: row k merges clusters ``Z[k, 0]`` and
    ``Z[k, 1]`` at height ``Z[k, 2]`` into cluster ``n + k`` holding
    ``Z[k, 3]`` leaves.
    """

    Z: np.ndarray = field(repr=False)
    labels: tuple
    method: str
    optimal_ordering: bool = False

    @property
    def n_leaves(self):
        return len(self.labels)

    @property
    def merges(self):
        return [Merge(int(a), int(b), float(d), int(s)) for a, b, d, s in self.Z]

    @property
    def heights(self):
        return self.Z[:, 2].copy()

    def is_monotonic(self):
        if len(self.Z) == 0:
            return True
        return bool(is_monotonic(self.Z))

    def leaf_order(self):
        """Leaf indices in left-to-right dendrogram order."""
        if self.n_leaves == 1:
            return [0]
        return [int(i) for i in leaves_list(self.Z)]

    def leaf_labels(self):
        return [self.labels[i] for i in self.leaf_order()]

    def cophenetic_matrix(self):
        """Square matrix of merge heights of the smallest cluster holding each pair."""
        if self.n_leaves == 1:
            return np.zeros((1, 1), dtype=float)
        return squareform(cophenet(self.Z))

    def to_newick(self):
        """Newick string with merge heights as node heights."""
        if self.n_leaves == 1:
            return f'{_newick_label(self.labels[0])};'

        def _walk(node, parent_height):
            branch = parent_height - node.dist
            if node.is_leaf():
                return f'{_newick_label(self.labels[node.id])}:{branch:.6g}'
            left = _walk(node.get_left(), node.dist)
            right = _walk(node.get_right(), node.dist)
            return f'({left},{right}):{branch:.6g}'

        root = to_tree(self.Z)
        left = _walk(root.get_left(), root.dist)
        right = _walk(root.get_right(), root.dist)
        return f'({left},{right});'


def _newick_label(label):
    label = str(label)
    if any(ch in _NEWICK_SPECIAL for ch in label):
        return "'" + label.replace("'", "''") + "'"
    return label


def _lance_williams(method, d_xi, d_yi, d_xy, size_x, size_y, size_i):
    """Distance from the merged cluster (x+y) to every other cluster i."""
    if method == 'single':
        return np.minimum(d_xi, d_yi)
    if method == 'complete':
        return np.maximum(d_xi, d_yi)
    size_xy = size_x + size_y
    if method == 'average':
        return (size_x * d_xi + size_y * d_yi) / size_xy
    if method == 'centroid':
        sq = (size_x * d_xi ** 2 + size_y * d_yi ** 2) / size_xy \
            - size_x * size_y * d_xy ** 2 / size_xy ** 2
        return np.sqrt(np.maximum(sq, 0.0))
    # ward
    t = 1.0 / (size_x + size_y + size_i)
    sq = (size_i + size_x) * t * d_xi ** 2 + (size_i + size_y) * t * d_yi ** 2 \
        - size_i * t * d_xy ** 2
    return np.sqrt(np.maximum(sq, 0.0))


def check_method(method):
    if method not in LINKAGE_METHODS:
        raise PreconditionError(
            f"Unsupported linkage method {method!r}; choose one of {list(LINKAGE_METHODS)}"
        )
    return method


def _agglomerate(values, method):
    n = values.shape[0]
    D = np.array(values, dtype=float)
    np.fill_diagonal(D, np.inf)
    alive = np.ones(n, dtype=bool)
    sizes = np.ones(n, dtype=float)
    cluster_id = np.arange(n)
    Z = np.empty((n - 1, 4), dtype=float)

    for k in range(n - 1):
        act = np.flatnonzero(alive)
        rows, cols = np.triu_indices(len(act), k=1)
        # argmin returns the first minimum, i.e. the lowest (row, col) pair
        p = int(np.argmin(D[act[rows], act[cols]]))
        x, y = int(act[rows[p]]), int(act[cols[p]])
        d_xy = D[x, y]

        a, b = sorted((cluster_id[x], cluster_id[y]))
        Z[k] = (a, b, d_xy, sizes[x] + sizes[y])

        others = act[(act != x) & (act != y)]
        if len(others):
            new = _lance_williams(method, D[x, others], D[y, others], d_xy,
                                  sizes[x], sizes[y], sizes[others])
            D[x, others] = new
            D[others, x] = new

        alive[y] = False
        D[y, :] = np.inf
        D[:, y] = np.inf
        sizes[x] += sizes[y]
        cluster_id[x] = n + k

    return Z


def compute_linkage(matrix, method='average', optimal_ordering=False):
    """Cluster a distance matrix hierarchically.

    Parameters:
        matrix: DistanceMatrix
        method: one of 'single', 'complete', 'average', 'centroid', 'ward'
        optimal_ordering: reorder sibling subtrees so adjacent leaves are as
            close as possible (merges and heights are unchanged)

    Returns:
        LinkageTree with n-1 merges

    Raises:
        PreconditionError: unsupported method or invalid matrix
    """
    check_method(method)
    matrix.validate()
    n = len(matrix)

    console.print(f"Computing {method}-linkage hierarchical clustering...")
    if n == 1:
        Z = np.empty((0, 4), dtype=float)
    else:
        Z = _agglomerate(matrix.values, method)
        if optimal_ordering and n > 2:
            Z = optimal_leaf_ordering(Z, matrix.condensed())
        is_valid_linkage(Z, throw=True, name='Z')

    console.print(f"  [green]✓[/green] Linkage computed for {n} entities")
    return LinkageTree(Z=Z, labels=matrix.names, method=method,
                       optimal_ordering=bool(optimal_ordering))


__all__ = [
    'LINKAGE_METHODS',
    'MONOTONIC_METHODS',
    'Merge',
    'LinkageTree',
    'check_method',
    'compute_linkage',
]
