"""Dendrogram and distance heatmap figures."""

from pathlib import Path

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from scipy.cluster.hierarchy import dendrogram
from rich.console import Console

console = Console()


def plot_dendrogram(tree, outpath, title=None, score=None, figsize=(10, 6)):
    """Plot a LinkageTree as a dendrogram and save it.

    Parameters:
        tree: LinkageTree with at least 2 leaves
        outpath: Path of the PNG to write
        title: Figure title (defaults to the linkage method)
        score: Optional cophenetic correlation shown in the title

    Returns:
        dendro: Dendrogram dict from scipy
    """
    outpath = Path(outpath)
    outpath.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=figsize)
    dendro = dendrogram(
        tree.Z,
        labels=list(tree.labels),
        leaf_rotation=90,
        leaf_font_size=8,
        ax=ax,
    )
    ax.set_ylabel('Distance')
    if title is None:
        title = f'{tree.method.capitalize()}-linkage clustering ({tree.n_leaves} entities)'
    if score is not None:
        title = f'{title}\ncophenetic correlation = {score:.3f}'
    ax.set_title(title)
    fig.tight_layout()
    fig.savefig(outpath, dpi=150)
    plt.close(fig)

    console.print(f"  [green]✓[/green] Dendrogram saved to {outpath}")
    return dendro


def plot_distance_heatmap(matrix, outpath, tree=None, cmap='viridis', figsize=(8, 7)):
    """Heatmap of a DistanceMatrix, rows/columns in tree leaf order if given."""
    outpath = Path(outpath)
    outpath.parent.mkdir(parents=True, exist_ok=True)

    order = tree.leaf_order() if tree is not None else list(range(len(matrix)))
    values = np.asarray(matrix.values)[np.ix_(order, order)]
    labels = [matrix.names[i] for i in order]

    fig, ax = plt.subplots(figsize=figsize)
    im = ax.imshow(values, cmap=cmap, interpolation='nearest')
    ax.set_xticks(range(len(labels)))
    ax.set_yticks(range(len(labels)))
    ax.set_xticklabels(labels, rotation=90, fontsize=7)
    ax.set_yticklabels(labels, fontsize=7)
    fig.colorbar(im, ax=ax, label='Distance')
    fig.tight_layout()
    fig.savefig(outpath, dpi=150)
    plt.close(fig)

    console.print(f"  [green]✓[/green] Heatmap saved to {outpath}")
    return outpath


__all__ = ['plot_dendrogram', 'plot_distance_heatmap']
