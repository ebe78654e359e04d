"""Writers for the pipeline's artifacts (matrix, linkage, tree, summary)."""

import json
from pathlib import Path

import numpy as np
import pandas as pd


def write_distance_matrix(matrix, path):
    """Square matrix as CSV, entity names as row index and header."""
    path = Path(path)
    matrix.to_frame().to_csv(path)
    return path


def write_linkage(tree, path):
    """Merge table as TSV: one row per merge, with the new cluster id."""
    path = Path(path)
    n = tree.n_leaves
    df = pd.DataFrame(
        [m._asdict() for m in tree.merges],
        columns=['left', 'right', 'distance', 'size'],
    )
    df.insert(0, 'cluster', np.arange(n, n + len(df)))
    df.to_csv(path, sep='\t', index=False)
    return path


def write_newick(tree, path):
    path = Path(path)
    path.write_text(tree.to_newick() + '\n')
    return path


def _to_builtin(value):
    if isinstance(value, dict):
        return {str(k): _to_builtin(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_builtin(v) for v in value]
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, Path):
        return str(value)
    return value


def write_summary(summary, path):
    path = Path(path)
    path.write_text(json.dumps(_to_builtin(summary), indent=2))
    return path


__all__ = ['write_distance_matrix', 'write_linkage', 'write_newick', 'write_summary']
