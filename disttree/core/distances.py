"""Distance matrix construction.

Two sources feed the same DistanceMatrix type:
- sparse pairwise records ``(name1, name2, value)``, e.g. RMSD values from a
  structural-alignment run
- group centroids from the cluster-file embedding (Euclidean distances)
"""

import math
from dataclasses import dataclass, field
from itertools import combinations

import numpy as np
import pandas as pd
from scipy.spatial.distance import pdist, squareform
from rich.console import Console

from disttree.core.errors import DegenerateDataError, PreconditionError

console = Console()

# Tolerance used for the symmetry and zero-diagonal checks.
ATOL = 1e-9


@dataclass(frozen=True, eq=False)
class DistanceMatrix:
    """Square, symmetric, zero-diagonal distances over named entities."""

    names: tuple
    values: np.ndarray = field(repr=False)

    def __post_init__(self):
        values = np.array(self.values, dtype=float)
        values.setflags(write=False)
        object.__setattr__(self, 'names', tuple(self.names))
        object.__setattr__(self, 'values', values)

    def __len__(self):
        return len(self.names)

    @property
    def shape(self):
        return self.values.shape

    def index_of(self, name):
        try:
            return self.names.index(name)
        except ValueError:
            raise KeyError(name) from None

    def get(self, a, b):
        return float(self.values[self.index_of(a), self.index_of(b)])

    def condensed(self):
        """Upper triangle as a flat vector, scipy's condensed layout."""
        return squareform(np.array(self.values), checks=False)

    def to_frame(self):
        return pd.DataFrame(self.values, index=list(self.names), columns=list(self.names))

    def subset(self, names):
        idx = [self.index_of(n) for n in names]
        return DistanceMatrix(names=tuple(names), values=self.values[np.ix_(idx, idx)])

    def validate(self):
        """Check the matrix is usable for clustering.

        Raises:
            PreconditionError: empty, non-square, label/shape mismatch,
                duplicate names, non-finite, negative, non-symmetric or
                non-zero diagonal
        """
        validate_distance_array(self.values, n_names=len(self.names))
        duplicates = sorted({n for n in self.names if self.names.count(n) > 1})
        if duplicates:
            raise PreconditionError(f"Duplicate entity names in distance matrix: {duplicates}")
        return self


def validate_distance_array(values, n_names=None):
    """Raise PreconditionError unless ``values`` is a valid distance matrix."""
    values = np.asarray(values, dtype=float)
    if values.ndim != 2 or values.shape[0] != values.shape[1]:
        raise PreconditionError(f"Distance matrix must be square, got shape {values.shape}")
    if values.shape[0] == 0:
        raise PreconditionError("Distance matrix is empty")
    if n_names is not None and n_names != values.shape[0]:
        raise PreconditionError(f"{n_names} names for a {values.shape[0]}x{values.shape[0]} matrix")
    if not np.isfinite(values).all():
        raise PreconditionError("Distance matrix contains non-finite values")
    if (values < 0).any():
        raise PreconditionError("Distance matrix contains negative values")
    if not np.allclose(values, values.T, rtol=0, atol=ATOL):
        raise PreconditionError("Distance matrix is not symmetric")
    if not np.allclose(np.diag(values), 0.0, rtol=0, atol=ATOL):
        raise PreconditionError("Distance matrix diagonal is not zero")


def from_pairs(triples, strict=True):
    """Build a distance matrix from pairwise records.

    Parameters:
        triples: iterable of (name1, name2, value)
        strict: raise when some pair of names was never measured; when False
            the missing pairs are left at 0 (legacy behaviour) with a warning

    Returns:
        DistanceMatrix over the sorted union of names

    Raises:
        PreconditionError: negative/non-finite value, or a self pair with a
            non-zero value
        DegenerateDataError: no records, or (strict) unmeasured pairs
    """
    records = []
    for a, b, value in triples:
        value = float(value)
        if not math.isfinite(value) or value < 0:
            raise PreconditionError(f"Invalid distance {value!r} for pair ({a}, {b})")
        if a == b and value != 0:
            raise PreconditionError(f"Self pair ({a}, {a}) has non-zero distance {value}")
        records.append((str(a), str(b), value))

    if not records:
        raise DegenerateDataError("No pairwise records to build a distance matrix from")

    names = tuple(sorted({n for a, b, _ in records for n in (a, b)}))
    index = {n: i for i, n in enumerate(names)}
    n = len(names)
    values = np.zeros((n, n), dtype=float)
    seen = np.zeros((n, n), dtype=bool)
    np.fill_diagonal(seen, True)

    n_conflicts = 0
    for a, b, value in records:
        i, j = index[a], index[b]
        if seen[i, j] and i != j and values[i, j] != value:
            n_conflicts += 1
        values[i, j] = values[j, i] = value
        seen[i, j] = seen[j, i] = True
    if n_conflicts:
        console.print(
            f"  [yellow]⚠[/yellow] {n_conflicts} pair(s) reported more than once with "
            "different values; kept the last value"
        )

    missing = [(names[i], names[j]) for i, j in combinations(range(n), 2) if not seen[i, j]]
    if missing:
        if strict:
            preview = ', '.join(f'({a}, {b})' for a, b in missing[:5])
            more = f' and {len(missing) - 5} more' if len(missing) > 5 else ''
            raise DegenerateDataError(
                f"{len(missing)} pair(s) were never measured: {preview}{more}"
            )
        console.print(
            f"  [yellow]⚠[/yellow] {len(missing)} unmeasured pair(s) filled with distance 0"
        )

    return DistanceMatrix(names=names, values=values)


def from_centroids(centroids):
    """Euclidean distance matrix between group centroids.

    Parameters:
        centroids: sequence of Centroid (or any object with name and coords)

    Returns:
        DistanceMatrix with names in the given order
    """
    centroids = list(centroids)
    if not centroids:
        raise DegenerateDataError("No centroids to build a distance matrix from")
    coords = np.array([c.coords for c in centroids], dtype=float)
    if len(centroids) == 1:
        values = np.zeros((1, 1), dtype=float)
    else:
        values = squareform(pdist(coords, metric='euclidean'))
    return DistanceMatrix(names=tuple(c.name for c in centroids), values=values)


def from_frame(df):
    """Wrap a square pandas DataFrame (index == columns) as a DistanceMatrix."""
    if list(df.index) != list(df.columns):
        raise PreconditionError("Distance table rows and columns must carry the same names")
    matrix = DistanceMatrix(names=tuple(str(n) for n in df.index), values=df.to_numpy(dtype=float))
    return matrix.validate()


__all__ = [
    'DistanceMatrix',
    'validate_distance_array',
    'from_pairs',
    'from_centroids',
    'from_frame',
]
