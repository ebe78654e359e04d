"""Group centroids in the 3-D embedding."""

from dataclasses import dataclass

import numpy as np
from rich.console import Console

from disttree.core.errors import DegenerateDataError, PreconditionError

console = Console()


@dataclass(frozen=True)
class Centroid:
    """Mean position of one group's members."""

    name: str
    ordinal: int
    coords: tuple
    size: int


def compute_centroids(assignment, positions, skip_empty=False):
    """Compute the per-axis mean position of every group.

    Parameters:
        assignment: GroupAssignment covering every sequence index
        positions: (N, 3) array, row i is the position of sequence i
        skip_empty: drop explicit groups without members instead of failing

    Returns:
        tuple of Centroid, in group-ordinal order (overflow last)

    Raises:
        PreconditionError: positions do not match the assignment length
        DegenerateDataError: an explicit group has no members and
            skip_empty is False

    Notes:
        - An empty overflow group is always dropped; it only means every
          sequence was claimed by an explicit group.
        - A name already taken by an earlier group becomes "<name>#<ordinal>".
    """
    positions = np.asarray(positions, dtype=float)
    if positions.ndim != 2 or positions.shape[1] != 3:
        raise PreconditionError(f"Positions must have shape (N, 3), got {positions.shape}")
    if positions.shape[0] != assignment.n_sequences:
        raise PreconditionError(
            f"{positions.shape[0]} positions for {assignment.n_sequences} assigned sequences"
        )

    centroids = []
    used_names = set()
    for ordinal in range(assignment.n_explicit + 1):
        mask = assignment.group_of == ordinal
        size = int(mask.sum())
        name = assignment.name_of_ordinal(ordinal)
        if size == 0:
            if ordinal == assignment.overflow_ordinal:
                continue
            if not skip_empty:
                raise DegenerateDataError(
                    f"Group '{name}' has no members; its centroid is undefined"
                )
            console.print(f"  [yellow]⚠[/yellow] Skipping empty group '{name}'")
            continue
        if name in used_names:
            unique = f"{name}#{ordinal}"
            console.print(f"  [yellow]⚠[/yellow] Group name '{name}' is used more than once; "
                          f"renamed group {ordinal} to '{unique}'")
            name = unique
        used_names.add(name)
        mean = positions[mask].mean(axis=0)
        centroids.append(Centroid(
            name=name,
            ordinal=ordinal,
            coords=tuple(float(c) for c in mean),
            size=size,
        ))
    return tuple(centroids)


__all__ = ['Centroid', 'compute_centroids']
