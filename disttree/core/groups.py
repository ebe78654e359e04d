"""Resolve every sequence index to exactly one group.

Indices not claimed by any explicit group fall into an overflow bucket whose
ordinal equals the number of explicit groups. When an index is claimed by
several groups the last declaration wins.
"""

from dataclasses import dataclass, field

import numpy as np

from disttree.core.clusterfile import Group
from disttree.core.errors import MalformedInputError

OVERFLOW_NAME = 'unassigned'


@dataclass(frozen=True, eq=False)
class GroupAssignment:
    """Group ordinal per sequence index, plus display names per ordinal.

    ``names`` has one entry per explicit group followed by the overflow name,
    so ``names[group_of[i]]`` is always defined.
    """

    group_of: np.ndarray = field(repr=False)
    names: tuple

    @property
    def n_explicit(self):
        return len(self.names) - 1

    @property
    def overflow_ordinal(self):
        return self.n_explicit

    @property
    def n_sequences(self):
        return int(self.group_of.shape[0])

    def name_of_ordinal(self, ordinal):
        if 0 <= ordinal < self.n_explicit:
            return self.names[ordinal]
        return OVERFLOW_NAME

    def labels(self):
        """Display name for every sequence index."""
        return [self.name_of_ordinal(int(o)) for o in self.group_of]

    def members(self, ordinal):
        return frozenset(int(i) for i in np.flatnonzero(self.group_of == ordinal))

    def overflow_members(self):
        return self.members(self.overflow_ordinal)

    def resolved_groups(self):
        """Realized groups after precedence is applied, overflow last."""
        return tuple(
            Group(name=self.name_of_ordinal(o), members=self.members(o))
            for o in range(self.n_explicit + 1)
        )


def assign_groups(member_lists, n_sequences, names=None):
    """Build the sequence-index -> group-ordinal table.

    Parameters:
        member_lists: one iterable of sequence indices per explicit group,
            in declaration order
        n_sequences: total number of sequences N
        names: display names per explicit group (defaults to group_<ordinal>)

    Returns:
        GroupAssignment

    Raises:
        MalformedInputError: a member index is outside 0..N-1
    """
    member_lists = [list(m) for m in member_lists]
    n_explicit = len(member_lists)
    names = list(names) if names is not None else []
    display = [
        names[o] if o < len(names) else f'group_{o}'
        for o in range(n_explicit)
    ]

    group_of = np.full(n_sequences, n_explicit, dtype=int)
    for ordinal, members in enumerate(member_lists):
        for idx in members:
            idx = int(idx)
            if not 0 <= idx < n_sequences:
                raise MalformedInputError(
                    f"Group '{display[ordinal]}' declares member {idx}, "
                    f"but only {n_sequences} sequences exist"
                )
            group_of[idx] = ordinal

    group_of.setflags(write=False)
    return GroupAssignment(group_of=group_of, names=tuple(display) + (OVERFLOW_NAME,))


def assign_cluster_file(parsed):
    """Shortcut for assign_groups on a parsed ClusterFile."""
    return assign_groups(parsed.group_members, parsed.n_sequences, names=parsed.group_names)


__all__ = ['OVERFLOW_NAME', 'GroupAssignment', 'assign_groups', 'assign_cluster_file']
