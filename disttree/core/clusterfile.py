"""Reader for CLANS-style sectioned cluster files.

The upstream sequence-clustering tool writes a plain text file made of tagged
sections. Three of them are used here:

    <seq>        sequence records (one label per line, or FASTA records)
    <seqgroups>  key=value metadata, one block of lines per group
    <pos>        "<index> <x> <y> <z>" embedding coordinates

Everything outside those sections (``sequences=``, ``<param>``, ``<hsp>``...)
is ignored. Sections may come in any order but at most once each.
"""

import math
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from rich.console import Console

from disttree.core.errors import MalformedInputError

console = Console()

SEQ_SECTION = 'seq'
GROUP_SECTION = 'seqgroups'
POS_SECTION = 'pos'
SECTIONS = (SEQ_SECTION, GROUP_SECTION, POS_SECTION)

# Raw group names use this character between fields; shown as ", ".
DEFAULT_NAME_SEPARATOR = '|'

_SEEKING, _COLLECTING, _DONE = 'seeking', 'collecting', 'done'


@dataclass(frozen=True)
class Sequence:
    """One sequence record, indexed by parse order."""

    index: int
    label: str
    residues: str = ''


@dataclass(frozen=True)
class Group:
    """An explicitly declared group of sequence indices."""

    name: str
    members: frozenset
    attributes: tuple = ()  # remaining (key, value) metadata pairs

    def attribute(self, key, default=None):
        for k, v in self.attributes:
            if k == key:
                return v
        return default


@dataclass(frozen=True, eq=False)
class ClusterFile:
    """Parsed content of a cluster file."""

    sequences: tuple
    groups: tuple
    positions: np.ndarray = field(repr=False)

    @property
    def n_sequences(self):
        return len(self.sequences)

    @property
    def group_members(self):
        """Member index lists of the explicit groups, in declaration order."""
        return [sorted(g.members) for g in self.groups]

    @property
    def group_names(self):
        return [g.name for g in self.groups]


def split_sections(lines, sections=SECTIONS):
    """Collect the raw lines of each recognized section.

    Parameters:
        lines: iterable of text lines (newlines optional)
        sections: section tag names to look for

    Returns:
        dict: {section_name: [stripped lines between open and close tag]}
        Sections that never appear map to an empty list.

    Raises:
        MalformedInputError: a section is repeated or never closed
    """
    blocks = {name: [] for name in sections}
    state = {name: _SEEKING for name in sections}
    active = None

    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if active is not None:
            if line == f'</{active}>':
                state[active] = _DONE
                active = None
            else:
                blocks[active].append(line)
            continue

        for name in sections:
            if line == f'<{name}>':
                if state[name] == _DONE:
                    raise MalformedInputError(
                        f"Section <{name}> appears more than once (line {lineno})"
                    )
                state[name] = _COLLECTING
                active = name
                break

    if active is not None:
        raise MalformedInputError(
            f"Unterminated section <{active}>: end of input reached before </{active}>"
        )
    return blocks


def parse_sequences(block):
    """Turn the <seq> block into Sequence records.

    A block containing FASTA headers yields one Sequence per header, with the
    following lines joined as residues. Otherwise every non-empty line is one
    Sequence labelled with the line itself.
    """
    lines = [ln for ln in block if ln]
    if not any(ln.startswith('>') for ln in lines):
        return tuple(Sequence(index=i, label=ln) for i, ln in enumerate(lines))

    records = []
    for ln in lines:
        if ln.startswith('>'):
            records.append([ln[1:].strip(), []])
        elif not records:
            raise MalformedInputError(f"Residue line before first FASTA header: {ln!r}")
        else:
            records[-1][1].append(ln)
    return tuple(
        Sequence(index=i, label=label, residues=''.join(chunks))
        for i, (label, chunks) in enumerate(records)
    )


def _parse_numbers(value):
    members = set()
    for tok in value.split(';'):
        tok = tok.strip()
        if not tok:
            continue
        try:
            idx = int(tok)
        except ValueError:
            raise MalformedInputError(f"Group member index is not an integer: {tok!r}") from None
        if idx < 0:
            raise MalformedInputError(f"Group member index is negative: {idx}")
        members.add(idx)
    return frozenset(members)


def parse_groups(block, name_separator=DEFAULT_NAME_SEPARATOR):
    """Turn the <seqgroups> block into Group records.

    A group starts at each ``name=`` line, or at a ``numbers=`` line when the
    current group already has a member list. Groups without a name get
    ``group_<ordinal>``.
    """
    records = []
    current = None

    def _new_record():
        rec = {'name': None, 'members': None, 'attributes': []}
        records.append(rec)
        return rec

    for line in block:
        if not line:
            continue
        key, sep, value = line.partition('=')
        key = key.strip()
        if not sep or not key:
            raise MalformedInputError(f"Group metadata line is not key=value: {line!r}")
        value = value.strip()

        if key == 'name':
            current = _new_record()
            if name_separator:
                value = value.replace(name_separator, ', ')
            current['name'] = value
        elif key == 'numbers':
            if current is None or current['members'] is not None:
                current = _new_record()
            current['members'] = _parse_numbers(value)
        else:
            if current is None:
                current = _new_record()
            current['attributes'].append((key, value))

    return tuple(
        Group(
            name=rec['name'] if rec['name'] else f'group_{ordinal}',
            members=rec['members'] if rec['members'] is not None else frozenset(),
            attributes=tuple(rec['attributes']),
        )
        for ordinal, rec in enumerate(records)
    )


def parse_positions(block):
    """Turn the <pos> block into a read-only (N, 3) coordinate array.

    The leading index on each line is discarded; row i of the result is the
    i-th line of the block.
    """
    rows = []
    for line in block:
        if not line:
            continue
        fields = line.split()
        if len(fields) != 4:
            raise MalformedInputError(
                f"Position line must be '<index> <x> <y> <z>', got {line!r}"
            )
        try:
            coords = [float(v) for v in fields[1:]]
        except ValueError:
            raise MalformedInputError(f"Non-numeric coordinate in position line {line!r}") from None
        if not all(math.isfinite(c) for c in coords):
            raise MalformedInputError(f"Non-finite coordinate in position line {line!r}")
        rows.append(coords)

    positions = np.array(rows, dtype=float).reshape(-1, 3)
    positions.setflags(write=False)
    return positions


def parse_cluster_text(text, name_separator=DEFAULT_NAME_SEPARATOR):
    """Parse the content of a cluster file.

    Parameters:
        text: full file content as a string
        name_separator: character in raw group names to display as ", "

    Returns:
        ClusterFile

    Raises:
        MalformedInputError: bad section structure, bad field line, or a
            position count that differs from the sequence count

    When the <seq> block holds FASTA records, positions are counted against
    the records (one per ">" header), not against the lines of the block.
    """
    blocks = split_sections(text.splitlines())
    sequences = parse_sequences(blocks[SEQ_SECTION])
    groups = parse_groups(blocks[GROUP_SECTION], name_separator=name_separator)
    positions = parse_positions(blocks[POS_SECTION])

    if positions.shape[0] != len(sequences):
        raise MalformedInputError(
            f"Found {positions.shape[0]} positions for {len(sequences)} sequences"
        )
    return ClusterFile(sequences=sequences, groups=groups, positions=positions)


def parse_cluster_file(path, name_separator=DEFAULT_NAME_SEPARATOR):
    """Read and parse a UTF-8 cluster file from disk."""
    path = Path(path)
    parsed = parse_cluster_text(path.read_text(encoding='utf-8'), name_separator=name_separator)
    console.print(
        f"  Parsed {path.name}: {parsed.n_sequences} sequences, "
        f"{len(parsed.groups)} groups"
    )
    return parsed


__all__ = [
    'Sequence',
    'Group',
    'ClusterFile',
    'SECTIONS',
    'DEFAULT_NAME_SEPARATOR',
    'split_sections',
    'parse_sequences',
    'parse_groups',
    'parse_positions',
    'parse_cluster_text',
    'parse_cluster_file',
]
