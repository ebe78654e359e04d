"""Pairwise distance table loading.

Reads the tabular output of an external pairwise comparison (for example an
RMSD table from a structural-alignment run) and yields the
``(name1, name2, value)`` records consumed by ``distances.from_pairs``.

Supports:
- Tab- or comma-separated files, optionally gzip/xz compressed
- Whitespace-separated files as a last resort
"""

import pandas as pd
from rich.console import Console

from disttree.core.errors import MalformedInputError

console = Console()

DEFAULT_NAME1_COL = 'name1'
DEFAULT_NAME2_COL = 'name2'
DEFAULT_VALUE_COL = 'value'


def _compression_for(path):
    path = str(path)
    if path.endswith('.gz'):
        return 'gzip'
    if path.endswith('.xz'):
        return 'xz'
    return None


def read_pairwise_table(path, required_columns=None):
    """Read a delimited table, trying tab, then comma, then whitespace.

    Parameters:
        path (str): Path to the table (.tsv, .csv, optionally .gz/.xz)
        required_columns (list): Columns that must be present for a separator
            to be accepted

    Returns:
        pandas.DataFrame with every column read as str
    """
    required = set(required_columns or [])
    read_base = {'dtype': str, 'compression': _compression_for(path)}

    for extra in ({'sep': '\t'}, {'sep': ','}):
        try:
            df = pd.read_csv(path, **{**read_base, **extra})
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError):
            continue
        if required.issubset(df.columns) and df.shape[1] > 1:
            return df

    try:
        df = pd.read_csv(path, **{**read_base, 'sep': r'\s+', 'engine': 'python'})
    except pd.errors.EmptyDataError:
        raise MalformedInputError(f"Pairwise table {path} is empty") from None
    if not required.issubset(df.columns):
        missing = sorted(required - set(df.columns))
        raise MalformedInputError(f"Pairwise table {path} is missing column(s): {missing}")
    return df


def frame_to_triples(df, name1_col=DEFAULT_NAME1_COL, name2_col=DEFAULT_NAME2_COL,
                     value_col=DEFAULT_VALUE_COL):
    """Convert a table to a list of (name1, name2, float value) records.

    Raises:
        MalformedInputError: missing columns, empty names or non-numeric values
    """
    missing = [c for c in (name1_col, name2_col, value_col) if c not in df.columns]
    if missing:
        raise MalformedInputError(f"Pairwise table is missing column(s): {missing}")

    sub = df[[name1_col, name2_col, value_col]]
    if sub[[name1_col, name2_col]].isna().to_numpy().any():
        raise MalformedInputError("Pairwise table has rows with an empty entity name")

    values = pd.to_numeric(sub[value_col], errors='coerce')
    bad = values.isna()
    if bad.any():
        first = sub.loc[bad].iloc[0]
        raise MalformedInputError(
            f"{int(bad.sum())} row(s) have a non-numeric {value_col!r}, "
            f"first: ({first[name1_col]}, {first[name2_col]}, {first[value_col]!r})"
        )

    names1 = sub[name1_col].astype(str).str.strip()
    names2 = sub[name2_col].astype(str).str.strip()
    return list(zip(names1, names2, values.astype(float)))


def load_pairwise_triples(path, name1_col=DEFAULT_NAME1_COL, name2_col=DEFAULT_NAME2_COL,
                          value_col=DEFAULT_VALUE_COL):
    """Read a pairwise table from disk and return its records."""
    df = read_pairwise_table(path, required_columns=[name1_col, name2_col, value_col])
    triples = frame_to_triples(df, name1_col, name2_col, value_col)
    console.print(f"  Loaded {len(triples)} pairwise records from {path}")
    return triples


__all__ = [
    'read_pairwise_table',
    'frame_to_triples',
    'load_pairwise_triples',
]
