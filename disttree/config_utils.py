"""Configuration validation and helper utilities for the pipeline."""

from pathlib import Path
from rich.console import Console

from disttree.cluster.linkage import LINKAGE_METHODS

console = Console()


def validate_config(config):
    """Validate ClusteringConfig object.

    Parameters:
        config: ClusteringConfig instance

    Raises:
        ValueError: If configuration is invalid
    """
    errors = []

    if not config.outdir:
        errors.append("outdir is required")

    # Exactly one input source
    if bool(config.cluster_file) == bool(config.pairwise_table):
        errors.append("exactly one of cluster_file or pairwise_table is required")
    elif config.cluster_file and not Path(config.cluster_file).exists():
        errors.append(f"Cluster file not found: {config.cluster_file}")
    elif config.pairwise_table and not Path(config.pairwise_table).exists():
        errors.append(f"Pairwise table not found: {config.pairwise_table}")

    if config.linkage_method not in LINKAGE_METHODS:
        errors.append(f"linkage_method must be one of: {list(LINKAGE_METHODS)}")

    for method in config.compare_methods:
        if method not in LINKAGE_METHODS:
            errors.append(f"compare_methods entry {method!r} must be one of: {list(LINKAGE_METHODS)}")

    if config.n_clusters is not None and config.n_clusters < 1:
        errors.append("n_clusters must be >= 1")

    if len({config.name1_col, config.name2_col, config.value_col}) < 3:
        errors.append("name1_col, name2_col and value_col must be distinct")

    if errors:
        console.print("[bold red]Configuration Errors:[/bold red]")
        for error in errors:
            console.print(f"  ✗ {error}")
        raise ValueError(f"Invalid configuration: {len(errors)} error(s)")

    console.print("[green]✓[/green] Configuration validated")


def print_config_summary(config):
    """Print a summary of the configuration."""
    console.print("\n[bold]Configuration Summary:[/bold]")
    console.print(f"  Input ({config.source}): {config.cluster_file or config.pairwise_table}")
    console.print(f"  Output: {config.outdir}")
    if config.source == 'pairwise_table':
        console.print("\n  [bold]Pairwise table:[/bold]")
        console.print(f"    columns: {config.name1_col}, {config.name2_col}, {config.value_col}")
        console.print(f"    missing pairs: {'error' if config.strict_pairs else 'fill with 0'}")
    else:
        console.print("\n  [bold]Cluster file:[/bold]")
        console.print(f"    name separator: {config.name_separator!r}")
        console.print(f"    empty groups: {'skip' if config.skip_empty_groups else 'error'}")
    console.print("\n  [bold]Clustering:[/bold]")
    console.print(f"    method: {config.linkage_method}")
    console.print(f"    optimal ordering: {config.optimal_ordering}")
    console.print(f"    compare methods: {', '.join(config.compare_methods) or 'none'}")
    console.print(f"    flat cut: {config.n_clusters if config.n_clusters else 'none'}")


__all__ = [
    'validate_config',
    'print_config_summary',
]
