"""disttree: hierarchical clustering of pairwise or embedded distances.

Command line entry point that runs the full pipeline.
"""

import argparse
import sys

from rich.console import Console

from disttree.cluster.linkage import LINKAGE_METHODS
from disttree.core.errors import DistTreeError
from disttree.main import run_pipeline, ClusteringConfig

console = Console()


def build_parser():
    parser = argparse.ArgumentParser(
        prog='disttree',
        description="disttree: distance matrix clustering with cophenetic validation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  disttree --cluster-file groups.clans output_dir/
  disttree --pairs rmsd.tsv output_dir/ --method complete --optimal-ordering
  disttree --pairs rmsd.csv output/ --value-col rmsd --legacy-zero-fill
        """,
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--cluster-file",
        type=str,
        help="Sectioned cluster file (<seq>, <seqgroups>, <pos>)",
    )
    source.add_argument(
        "--pairs",
        type=str,
        help="Pairwise distance table (CSV/TSV with two name columns and a value column)",
    )
    parser.add_argument(
        "output",
        type=str,
        help="Output directory for results",
    )

    parser.add_argument("--name1-col", default='name1', help="First entity column (default: name1)")
    parser.add_argument("--name2-col", default='name2', help="Second entity column (default: name2)")
    parser.add_argument("--value-col", default='value', help="Distance column (default: value)")
    parser.add_argument(
        "--legacy-zero-fill",
        action="store_true",
        help="Fill pairs missing from the table with distance 0 instead of failing",
    )
    parser.add_argument(
        "--name-separator",
        default='|',
        help="Character in group names displayed as ', ' (default: '|')",
    )
    parser.add_argument(
        "--skip-empty-groups",
        action="store_true",
        help="Drop groups without members instead of failing",
    )
    parser.add_argument(
        "--method",
        choices=LINKAGE_METHODS,
        default='average',
        help="Linkage method (default: average)",
    )
    parser.add_argument(
        "--optimal-ordering",
        action="store_true",
        help="Reorder leaves to minimise distances between neighbours",
    )
    parser.add_argument(
        "--compare",
        nargs='+',
        choices=LINKAGE_METHODS,
        default=[],
        help="Also report the cophenetic correlation for these methods",
    )
    parser.add_argument(
        "--n-clusters",
        type=int,
        default=None,
        help="Cut the tree into this many flat clusters and report the silhouette score",
    )
    parser.add_argument("--no-plots", action="store_true", help="Skip figure generation")
    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    config = ClusteringConfig(
        outdir=args.output,
        cluster_file=args.cluster_file,
        pairwise_table=args.pairs,
        name1_col=args.name1_col,
        name2_col=args.name2_col,
        value_col=args.value_col,
        strict_pairs=not args.legacy_zero_fill,
        name_separator=args.name_separator,
        skip_empty_groups=args.skip_empty_groups,
        linkage_method=args.method,
        optimal_ordering=args.optimal_ordering,
        compare_methods=tuple(args.compare),
        n_clusters=args.n_clusters,
        make_plots=not args.no_plots,
    )

    try:
        run_pipeline(config)
    except (DistTreeError, ValueError, OSError) as e:
        console.print(f"\n✗ Pipeline failed: {e}", style="bold red")
        return 1
    console.print("\n✓ Pipeline finished successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
