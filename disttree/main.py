"""disttree pipeline - main orchestrator

Six-step distance-matrix clustering pipeline:
1. Input (cluster file or pairwise table)
2. Groups & centroids (cluster file only)
3. Distance matrix
4. Hierarchical clustering
5. Validation (cophenetic correlation, method comparison, flat cut)
6. Outputs (tables, Newick tree, figures, summary)
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, Tuple

from rich.console import Console

from disttree.config_utils import validate_config, print_config_summary
from disttree.core.clusterfile import DEFAULT_NAME_SEPARATOR, parse_cluster_file
from disttree.core.groups import assign_cluster_file
from disttree.core.centroids import compute_centroids
from disttree.core.errors import DegenerateDataError
from disttree.core.distances import from_pairs, from_centroids
from disttree.core.input import (
    DEFAULT_NAME1_COL,
    DEFAULT_NAME2_COL,
    DEFAULT_VALUE_COL,
    load_pairwise_triples,
)
from disttree.core.output import write_distance_matrix, write_linkage, write_newick, write_summary
from disttree.cluster.linkage import compute_linkage
from disttree.cluster.validation import (
    cophenetic_correlation,
    compare_linkage_methods,
    cut_tree,
    silhouette_for_cut,
    summarize_tree,
)
from disttree.visualization.dendrogram import plot_dendrogram, plot_distance_heatmap

console = Console()


@dataclass
class ClusteringConfig:
    """Configuration for the clustering pipeline."""

    # Required
    outdir: str

    # Input: exactly one of these
    cluster_file: Optional[str] = None
    pairwise_table: Optional[str] = None

    # Pairwise table columns
    name1_col: str = DEFAULT_NAME1_COL
    name2_col: str = DEFAULT_NAME2_COL
    value_col: str = DEFAULT_VALUE_COL
    strict_pairs: bool = True  # False zero-fills unmeasured pairs

    # Cluster file
    name_separator: str = DEFAULT_NAME_SEPARATOR
    skip_empty_groups: bool = False

    # Clustering
    linkage_method: str = 'average'
    optimal_ordering: bool = False
    compare_methods: Tuple[str, ...] = field(default_factory=tuple)
    n_clusters: Optional[int] = None

    # General
    make_plots: bool = True

    @property
    def source(self):
        return 'cluster_file' if self.cluster_file else 'pairwise_table'


class ClusteringPipeline:
    """Runs the steps for one input and one configuration."""

    def __init__(self, config: ClusteringConfig):
        self.config = config
        self.outdir = Path(config.outdir)

        self.results: Dict[str, Any] = {
            'step_1_input': {},
            'step_2_groups': {},
            'step_3_matrix': {},
            'step_4_linkage': {},
            'step_5_validation': {},
            'step_6_outputs': {},
        }

    def run(self):
        """Execute the full pipeline."""
        validate_config(self.config)
        print_config_summary(self.config)
        self.outdir.mkdir(parents=True, exist_ok=True)

        console.print("[bold cyan]═══════════════════════════════════════════════════════════[/bold cyan]")
        console.print("[bold cyan]disttree - distance matrix clustering[/bold cyan]")
        console.print("[bold cyan]═══════════════════════════════════════════════════════════[/bold cyan]\n")

        try:
            self._step_1_input()
            if self.config.source == 'cluster_file':
                self._step_2_groups_and_centroids()
            self._step_3_distance_matrix()
            self._step_4_linkage()
            self._step_5_validation()
            self._step_6_outputs()
        except Exception as e:
            console.print(f"\n[bold red]✗[/bold red] Pipeline failed: {e}")
            raise

        console.print("\n[bold green]✓[/bold green] Pipeline completed successfully!")
        console.print(f"[bold]Output directory:[/bold] {self.outdir}")
        return self.results

    def _step_1_input(self):
        console.print("\n[bold]STEP 1: Input[/bold]")
        console.print("─" * 60)

        if self.config.source == 'cluster_file':
            parsed = parse_cluster_file(self.config.cluster_file,
                                        name_separator=self.config.name_separator)
            self.results['step_1_input'] = {'cluster_file': parsed}
        else:
            triples = load_pairwise_triples(
                self.config.pairwise_table,
                name1_col=self.config.name1_col,
                name2_col=self.config.name2_col,
                value_col=self.config.value_col,
            )
            self.results['step_1_input'] = {'triples': triples}

    def _step_2_groups_and_centroids(self):
        console.print("\n[bold]STEP 2: Groups & Centroids[/bold]")
        console.print("─" * 60)

        parsed = self.results['step_1_input']['cluster_file']
        assignment = assign_cluster_file(parsed)
        overflow = assignment.overflow_members()
        console.print(f"  {assignment.n_explicit} explicit groups, "
                      f"{len(overflow)} unassigned sequences")

        centroids = compute_centroids(assignment, parsed.positions,
                                      skip_empty=self.config.skip_empty_groups)
        for c in centroids:
            console.print(f"    • {c.name} (n={c.size}): "
                          f"({c.coords[0]:.3f}, {c.coords[1]:.3f}, {c.coords[2]:.3f})")

        self.results['step_2_groups'] = {
            'assignment': assignment,
            'centroids': centroids,
        }

    def _step_3_distance_matrix(self):
        console.print("\n[bold]STEP 3: Distance Matrix[/bold]")
        console.print("─" * 60)

        if self.config.source == 'cluster_file':
            matrix = from_centroids(self.results['step_2_groups']['centroids'])
        else:
            matrix = from_pairs(self.results['step_1_input']['triples'],
                                strict=self.config.strict_pairs)
        matrix.validate()
        console.print(f"  {len(matrix)} x {len(matrix)} matrix")
        self.results['step_3_matrix'] = {'matrix': matrix}

    def _step_4_linkage(self):
        console.print("\n[bold]STEP 4: Hierarchical Clustering[/bold]")
        console.print("─" * 60)

        matrix = self.results['step_3_matrix']['matrix']
        tree = compute_linkage(matrix, method=self.config.linkage_method,
                               optimal_ordering=self.config.optimal_ordering)
        analysis = summarize_tree(tree)
        if analysis['n_merges']:
            console.print(f"  Merge heights: {analysis['min_height']:.3f} - {analysis['max_height']:.3f}")
        self.results['step_4_linkage'] = {'tree': tree, 'analysis': analysis}

    def _step_5_validation(self):
        console.print("\n[bold]STEP 5: Validation[/bold]")
        console.print("─" * 60)

        matrix = self.results['step_3_matrix']['matrix']
        tree = self.results['step_4_linkage']['tree']

        try:
            score = cophenetic_correlation(tree, matrix)
        except DegenerateDataError as e:
            score = None
            console.print(f"  [yellow]⚠[/yellow] No cophenetic correlation: {e}")
        else:
            console.print(f"  Cophenetic correlation ({tree.method}): {score:.4f}")

        method_scores = None
        if self.config.compare_methods and score is not None:
            try:
                method_scores = compare_linkage_methods(
                    matrix,
                    methods=self.config.compare_methods,
                    optimal_ordering=self.config.optimal_ordering,
                )
            except DegenerateDataError as e:
                console.print(f"  [yellow]⚠[/yellow] Method comparison skipped: {e}")
            else:
                for method, s in method_scores.items():
                    console.print(f"    • {method}: {s:.4f}")

        flat = None
        if self.config.n_clusters is not None:
            labels = cut_tree(tree, n_clusters=self.config.n_clusters)
            flat = {
                'labels': dict(zip(tree.labels, labels.tolist())),
                'silhouette': silhouette_for_cut(matrix, labels),
            }
            sil = flat['silhouette']
            console.print(f"  Cut into {self.config.n_clusters} clusters, silhouette: "
                          f"{'n/a' if sil is None else f'{sil:.4f}'}")

        self.results['step_5_validation'] = {
            'cophenetic_correlation': score,
            'method_scores': method_scores,
            'flat_clusters': flat,
        }

    def _step_6_outputs(self):
        console.print("\n[bold]STEP 6: Outputs[/bold]")
        console.print("─" * 60)

        matrix = self.results['step_3_matrix']['matrix']
        tree = self.results['step_4_linkage']['tree']
        validation = self.results['step_5_validation']

        outputs = {
            'matrix': write_distance_matrix(matrix, self.outdir / 'distance_matrix.csv'),
            'linkage': write_linkage(tree, self.outdir / 'linkage.tsv'),
            'newick': write_newick(tree, self.outdir / 'tree.nwk'),
        }
        if self.config.make_plots and tree.n_leaves > 1:
            outputs['dendrogram'] = self.outdir / 'dendrogram.png'
            plot_dendrogram(tree, outputs['dendrogram'],
                            score=validation['cophenetic_correlation'])
            outputs['heatmap'] = plot_distance_heatmap(matrix, self.outdir / 'distance_heatmap.png',
                                                       tree=tree)

        summary = {
            'source': self.config.source,
            'input': self.config.cluster_file or self.config.pairwise_table,
            'n_entities': len(matrix),
            'linkage_method': tree.method,
            'optimal_ordering': tree.optimal_ordering,
            'cophenetic_correlation': validation['cophenetic_correlation'],
            'method_scores': validation['method_scores'],
            'leaf_order': tree.leaf_labels(),
            'tree': self.results['step_4_linkage']['analysis'],
        }
        if validation['flat_clusters'] is not None:
            summary['flat_clusters'] = validation['flat_clusters']
        outputs['summary'] = write_summary(summary, self.outdir / 'summary.json')

        for key, path in outputs.items():
            console.print(f"  {key}: {path}")
        self.results['step_6_outputs'] = {'paths': outputs, 'summary': summary}


def run_pipeline(config: ClusteringConfig) -> Dict[str, Any]:
    """Run the complete clustering pipeline.

    Parameters:
        config: ClusteringConfig object with pipeline settings

    Returns:
        dict: Results from every step
    """
    pipeline = ClusteringPipeline(config)
    return pipeline.run()


__all__ = [
    'ClusteringConfig',
    'ClusteringPipeline',
    'run_pipeline',
]
