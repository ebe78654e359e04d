import json

import pytest

from disttree.cli import main
from disttree.main import ClusteringConfig, run_pipeline


def test_cluster_file_pipeline(tmp_path, pipeline_clans):
    outdir = tmp_path / "out"
    config = ClusteringConfig(
        outdir=str(outdir),
        cluster_file=str(pipeline_clans),
        linkage_method='average',
        optimal_ordering=True,
        compare_methods=('single', 'complete'),
        n_clusters=2,
        make_plots=False,
    )
    results = run_pipeline(config)

    centroids = results['step_2_groups']['centroids']
    assert [c.name for c in centroids] == ['A', 'B', 'C', 'unassigned']
    assert centroids[0].coords == pytest.approx((1.0, 0.0, 0.0))

    matrix = results['step_3_matrix']['matrix']
    assert matrix.get('A', 'B') == pytest.approx(10.0)

    tree = results['step_4_linkage']['tree']
    assert len(tree.merges) == 3

    score = results['step_5_validation']['cophenetic_correlation']
    assert -1.0 <= score <= 1.0
    assert set(results['step_5_validation']['method_scores']) == {'single', 'complete'}

    summary = json.loads((outdir / 'summary.json').read_text())
    assert summary['n_entities'] == 4
    assert summary['cophenetic_correlation'] == pytest.approx(score)
    assert (outdir / 'distance_matrix.csv').exists()
    assert (outdir / 'linkage.tsv').exists()
    assert (outdir / 'tree.nwk').read_text().strip().endswith(';')


def test_pairwise_pipeline_with_plots(tmp_path, pairs_tsv):
    outdir = tmp_path / "out"
    results = run_pipeline(ClusteringConfig(outdir=str(outdir), pairwise_table=str(pairs_tsv)))
    assert results['step_3_matrix']['matrix'].names == ('a', 'b', 'c', 'd')
    assert (outdir / 'dendrogram.png').exists()
    assert (outdir / 'distance_heatmap.png').exists()


def test_two_group_pipeline_writes_outputs_without_score(tmp_path):
    clans = tmp_path / "two.clans"
    clans.write_text("sequences=3\n<seq>\ns0\ns1\ns2\n</seq>\n"
                     "<seqgroups>\nname=A\nnumbers=0;1;\n</seqgroups>\n"
                     "<pos>\n0 0 0 0\n1 2 0 0\n2 5 4 0\n</pos>\n")
    outdir = tmp_path / "out"
    results = run_pipeline(ClusteringConfig(outdir=str(outdir), cluster_file=str(clans),
                                            compare_methods=('single',)))

    assert results['step_3_matrix']['matrix'].names == ('A', 'unassigned')
    assert results['step_5_validation']['cophenetic_correlation'] is None
    assert results['step_5_validation']['method_scores'] is None

    summary = json.loads((outdir / 'summary.json').read_text())
    assert summary['cophenetic_correlation'] is None
    assert summary['n_entities'] == 2
    assert (outdir / 'distance_matrix.csv').exists()
    assert (outdir / 'tree.nwk').exists()
    assert (outdir / 'dendrogram.png').exists()


def test_invalid_config(tmp_path, pairs_tsv):
    config = ClusteringConfig(outdir=str(tmp_path), pairwise_table=str(pairs_tsv),
                              linkage_method='median')
    with pytest.raises(ValueError, match="Invalid configuration"):
        run_pipeline(config)


def test_both_sources_rejected(tmp_path, pairs_tsv, pipeline_clans):
    config = ClusteringConfig(outdir=str(tmp_path), pairwise_table=str(pairs_tsv),
                              cluster_file=str(pipeline_clans))
    with pytest.raises(ValueError):
        run_pipeline(config)


def test_cli_success(tmp_path, pairs_tsv):
    assert main(['--pairs', str(pairs_tsv), str(tmp_path / 'out'), '--no-plots',
                 '--method', 'complete']) == 0


def test_cli_incomplete_pairs(tmp_path):
    p = tmp_path / "partial.tsv"
    p.write_text("name1\tname2\tvalue\na\tb\t1\nb\tc\t2\nc\td\t4\n")
    outdir = tmp_path / 'out'
    assert main(['--pairs', str(p), str(outdir), '--no-plots']) == 1
    assert main(['--pairs', str(p), str(outdir), '--no-plots', '--legacy-zero-fill']) == 0
