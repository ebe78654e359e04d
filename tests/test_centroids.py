import numpy as np
import pytest

from disttree.core.centroids import compute_centroids
from disttree.core.clusterfile import parse_cluster_text
from disttree.core.distances import from_centroids
from disttree.core.errors import DegenerateDataError, PreconditionError
from disttree.core.groups import assign_cluster_file, assign_groups


def test_centroid_is_member_mean():
    positions = np.array([[0, 0, 0], [2, 0, 0]], dtype=float)
    centroids = compute_centroids(assign_groups([[0, 1]], 2, names=['A']), positions)
    assert len(centroids) == 1
    assert centroids[0].name == 'A'
    assert centroids[0].coords == (1.0, 0.0, 0.0)
    assert centroids[0].size == 2


def test_overflow_gets_a_centroid(clans_text):
    parsed = parse_cluster_text(clans_text)
    centroids = compute_centroids(assign_cluster_file(parsed), parsed.positions)
    assert [c.name for c in centroids] == ['Homo, sapiens', 'unassigned']
    assert centroids[0].coords == pytest.approx((3.0, 0.0, 0.0))
    assert centroids[1].coords == pytest.approx((2.0, 2.0, 0.0))


def test_empty_explicit_group_is_an_error():
    positions = np.zeros((2, 3))
    # 'B' loses its only member to 'C'
    assignment = assign_groups([[0], [1], [1]], 2, names=['A', 'B', 'C'])
    with pytest.raises(DegenerateDataError, match="'B'"):
        compute_centroids(assignment, positions)


def test_empty_explicit_group_can_be_skipped():
    positions = np.zeros((2, 3))
    assignment = assign_groups([[0], [], [1]], 2, names=['A', 'B', 'C'])
    centroids = compute_centroids(assignment, positions, skip_empty=True)
    assert [c.name for c in centroids] == ['A', 'C']


def test_positions_must_match_assignment():
    with pytest.raises(PreconditionError):
        compute_centroids(assign_groups([[0]], 3), np.zeros((2, 3)))


def test_repeated_group_names_are_made_unique():
    positions = np.array([[0, 0, 0], [2, 0, 0], [4, 0, 0]], dtype=float)
    assignment = assign_groups([[0], [1]], 3, names=['A', 'A'])
    centroids = compute_centroids(assignment, positions)
    assert [c.name for c in centroids] == ['A', 'A#1', 'unassigned']


def test_explicit_group_named_like_overflow():
    positions = np.array([[0, 0, 0], [2, 0, 0]], dtype=float)
    assignment = assign_groups([[0]], 2, names=['unassigned'])
    names = [c.name for c in compute_centroids(assignment, positions)]
    assert names == ['unassigned', 'unassigned#1']
    assert from_centroids(compute_centroids(assignment, positions)).validate().names == tuple(names)
