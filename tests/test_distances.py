import numpy as np
import pandas as pd
import pytest

from disttree.core.centroids import Centroid
from disttree.core.distances import DistanceMatrix, from_centroids, from_frame, from_pairs
from disttree.core.errors import DegenerateDataError, PreconditionError


def test_from_pairs_symmetric_zero_diagonal():
    m = from_pairs([('a', 'b', 5.0), ('b', 'c', 3.0), ('a', 'c', 4.0)])
    assert m.names == ('a', 'b', 'c')
    assert m.get('a', 'b') == m.get('b', 'a') == 5.0
    assert m.get('a', 'c') == 4.0
    assert m.get('c', 'b') == 3.0
    assert np.diag(m.values).tolist() == [0.0, 0.0, 0.0]
    frame = m.to_frame()
    assert frame.loc['a', 'b'] == 5.0


def test_from_pairs_names_sorted():
    m = from_pairs([('zeta', 'alpha', 1.0)])
    assert m.names == ('alpha', 'zeta')


def test_missing_pair_strict():
    with pytest.raises(DegenerateDataError, match=r"\(a, c\)"):
        from_pairs([('a', 'b', 1.0), ('b', 'c', 2.0)])


def test_missing_pair_legacy_zero_fill():
    m = from_pairs([('a', 'b', 1.0), ('b', 'c', 2.0)], strict=False)
    assert m.get('a', 'c') == 0.0


def test_negative_value_rejected():
    with pytest.raises(PreconditionError):
        from_pairs([('a', 'b', -1.0)])


def test_self_pair():
    m = from_pairs([('a', 'a', 0.0), ('a', 'b', 2.0)])
    assert m.get('a', 'a') == 0.0
    with pytest.raises(PreconditionError):
        from_pairs([('a', 'a', 1.0), ('a', 'b', 2.0)])


def test_repeated_pair_last_wins():
    m = from_pairs([('a', 'b', 1.0), ('b', 'a', 3.0)])
    assert m.get('a', 'b') == 3.0


def test_no_records():
    with pytest.raises(DegenerateDataError):
        from_pairs([])


def test_from_centroids_right_triangle():
    centroids = [
        Centroid('g0', 0, (0.0, 0.0, 0.0), 1),
        Centroid('g1', 1, (3.0, 0.0, 0.0), 1),
        Centroid('g2', 2, (0.0, 4.0, 0.0), 1),
    ]
    m = from_centroids(centroids)
    assert m.names == ('g0', 'g1', 'g2')
    assert m.values[0, 1] == pytest.approx(3.0)
    assert m.values[0, 2] == pytest.approx(4.0)
    assert m.values[1, 2] == pytest.approx(5.0)
    assert np.array_equal(m.values, m.values.T)
    assert np.all(np.diag(m.values) == 0.0)


def test_single_centroid():
    m = from_centroids([Centroid('only', 0, (1.0, 2.0, 3.0), 4)])
    assert m.values.tolist() == [[0.0]]


def test_validate_rejects_bad_matrices():
    with pytest.raises(PreconditionError, match="symmetric"):
        DistanceMatrix(('a', 'b'), [[0, 1], [2, 0]]).validate()
    with pytest.raises(PreconditionError, match="negative"):
        DistanceMatrix(('a', 'b'), [[0, -1], [-1, 0]]).validate()
    with pytest.raises(PreconditionError, match="diagonal"):
        DistanceMatrix(('a', 'b'), [[1, 1], [1, 0]]).validate()
    with pytest.raises(PreconditionError, match="empty"):
        DistanceMatrix((), np.zeros((0, 0))).validate()
    with pytest.raises(PreconditionError, match="square"):
        DistanceMatrix(('a',), np.zeros((1, 2))).validate()
    with pytest.raises(PreconditionError, match="Duplicate"):
        DistanceMatrix(('a', 'a', 'b'), np.zeros((3, 3))).validate()


def test_matrix_is_read_only():
    m = from_pairs([('a', 'b', 1.0)])
    with pytest.raises(ValueError):
        m.values[0, 1] = 2.0


def test_condensed_and_subset():
    m = from_pairs([('a', 'b', 1.0), ('a', 'c', 2.0), ('b', 'c', 3.0)])
    assert m.condensed().tolist() == [1.0, 2.0, 3.0]
    sub = m.subset(['c', 'a'])
    assert sub.names == ('c', 'a')
    assert sub.get('c', 'a') == 2.0


def test_from_frame():
    df = pd.DataFrame([[0, 2], [2, 0]], index=['x', 'y'], columns=['x', 'y'])
    assert from_frame(df).get('x', 'y') == 2.0
    with pytest.raises(PreconditionError):
        from_frame(pd.DataFrame([[0, 2], [2, 0]], index=['x', 'y'], columns=['y', 'x']))
