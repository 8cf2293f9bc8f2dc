import numpy as np
import pytest

from tilewave.adjacency import (
    AdjacencyTable,
    compute_adjacency,
    edge_code_rules,
    edge_codes,
    overlap_agrees,
    overlap_rules,
)
from tilewave.config import Config
from tilewave.sampler import extract
from tilewave.utils import E, N, S, W

LEFT = np.array([[0, 1], [0, 1]])
RIGHT = np.array([[1, 0], [1, 0]])


def test_overlap_compares_shifted_windows():
    rules = overlap_rules([LEFT, RIGHT])

    assert rules[E, 0, 1]
    assert not rules[E, 0, 0]
    assert rules[E, 1, 0]
    assert rules[W, 0, 1]
    assert rules[N, 0, 0]
    assert not rules[N, 0, 1]
    assert rules[S, 1, 1]


def test_windows_without_overlap_are_compatible():
    assert overlap_agrees(np.array([[0]]), np.array([[1]]), 1, 0)
    rules = overlap_rules([np.array([[0]]), np.array([[1]])])
    assert rules.all()


def test_overlap_is_symmetric_for_sampled_windows():
    source = np.random.default_rng(3).integers(0, 3, size=(6, 6))
    patterns, _ = extract(source, Config(n=3))
    table = compute_adjacency(patterns, "overlap")
    assert table.is_symmetric()


def test_edge_codes_are_assigned_first_seen():
    codes, num_codes = edge_codes([LEFT, RIGHT, np.zeros((2, 2), dtype=int)])
    # top, right, bottom, left
    assert codes[0].tolist() == [0, 1, 0, 2]
    assert codes[1].tolist() == [3, 2, 3, 1]
    # An all-zero border is the same border as LEFT's left side.
    assert codes[2].tolist() == [2, 2, 2, 2]
    assert num_codes == 4


def test_edge_codes_match_facing_borders():
    rules = edge_code_rules([LEFT, RIGHT])

    assert rules[E, 0, 1]
    assert not rules[E, 0, 0]
    assert rules[W, 1, 0]
    assert rules[E, 1, 0]
    assert not rules[N, 0, 1]


def test_uniform_tiles_only_admit_themselves():
    rules = edge_code_rules([np.zeros((2, 2)), np.ones((2, 2))])
    for d in range(4):
        assert (rules[d] == np.eye(2, dtype=bool)).all()


@pytest.mark.parametrize("seed", range(5))
def test_edge_code_tables_are_symmetric(seed):
    source = np.random.default_rng(seed).integers(0, 2, size=(6, 8))
    patterns, _ = extract(source, Config(n=2, adjacency="edge-code", rotations=True))
    table = compute_adjacency(patterns, "edge-code")

    assert table.is_symmetric()
    count = table.num_patterns()
    for a in range(count):
        for b in range(count):
            assert table.admits(a, b, "n") == table.admits(b, a, "s")
            assert table.admits(a, b, "e") == table.admits(b, a, "w")


def test_table_lookups():
    table = AdjacencyTable(overlap_rules([LEFT, RIGHT]))
    assert table.num_patterns() == 2
    assert table.allowed(0, "e") == frozenset({1})
    assert table.allowed(0, N) == frozenset({0})
    assert table.admits(0, 1, "e")

    domain = np.array([True, True])
    assert table.allowed_by_domain(domain)[E].tolist() == [True, True]


def test_table_is_read_only():
    rules = overlap_rules([LEFT, RIGHT])
    table = AdjacencyTable(rules)
    with pytest.raises(ValueError):
        table.rules[0, 0, 0] = True
    # The caller's array isn't frozen.
    rules[0, 0, 0] = True


def test_table_shape_is_checked():
    with pytest.raises(ValueError):
        AdjacencyTable(np.zeros((3, 2, 2)))
    with pytest.raises(ValueError):
        AdjacencyTable(np.zeros((4, 2, 3)))


def test_unknown_strategy():
    with pytest.raises(ValueError):
        compute_adjacency([LEFT], "diagonal")
