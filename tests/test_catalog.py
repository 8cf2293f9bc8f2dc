import numpy as np
import pytest

from tilewave.adjacency import AdjacencyTable
from tilewave.catalog import Catalog, Tileset, build_catalog, top_left, whole_tile
from tilewave.config import Config
from tilewave.sampler import InvalidSourceDimensions

BRICKS = np.array(
    [
        [0, 0, 0, 0],
        [0, 1, 0, 1],
        [0, 0, 0, 0],
        [1, 0, 1, 0],
    ]
)


@pytest.mark.parametrize("n", [1, 2, 3])
@pytest.mark.parametrize("rotations", [False, True])
def test_uniform_source_builds_single_pattern_catalog(n, rotations):
    catalog, adjacency = build_catalog(np.ones((6, 6)), Config(n=n, rotations=rotations))
    assert catalog.count() == 1
    assert adjacency.num_patterns() == 1
    assert adjacency.rules.all()


def test_builds_are_deterministic():
    config = Config(n=2, rotations=True)
    first, first_rules = build_catalog(BRICKS, config)
    second, second_rules = build_catalog(BRICKS, config)

    assert len(first) == len(second)
    for a, b in zip(first.payloads, second.payloads):
        assert (a == b).all()
    assert (first_rules.rules == second_rules.rules).all()


def test_invalid_tile_source_builds_nothing():
    with pytest.raises(InvalidSourceDimensions):
        build_catalog(np.zeros((3, 4)), Config(n=2, adjacency="edge-code"))


def test_weights_come_from_occurrences():
    source = np.array([[0, 0, 1]])
    catalog, _ = build_catalog(source, Config(n=1, weighted=True))
    assert catalog.weighted
    assert catalog.weights == (2.0, 1.0)

    catalog, _ = build_catalog(source, Config(n=1))
    assert not catalog.weighted
    assert catalog.weight(1) == 1.0


def test_window_catalogs_render_their_origin():
    catalog, _ = build_catalog(BRICKS, Config(n=2))
    assert catalog.represent is top_left
    assert catalog.block_shape() == (1, 1)

    drawn = []
    catalog.render(0, 3, 4, draw=lambda block, x, y: drawn.append((block.tolist(), x, y)))
    assert drawn == [([[int(catalog.payload(0)[0, 0])]], 3, 4)]


def test_tile_catalogs_render_whole_tiles():
    catalog, _ = build_catalog(BRICKS, Config(n=2, adjacency="edge-code"))
    assert catalog.represent is whole_tile
    assert catalog.block_shape() == (2, 2)


def test_render_needs_a_draw_callback():
    catalog = Catalog([np.zeros((1, 1))])
    with pytest.raises(ValueError):
        catalog.render(0, 0, 0)

    calls = []
    catalog = Catalog([np.zeros((1, 1))], draw=lambda block, x, y: calls.append((x, y)))
    catalog.render(0, 1, 2)
    assert calls == [(1, 2)]


def test_payloads_are_frozen():
    catalog = Catalog([np.zeros((2, 2))])
    with pytest.raises(ValueError):
        catalog.payload(0)[0, 0] = 1


def test_weights_are_validated():
    with pytest.raises(ValueError):
        Catalog([np.zeros((1, 1))], weights=[1.0, 2.0])
    with pytest.raises(ValueError):
        Catalog([np.zeros((1, 1))], weights=[0.0])


def test_tileset_connections_are_mirrored():
    tileset = Tileset()
    a = tileset.add(0)
    b = tileset.add(1)
    tileset.connect(a, b, ["e"])

    catalog, adjacency = tileset.build()
    assert isinstance(adjacency, AdjacencyTable)
    assert adjacency.admits(a, b, "e")
    assert adjacency.admits(b, a, "w")
    assert not adjacency.admits(a, b, "w")
    assert not adjacency.admits(a, a, "e")
    assert catalog.block_shape() == (1, 1)


def test_tileset_connect_all():
    tileset = Tileset()
    a = tileset.add(0)
    tileset.add(1)
    tileset.add(2)
    tileset.connect_all(a)

    _, adjacency = tileset.build()
    assert adjacency.rules[:, a, :].all()
    assert adjacency.rules[:, :, a].all()
    assert not adjacency.admits(1, 2, "n")


def test_tileset_tags_connect_facing_sides():
    tileset = Tileset()
    blank = tileset.add(0, tags="no")
    ends = tileset.add_mul([[1, 0], [0, 0]], 1.0, 4, {"e": "line", "n": "no", "s": "no", "w": "no"})

    _, adjacency = tileset.build()
    east, south, west, north = ends

    assert adjacency.admits(east, west, "e")
    assert adjacency.admits(west, east, "w")
    assert adjacency.admits(south, north, "s")
    assert not adjacency.admits(east, east, "e")
    assert adjacency.admits(blank, east, "n")
    assert not adjacency.admits(blank, east, "w")
    assert adjacency.is_symmetric()


def test_tileset_rotations_rotate_payloads_and_split_weight():
    tileset = Tileset()
    ids = tileset.add_mul([[1, 0], [0, 0]], 1.0, 4)
    assert (tileset.payloads[ids[1]] == np.array([[0, 1], [0, 0]])).all()
    assert tileset.weights == [0.25] * 4

    catalog, _ = tileset.build()
    assert not catalog.weighted

    tileset.add(5, weight=3.0)
    catalog, _ = tileset.build()
    assert catalog.weighted
    assert catalog.weight(4) == 3.0
