import logging

import numpy as np

from tilewave import sampler
from tilewave.adjacency import AdjacencyTable, compute_adjacency
from tilewave.config import Config
from tilewave.utils import DIRECTIONS, direction_index, flip, rot_cw, rotate

log = logging.getLogger(__name__)


def top_left(payload):
    # Overlapping windows only contribute their origin value to the output.
    return payload[:1, :1]


def whole_tile(payload):
    return payload


class Catalog:
    """Immutable pattern set: id -> payload, with optional weights.

    `represent` decides what a cell holding a pattern looks like (`top_left`
    for sampled windows, `whole_tile` for tiles). `draw` is the collaborator's
    callback, `draw(block, x, y)`, used by `render`.
    """

    def __init__(self, payloads, weights=None, represent=whole_tile, draw=None):
        self.payloads = tuple(np.array(payload) for payload in payloads)
        for payload in self.payloads:
            payload.setflags(write=False)

        if weights is not None:
            weights = tuple(float(w) for w in weights)
            if len(weights) != len(self.payloads):
                raise ValueError(f"got {len(weights)} weights for {len(self.payloads)} patterns")
            if any(w <= 0 for w in weights):
                raise ValueError("pattern weights must be positive")
        self.weights = weights
        self.represent = represent
        self.draw = draw

    @property
    def weighted(self):
        return self.weights is not None

    def count(self):
        return len(self.payloads)

    def __len__(self):
        return len(self.payloads)

    def payload(self, id):
        return self.payloads[id]

    def weight(self, id):
        return 1.0 if self.weights is None else self.weights[id]

    def block(self, id):
        return self.represent(self.payloads[id])

    def block_shape(self):
        if not self.payloads:
            return (1, 1)
        return self.block(0).shape

    def render(self, id, x, y, draw=None):
        draw = draw or self.draw
        if draw is None:
            raise ValueError("no draw callback to render with")
        return draw(self.block(id), x, y)

    def __repr__(self):
        return f"Catalog({len(self)} patterns, weighted={self.weighted})"


def build_catalog(source, config=None):
    """Sample `source` and derive its (Catalog, AdjacencyTable).

    Raises `InvalidSourceDimensions` when the source can't be cut up with the
    configured window or tile size.
    """
    config = config or Config()

    patterns, counts = sampler.extract(source, config)
    if not patterns:
        raise sampler.InvalidSourceDimensions(np.shape(source), config.n, "no patterns found")

    adjacency = compute_adjacency(patterns, config.adjacency)

    catalog = Catalog(
        patterns,
        weights=counts if config.weighted else None,
        represent=top_left if config.sampling == "window" else whole_tile,
    )

    log.info(
        "built catalog of %d patterns (%s adjacency, %d admissible pairs)",
        len(catalog),
        config.adjacency,
        int(adjacency.rules.sum()),
    )
    return catalog, adjacency


def normalize_tags(tags):
    if tags is None:
        return {d: None for d in DIRECTIONS}
    if type(tags) is not dict:
        return {d: tags for d in DIRECTIONS}
    return {d: tags.get(d) for d in DIRECTIONS}


class Tileset:
    """Hand-authored catalog.

    Tiles either carry a tag per side, and connect wherever a side's tag
    equals the facing side's tag of the neighbor, or get connected explicitly
    with `connect`.
    """

    def __init__(self):
        self.payloads = []
        self.weights = []
        self.tags = []
        self.connections = set()

    def num_tiles(self):
        return len(self.payloads)

    def add(self, payload, weight=1.0, tags=None):
        tile = len(self.payloads)
        self.payloads.append(np.atleast_2d(payload))
        self.weights.append(weight)
        self.tags.append(normalize_tags(tags))
        return tile

    def add_mul(self, payload, weight, rots, tags=None):
        """Add `rots` clockwise rotations of a tile, splitting its weight."""
        res = []
        payload = np.atleast_2d(payload)
        tags = normalize_tags(tags)
        for i in range(rots):
            res.append(self.add(rotate(payload, i), weight / rots, tags))
            tags = rot_cw(tags)
        return res

    def connect(self, frm, to, directions=DIRECTIONS):
        for d in directions:
            d = direction_index(d)
            self.connections.add((d, frm, to))
            self.connections.add((flip(d), to, frm))

    def connect_all(self, tile):
        for other in range(self.num_tiles()):
            self.connect(tile, other)

    def rules(self):
        count = self.num_tiles()
        rules = np.zeros((len(DIRECTIONS), count, count), dtype=bool)

        for d, frm, to in self.connections:
            rules[d, frm, to] = True

        for d, side in enumerate(DIRECTIONS):
            facing = flip(side)
            for frm in range(count):
                tag = self.tags[frm][side]
                if tag is None:
                    continue
                for to in range(count):
                    if self.tags[to][facing] == tag:
                        rules[d, frm, to] = True

        return rules

    def build(self, draw=None):
        weights = self.weights
        if len(set(weights)) <= 1:
            weights = None
        catalog = Catalog(self.payloads, weights=weights, represent=whole_tile, draw=draw)
        return catalog, AdjacencyTable(self.rules())
