import logging

import numpy as np

from tilewave.utils import DIRECTIONS, OFFSETS, direction_index, payload_key

log = logging.getLogger(__name__)


class AdjacencyTable:
    """Per-direction compatibility between patterns.

    `rules[d, a, b]` is True when pattern `b` may sit next to pattern `a` in
    direction `d` (indexed as in `utils.DIRECTIONS`).
    """

    def __init__(self, rules):
        rules = np.array(rules, dtype=bool)
        if rules.ndim != 3 or rules.shape[0] != len(DIRECTIONS) or rules.shape[1] != rules.shape[2]:
            raise ValueError(f"adjacency rules must have shape (4, P, P), got {rules.shape}")
        self.rules = rules
        self.rules.setflags(write=False)

    def num_patterns(self):
        return self.rules.shape[1]

    def admits(self, a, b, direction):
        return bool(self.rules[direction_index(direction), a, b])

    def allowed(self, pattern, direction):
        return frozenset(np.flatnonzero(self.rules[direction_index(direction), pattern]).tolist())

    def allowed_by_domain(self, domain):
        """Union of the rows allowed by every pattern in the boolean `domain`, per direction."""
        return self.rules[:, domain].any(axis=1)

    def is_symmetric(self):
        return all(
            (self.rules[d] == self.rules[(d + 2) % 4].T).all() for d in range(len(DIRECTIONS))
        )

    def __repr__(self):
        return f"AdjacencyTable({self.num_patterns()} patterns, {int(self.rules.sum())} pairs)"


def overlap_agrees(a, b, dx, dy):
    """True if `b` placed at offset (dx, dy) from `a` agrees on their overlap."""
    n = a.shape[0]
    a_part = a[max(0, dy) : min(n, n + dy), max(0, dx) : min(n, n + dx)]
    b_part = b[max(0, -dy) : min(n, n - dy), max(0, -dx) : min(n, n - dx)]
    # No overlap (n == 1) compares two empty arrays, which is compatible.
    return np.array_equal(a_part, b_part)


def overlap_rules(patterns):
    count = len(patterns)
    rules = np.zeros((len(DIRECTIONS), count, count), dtype=bool)

    for d, (dx, dy) in enumerate(OFFSETS):
        for a, frm in enumerate(patterns):
            for b, to in enumerate(patterns):
                rules[d, a, b] = overlap_agrees(frm, to, dx, dy)

    return rules


def borders(pattern):
    # top and bottom read left to right, right and left read top to bottom.
    return [pattern[0], pattern[:, -1], pattern[-1], pattern[:, 0]]


def edge_codes(patterns):
    """Assign every border a code, shared by borders with identical content.

    Returns an int array of shape (P, 4) with one code per side (top, right,
    bottom, left) and the number of distinct codes.
    """
    table = {}
    codes = np.zeros((len(patterns), len(DIRECTIONS)), dtype=np.int64)

    for i, pattern in enumerate(patterns):
        for side, border in enumerate(borders(pattern)):
            key = payload_key(border)
            if key not in table:
                table[key] = len(table)
            codes[i, side] = table[key]

    return codes, len(table)


def edge_code_rules(patterns):
    codes, num_codes = edge_codes(patterns)
    log.debug("%d patterns share %d distinct border codes", len(patterns), num_codes)

    rules = np.zeros((len(DIRECTIONS), len(patterns), len(patterns)), dtype=bool)
    for d in range(len(DIRECTIONS)):
        # a's border facing d has to match b's opposite border.
        rules[d] = codes[:, d][:, None] == codes[:, (d + 2) % 4][None, :]
    return rules


STRATEGIES = {
    "overlap": overlap_rules,
    "edge-code": edge_code_rules,
}


def compute_adjacency(patterns, strategy="overlap"):
    if strategy not in STRATEGIES:
        raise ValueError(f"unknown adjacency strategy {strategy!r}")
    return AdjacencyTable(STRATEGIES[strategy](patterns))
