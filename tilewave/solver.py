import enum
import logging
from collections import deque, namedtuple

import numpy as np

from tilewave import config as defaults
from tilewave import utils
from tilewave.utils import OFFSETS

log = logging.getLogger(__name__)

Cell = namedtuple("Cell", ["x", "y", "domain", "collapsed"])


class CellState(enum.Enum):
    OPEN = "open"
    SINGLETON = "singleton"
    COLLAPSED = "collapsed"
    CONTRADICTION = "contradiction"


class HistorySnapshot:
    """Pre-step state of every cell one collapse touched."""

    def __init__(self, x, y, pattern):
        self.x = x
        self.y = y
        self.pattern = pattern
        # (x, y) -> (domain, collapsed), first touch only.
        self.cells = {}

    def capture(self, grid, x, y):
        if (x, y) not in self.cells:
            self.cells[(x, y)] = (grid.wave[:, y, x].copy(), int(grid.collapsed[y, x]))

    def __repr__(self):
        return f"HistorySnapshot(({self.x}, {self.y}) <- {self.pattern}, {len(self.cells)} cells)"


class Grid:
    """A width x height grid of cells solved one `step()` at a time.

    `wave[p, y, x]` is True while pattern `p` is still admissible at (x, y);
    `collapsed[y, x]` holds the committed pattern or -1.
    """

    def __init__(self, width, height, catalog, adjacency, history=None, rng=None):
        if width < 1 or height < 1:
            raise ValueError(f"grid must be at least 1x1, got {width}x{height}")
        self.width = width
        self.height = height
        self.capacity = defaults.HISTORY if history is None else history
        if self.capacity < 0:
            raise ValueError(f"history capacity can't be negative, got {self.capacity}")
        self.rng = rng or utils.RNG
        self.reset(catalog, adjacency)

    def reset(self, catalog=None, adjacency=None):
        if catalog is None:
            catalog = self.catalog
        if adjacency is None:
            adjacency = self.adjacency

        if len(catalog) == 0:
            raise ValueError("can't solve with an empty catalog")
        if adjacency.num_patterns() != len(catalog):
            raise ValueError(
                f"adjacency covers {adjacency.num_patterns()} patterns, catalog has {len(catalog)}"
            )

        self.catalog = catalog
        self.adjacency = adjacency
        self.wave = np.ones((len(catalog), self.height, self.width), dtype=bool)
        self.collapsed = np.full((self.height, self.width), -1, dtype=np.int64)
        self.history = deque(maxlen=self.capacity)
        self.steps = 0
        self.backtracks = 0

    def num_tiles(self):
        return len(self.catalog)

    def in_bounds(self, x, y):
        return 0 <= x < self.width and 0 <= y < self.height

    # Observe

    def find_lowest_entropy(self):
        """Pick an uncollapsed cell with the smallest domain, or None when done."""
        open_cells = self.collapsed < 0
        if not open_cells.any():
            return None
        counts = self.wave.sum(axis=0)
        lowest = counts[open_cells].min()
        coords = np.argwhere(open_cells & (counts == lowest))
        y, x = coords[self.rng.randrange(len(coords))]
        return int(x), int(y)

    def choose_pattern(self, domain):
        domain = [int(p) for p in domain]
        if not self.catalog.weighted:
            return self.rng.choice(domain)

        total = sum(self.catalog.weight(p) for p in domain)
        draw = self.rng.uniform(0, total)
        running = 0.0
        for pattern in domain:
            running += self.catalog.weight(pattern)
            if running >= draw:
                return pattern
        # Float rounding can leave the running total just short of the draw.
        return domain[-1]

    # Collapse

    def step(self):
        target = self.find_lowest_entropy()
        if target is None:
            return False

        x, y = target
        domain = np.flatnonzero(self.wave[:, y, x])

        if len(domain) == 0:
            log.debug("contradiction at (%d, %d)", x, y)
            if self.history:
                self.unwind()
                self.steps += 1
                return True
            log.warning(
                "stuck at (%d, %d) after %d steps with no history left", x, y, self.steps
            )
            return False

        pattern = self.choose_pattern(domain)
        snapshot = None
        if self.capacity > 0:
            snapshot = HistorySnapshot(x, y, pattern)
            self.history.append(snapshot)

        self.collapse(x, y, pattern, snapshot)
        self.propagate(x, y, snapshot)
        self.steps += 1
        return True

    def collapse(self, x, y, pattern, snapshot=None):
        if snapshot is not None:
            snapshot.capture(self, x, y)
        log.debug("collapsing (%d, %d) to %d", x, y, pattern)
        self.wave[:, y, x] = False
        self.wave[pattern, y, x] = True
        self.collapsed[y, x] = pattern

    # Propagate

    def propagate(self, x, y, snapshot=None):
        """Narrow neighbor domains outwards from (x, y) until nothing changes.

        Returns False if some domain was emptied.
        """
        pending = deque([(x, y)])
        queued = {(x, y)}

        while pending:
            cx, cy = pending.popleft()
            queued.discard((cx, cy))

            source = self.collapsed[cy, cx]
            if source >= 0:
                allowed = self.adjacency.rules[:, source]
            else:
                allowed = self.adjacency.allowed_by_domain(self.wave[:, cy, cx])

            for d, (dx, dy) in enumerate(OFFSETS):
                nx, ny = cx + dx, cy + dy
                if not self.in_bounds(nx, ny) or self.collapsed[ny, nx] >= 0:
                    continue

                current = self.wave[:, ny, nx]
                narrowed = current & allowed[d]
                if (narrowed == current).all():
                    continue

                if snapshot is not None:
                    snapshot.capture(self, nx, ny)
                self.wave[:, ny, nx] = narrowed

                remaining = np.flatnonzero(narrowed)
                if len(remaining) == 0:
                    log.debug("(%d, %d) emptied while propagating from (%d, %d)", nx, ny, x, y)
                    return False
                if len(remaining) == 1:
                    self.collapsed[ny, nx] = remaining[0]

                if (nx, ny) not in queued:
                    pending.append((nx, ny))
                    queued.add((nx, ny))

        return True

    # Backtrack

    def unwind(self):
        snapshot = self.history.pop()
        for (x, y), (domain, collapsed) in snapshot.cells.items():
            self.wave[:, y, x] = domain
            self.collapsed[y, x] = collapsed
        # The failed choice stays forbidden at its cell.
        self.wave[snapshot.pattern, snapshot.y, snapshot.x] = False
        self.backtracks += 1
        log.debug(
            "unwound %d cells, forbidding %d at (%d, %d)",
            len(snapshot.cells),
            snapshot.pattern,
            snapshot.x,
            snapshot.y,
        )
        return snapshot

    # Queries

    def is_finished(self):
        return bool((self.collapsed >= 0).all())

    def is_stuck(self):
        open_cells = self.collapsed < 0
        empty = self.wave.sum(axis=0) == 0
        return not self.history and bool((open_cells & empty).any())

    def collapsed_at(self, x, y):
        value = self.collapsed[y, x]
        return None if value < 0 else int(value)

    def domain_size(self, x, y):
        return int(self.wave[:, y, x].sum())

    def domain(self, x, y):
        return tuple(np.flatnonzero(self.wave[:, y, x]).tolist())

    def state(self, x, y):
        if self.collapsed[y, x] >= 0:
            return CellState.COLLAPSED
        size = self.domain_size(x, y)
        if size == 0:
            return CellState.CONTRADICTION
        if size == 1:
            return CellState.SINGLETON
        return CellState.OPEN

    def cell(self, x, y):
        return Cell(x, y, self.domain(x, y), self.collapsed_at(x, y))

    def values(self):
        return self.collapsed.copy()

    def collapse_status(self):
        return self.wave.sum(axis=0)

    # Driving

    def collapse_all(self, max_steps=None):
        taken = 0
        while max_steps is None or taken < max_steps:
            if not self.step():
                break
            taken += 1
        return self.is_finished()

    def collapse_all_reset_on_contradiction(self, attempts=10, max_steps=None):
        for attempt in range(attempts):
            if self.collapse_all(max_steps=max_steps):
                return True
            log.info("attempt %d got stuck after %d steps, resetting", attempt + 1, self.steps)
            self.reset()
        return False

    def __repr__(self):
        done = int((self.collapsed >= 0).sum())
        return f"Grid({self.width}x{self.height}, {done}/{self.width * self.height} collapsed)"
