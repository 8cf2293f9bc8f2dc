import logging

import numpy as np

from tilewave.utils import payload_key, rotate

log = logging.getLogger(__name__)


class InvalidSourceDimensions(ValueError):
    def __init__(self, shape, n, reason):
        self.shape = tuple(shape)
        self.n = n
        super().__init__(f"source of shape {self.shape} can't be sampled with n={n}: {reason}")


def check_source(source):
    source = np.asarray(source)
    if source.ndim not in (2, 3):
        raise ValueError(
            f"source must be a 2D symbol array or a 3D (h, w, channels) array, got {source.ndim}D"
        )
    return source


def window_origins(size, n, wrap):
    if wrap:
        return range(size)
    return range(size - n + 1)


def windows(source, n, wrap_x=True, wrap_y=True):
    """Yield every n x n window of `source`, row by row."""
    height, width = source.shape[:2]

    if (not wrap_x and width < n) or (not wrap_y and height < n):
        raise InvalidSourceDimensions(source.shape, n, "window doesn't fit without wrapping")

    for y in window_origins(height, n, wrap_y):
        rows = (y + np.arange(n)) % height
        for x in window_origins(width, n, wrap_x):
            cols = (x + np.arange(n)) % width
            yield source[np.ix_(rows, cols)]


def tiles(source, n):
    height, width = source.shape[:2]

    if height % n != 0 or width % n != 0:
        raise InvalidSourceDimensions(source.shape, n, "not divisible by the tile size")

    for y in range(0, height, n):
        for x in range(0, width, n):
            yield source[y : y + n, x : x + n]


def with_rotations(samples, rotations):
    for sample in samples:
        yield sample
        if rotations:
            for turns in range(1, 4):
                yield rotate(sample, turns)


def dedupe(samples):
    """Keep the first occurrence of every distinct sample, counting repeats.

    Returns (patterns, counts) with patterns in first-seen order.
    """
    patterns = []
    counts = []
    seen = {}

    for sample in samples:
        key = payload_key(sample)
        index = seen.get(key)
        if index is None:
            seen[key] = len(patterns)
            patterns.append(np.array(sample))
            counts.append(1)
        else:
            counts[index] += 1

    return patterns, counts


def extract(source, config):
    if config.n < 1:
        raise InvalidSourceDimensions(np.shape(source), config.n, "window size must be positive")

    source = check_source(source)

    if config.sampling == "tile":
        samples = tiles(source, config.n)
    else:
        samples = windows(source, config.n, wrap_x=config.wrap_x, wrap_y=config.wrap_y)

    patterns, counts = dedupe(with_rotations(samples, config.rotations))

    log.debug(
        "sampled %d patterns from %s source (%s, n=%d, rotations=%s)",
        len(patterns),
        source.shape,
        config.sampling,
        config.n,
        config.rotations,
    )
    return patterns, counts
