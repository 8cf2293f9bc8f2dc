import random
import time

import numpy as np

# Directions are indexed in this order everywhere: adjacency rule planes,
# tile border codes and neighbor offsets.
DIRECTIONS = ["n", "e", "s", "w"]
N, E, S, W = range(4)

FLIPPED = {"n": "s", "e": "w", "s": "n", "w": "e"}

# (dx, dy) with y growing downwards, matching numpy row order.
OFFSETS = [(0, -1), (1, 0), (0, 1), (-1, 0)]


def direction_index(d):
    if isinstance(d, str):
        return DIRECTIONS.index(d)
    return int(d)


def flip(d):
    if isinstance(d, str):
        return FLIPPED[d]
    return (d + 2) % 4


def rot_cw(d):
    if type(d) is dict:
        return {rot_cw(k): v for k, v in d.items()}
    if isinstance(d, str):
        return DIRECTIONS[(DIRECTIONS.index(d) + 1) % 4]
    return (d + 1) % 4


def xy_from_index(index, width):
    return index % width, index // width


def index_from_xy(x, y, width):
    return x + y * width


def rotate(array, turns):
    """Rotate the first two axes of `array` clockwise by `turns` quarter turns."""
    return np.rot90(array, k=-turns, axes=(0, 1))


def payload_key(array):
    array = np.ascontiguousarray(array)
    return (array.shape, array.dtype.str, array.tobytes())


# Process-wide generator used for tie-breaking and pattern choice.
RNG = random.Random()


def seed(value=None):
    if value is None:
        value = time.time_ns()
    RNG.seed(value)
    return value


seed()
