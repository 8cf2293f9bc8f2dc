from tilewave import *
from util import array_from_chars

# A brick wall with a single flower, in the style of the classic WFC samples.
SOURCE = array_from_chars(
    """
    NNNNNNNN,
    NAAANAAA,
    NNNNNNNN,
    AANAAANA,
    NNNNNNNN,
    NAAANAAA,
    NNNNNNNN,
    AANAKANA,
    """
)

run_example(
    "overlap",
    48,
    source=SOURCE,
    config=Config(n=3, adjacency="overlap", rotations=False, weighted=True, history=256),
)
