from tilewave import *
from util import array_from_chars

# Four 3x3 tiles side by side: blank, straight road, corner, T junction.
# Rotations fill in the missing orientations.
SOURCE = array_from_chars(
    """
    GGGGGGGGGGGG,
    GGGDDDGDDDDD,
    GGGGGGGDGGDG,
    """
)

run_example(
    "tiled",
    24,
    source=SOURCE,
    config=Config(n=3, adjacency="edge-code", rotations=True, history=128),
)
