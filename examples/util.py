import numpy as np

PALETTE_LETTERS = [
    'B', # Black
    'W', # White
    'R', # Red
    'I', # Dark blue
    'P', # Dark purple
    'E', # Dark green
    'N', # Brown
    'D', # Dark grey
    'A', # Light grey
    'O', # Orange
    'Y', # Yellow
    'G', # Green
    'U', # Blue
    'S', # Lavender
    'K', # Pink
    'F', # Light peach
]


def array_from_chars(chars):
    """Parse rows of palette letters or digits, separated by commas."""
    width = None
    array = []
    for char in chars:
        if char == ' ' or char == '\n':
            continue
        elif char == ',':
            if width == None:
                width = len(array)
        else:
            try:
                array.append(int(char))
            except ValueError:
                array.append(PALETTE_LETTERS.index(char))

    if width == None:
        return np.array([array], dtype=np.uint8)
    else:
        return np.reshape(array, (-1, width)).astype(np.uint8)
