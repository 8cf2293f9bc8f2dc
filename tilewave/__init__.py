import argparse
import logging

import numpy as np

from tilewave import utils
from tilewave.adjacency import AdjacencyTable, compute_adjacency
from tilewave.catalog import Catalog, Tileset, build_catalog, top_left, whole_tile
from tilewave.config import Config
from tilewave.sampler import InvalidSourceDimensions, extract
from tilewave.solver import Cell, CellState, Grid, HistorySnapshot
from tilewave.utils import DIRECTIONS, seed

log = logging.getLogger(__name__)

# https://pico-8.fandom.com/wiki/Palette
PICO8_PALETTE = np.array(
    [
        [0, 0, 0],
        [255, 241, 232],
        [255, 0, 7],
        [29, 43, 83],
        [126, 37, 83],
        [0, 135, 81],
        [171, 82, 54],
        [95, 87, 79],
        [194, 195, 199],
        [255, 163, 0],
        [255, 236, 39],
        [0, 228, 54],
        [41, 173, 255],
        [131, 118, 156],
        [255, 119, 168],
        [255, 204, 170],
    ],
    dtype=np.uint8,
)


def colour_image(arr, palette=PICO8_PALETTE):
    arr = np.asarray(arr)
    if arr.ndim == 3:
        return arr.astype(np.uint8)
    return palette[arr % len(palette)]


def map_2d(grid, catalog=None, output=None, fill=0):
    """Compose the collapsed cells of `grid` into one array via `Catalog.render`."""
    if catalog is None:
        catalog = grid.catalog
    shape = catalog.block_shape()
    bh, bw = shape[:2]

    if output is None:
        output = np.full(
            (grid.height * bh, grid.width * bw) + tuple(shape[2:]),
            fill,
            dtype=catalog.payload(0).dtype,
        )

    def draw(block, x, y):
        output[y * bh : (y + 1) * bh, x * bw : (x + 1) * bw] = block

    for y, x in np.argwhere(grid.collapsed >= 0):
        catalog.render(int(grid.collapsed[y, x]), int(x), int(y), draw=draw)
    return output


def load_image(filename, symbols=False):
    """Read an image as an (h, w, 3) array, or as a 2D array of colour ids."""
    from PIL import Image

    arr = np.array(Image.open(filename).convert("RGB"))
    if not symbols:
        return arr
    # Colour ids in first-seen order so the sampling order stays stable.
    colours, first, inverse = np.unique(
        arr.reshape(-1, 3), axis=0, return_index=True, return_inverse=True
    )
    rank = np.argsort(np.argsort(first))
    return rank[inverse.reshape(-1)].reshape(arr.shape[:2])


def save_image(filename, arr, palette=PICO8_PALETTE):
    from PIL import Image

    Image.fromarray(colour_image(arr, palette)).save(filename)


class FfmpegWriter:
    def __init__(self, filename, dims, skip=1, framerate=60):
        import ffmpeg

        height, width = dims

        self.process = (
            ffmpeg.input(
                "pipe:",
                format="rawvideo",
                pix_fmt="rgb24",
                s="{}x{}".format(width, height),
                framerate=framerate,
            )
            .output(filename, crf=0, vcodec="libx264", preset="ultrafast")
            .global_args("-hide_banner")
            .overwrite_output()
            .run_async(pipe_stdin=True)
        )

        self.skip = skip
        self.index = 0

    def write(self, array, palette=PICO8_PALETTE):
        if self.index % self.skip == 0:
            self.process.stdin.write(colour_image(array, palette).tobytes())
        self.index += 1

    def close(self):
        self.process.stdin.close()
        self.process.wait()


def collapse_all_with_callback(grid, callback, skip=1):
    i = 0
    while grid.step():
        if i % skip == 0:
            callback()
        i += 1
    return grid.is_finished()


def run_example(name, default_size, source=None, tileset=None, config=None):
    parser = argparse.ArgumentParser()
    parser.add_argument("-d", "--dims", nargs="+", type=int, default=[default_size])
    parser.add_argument("--input", help="sample image to learn from")
    parser.add_argument("-n", type=int)
    parser.add_argument("--rotations", action=argparse.BooleanOptionalAction)
    parser.add_argument("--weighted", action=argparse.BooleanOptionalAction)
    parser.add_argument("--adjacency", choices=["overlap", "edge-code"])
    parser.add_argument("--history", type=int)
    parser.add_argument("--seed", type=int)
    parser.add_argument("--attempts", type=int, default=10)
    parser.add_argument("-i", "--image", action=argparse.BooleanOptionalAction, default=True)
    parser.add_argument("-v", "--video", action=argparse.BooleanOptionalAction)
    parser.add_argument("-s", "--skip", type=int, default=1)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = config or Config()
    overrides = {
        key: getattr(args, key)
        for key in ["n", "rotations", "weighted", "adjacency", "history", "seed"]
        if getattr(args, key) is not None
    }
    config = config.replace(**overrides)
    log.info("%s", config)

    utils.seed(config.seed)

    if args.input:
        source = load_image(args.input, symbols=True)

    if tileset is not None and not args.input:
        catalog, adjacency = tileset.build()
    else:
        try:
            catalog, adjacency = build_catalog(source, config)
        except InvalidSourceDimensions as e:
            parser.error(str(e))

    dims = (args.dims * 2)[:2]
    width, height = dims
    grid = Grid(width, height, catalog, adjacency, history=config.history)

    writer = None
    if args.video:
        bh, bw = catalog.block_shape()[:2]
        writer = FfmpegWriter(f"{name}.avi", (height * bh, width * bw), skip=args.skip)

    for attempt in range(args.attempts):
        if writer is not None:
            finished = collapse_all_with_callback(
                grid, lambda: writer.write(map_2d(grid)), skip=args.skip
            )
        else:
            finished = grid.collapse_all()
        if finished:
            break
        log.warning("attempt %d got stuck, resetting", attempt + 1)
        grid.reset()

    if writer is not None:
        writer.close()

    log.info(
        "%s after %d steps and %d backtracks",
        "finished" if grid.is_finished() else "gave up",
        grid.steps,
        grid.backtracks,
    )

    if args.image:
        filename = f"{name}.png"
        log.info("writing %s", filename)
        save_image(filename, map_2d(grid))

    return grid


__all__ = [
    "AdjacencyTable",
    "Catalog",
    "Cell",
    "CellState",
    "Config",
    "DIRECTIONS",
    "FfmpegWriter",
    "Grid",
    "HistorySnapshot",
    "InvalidSourceDimensions",
    "PICO8_PALETTE",
    "Tileset",
    "build_catalog",
    "collapse_all_with_callback",
    "colour_image",
    "compute_adjacency",
    "extract",
    "load_image",
    "map_2d",
    "np",
    "run_example",
    "save_image",
    "seed",
    "top_left",
    "whole_tile",
]
