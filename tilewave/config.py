import os

# ======= Sampling =======
N = int(os.getenv("TW_N", "3"))
WRAP_X = int(os.getenv("TW_WRAP_X", "1")) != 0
WRAP_Y = int(os.getenv("TW_WRAP_Y", "1")) != 0
ROTATIONS = int(os.getenv("TW_ROTATIONS", "0")) != 0

# ======= Adjacency =======
# "overlap" compares overlapping window regions, "edge-code" matches tile borders.
ADJACENCY = os.getenv("TW_ADJACENCY", "overlap")
# Empty means "follow the adjacency strategy".
SAMPLING = os.getenv("TW_SAMPLING", "")
WEIGHTED = int(os.getenv("TW_WEIGHTED", "0")) != 0

# ======= Solver =======
HISTORY = int(os.getenv("TW_HISTORY", "64"))
SEED = os.getenv("TW_SEED", "")

ADJACENCY_STRATEGIES = ["overlap", "edge-code"]
SAMPLING_MODES = ["window", "tile"]

DEFAULT_SAMPLING = {"overlap": "window", "edge-code": "tile"}


class Config:
    def __init__(
        self,
        n=N,
        wrap_x=WRAP_X,
        wrap_y=WRAP_Y,
        rotations=ROTATIONS,
        adjacency=ADJACENCY,
        sampling=SAMPLING,
        weighted=WEIGHTED,
        history=HISTORY,
        seed=SEED,
    ):
        if adjacency not in ADJACENCY_STRATEGIES:
            raise ValueError(f"unknown adjacency strategy {adjacency!r}")
        if not sampling:
            sampling = DEFAULT_SAMPLING[adjacency]
        if sampling not in SAMPLING_MODES:
            raise ValueError(f"unknown sampling mode {sampling!r}")
        if int(n) < 1:
            raise ValueError(f"window size must be positive, got {n}")
        if int(history) < 0:
            raise ValueError(f"history capacity can't be negative, got {history}")

        self.n = int(n)
        self.wrap_x = bool(wrap_x)
        self.wrap_y = bool(wrap_y)
        self.rotations = bool(rotations)
        self.adjacency = adjacency
        self.sampling = sampling
        self.weighted = bool(weighted)
        self.history = int(history)
        self.seed = None if seed in (None, "") else int(seed)

    def replace(self, **kwargs):
        options = dict(vars(self))
        # Let the sampling mode follow a changed strategy unless given.
        if "adjacency" in kwargs and "sampling" not in kwargs:
            options["sampling"] = ""
        options.update(kwargs)
        return Config(**options)

    def __repr__(self):
        options = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
        return f"Config({options})"


__all__ = ["Config", "ADJACENCY_STRATEGIES", "SAMPLING_MODES"]
