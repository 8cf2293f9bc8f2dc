from tilewave import *

tileset = Tileset()

empty = tileset.add(np.zeros((3, 3), dtype=np.uint8), 1.0, tags="no")

straight = np.zeros((3, 3), dtype=np.uint8)
straight[1] = 1
straight_h, straight_v = tileset.add_mul(
    straight, 1.0, 2, {"e": "line", "w": "line", "n": "no", "s": "no"}
)

corner = np.zeros((3, 3), dtype=np.uint8)
corner[1, 1:] = 1
corner[1:, 1] = 1
corners = tileset.add_mul(corner, 1.0, 4, {"e": "line", "s": "line", "n": "no", "w": "no"})

end = np.zeros((3, 3), dtype=np.uint8)
end[1, 1:] = 1
ends = tileset.add_mul(end, 0.04, 4, {"e": "line", "n": "no", "s": "no", "w": "no"})

cross = np.zeros((3, 3), dtype=np.uint8)
cross[1] = 1
cross[:, 1] = 1
tileset.add(cross, 2.5, tags="line")

run_example("pipes", 48, tileset=tileset)
