from tilewave import *

tileset = Tileset()

forest = tileset.add(5, weight=2.0)
grass = tileset.add(11, weight=4.0)
beach = tileset.add(10, weight=1.0)
sea = tileset.add(12, weight=4.0)

tileset.connect(beach, sea, DIRECTIONS)
tileset.connect(beach, grass, DIRECTIONS)
tileset.connect(sea, sea, DIRECTIONS)
tileset.connect(grass, grass, DIRECTIONS)
tileset.connect(forest, grass, DIRECTIONS)
tileset.connect(forest, forest, DIRECTIONS)
tileset.connect(beach, beach, DIRECTIONS)

run_example("coast", 64, tileset=tileset)
