"""Cube topology, cell buffers and the Life step."""

from .topology import FACES, NEIGHBOR_OFFSETS, linear_index, locate, resolve_neighbor, neighbor_table
from .cube import Cube
from .game import CubeGameOfLife, step
from .patterns import Pattern, PatternLibrary, load_cube_rle
from .imaging import import_cube_png, export_cube_png

__all__ = [
    "FACES",
    "NEIGHBOR_OFFSETS",
    "linear_index",
    "locate",
    "resolve_neighbor",
    "neighbor_table",
    "Cube",
    "CubeGameOfLife",
    "step",
    "Pattern",
    "PatternLibrary",
    "load_cube_rle",
    "import_cube_png",
    "export_cube_png",
]
