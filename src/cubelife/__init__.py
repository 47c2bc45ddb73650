"""Conway's Game of Life on the six faces of a cube."""

__version__ = "0.1.0"

from .core.cube import Cube
from .core.game import CubeGameOfLife, step
from .core.patterns import Pattern, PatternLibrary

__all__ = ["Cube", "CubeGameOfLife", "step", "Pattern", "PatternLibrary"]
