"""Common Game of Life patterns, RLE parsing and pattern management."""

from typing import Dict, List, Tuple, Optional, Any, Union
import json
from pathlib import Path

import numpy as np

from .cube import Cube


class Pattern:
    """Represents a 2-D Game of Life pattern to be placed on one face."""

    def __init__(
        self,
        name: str,
        cells: List[Tuple[int, int]],
        description: str = "",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize a pattern.

        Args:
            name: Pattern name
            cells: List of (x, y) coordinates for living cells
            description: Optional description
            metadata: Optional metadata dictionary
        """
        self.name = name
        self.cells = cells
        self.description = description
        self.metadata = metadata or {}

    def apply_to_cube(
        self,
        cube: Cube,
        dim: int = 0,
        sign: bool = False,
        offset_x: int = 0,
        offset_y: int = 0,
    ) -> None:
        """Clear a cube and draw this pattern on one of its faces.

        Pattern x maps to the face's u coordinate and y to v. Cells that
        fall outside the face are skipped.

        Args:
            cube: Target cube
            dim: Face dimension
            sign: Face sign (True for the high face)
            offset_x: Horizontal offset
            offset_y: Vertical offset
        """
        cube.clear()
        for x, y in self.cells:
            try:
                cube.set_cell(dim, sign, x + offset_x, y + offset_y, True)
            except IndexError:
                pass

    def get_bounding_box(self) -> Tuple[int, int, int, int]:
        """Get bounding box of the pattern.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y)
        """
        if not self.cells:
            return (0, 0, 0, 0)

        xs, ys = zip(*self.cells)
        return (min(xs), min(ys), max(xs), max(ys))

    def get_size(self) -> Tuple[int, int]:
        """Get pattern size as (width, height)."""
        if "width" in self.metadata and "height" in self.metadata:
            return (self.metadata["width"], self.metadata["height"])

        min_x, min_y, max_x, max_y = self.get_bounding_box()
        return (max_x - min_x + 1, max_y - min_y + 1)

    def normalize(self) -> "Pattern":
        """Return a new pattern with coordinates normalized to start at (0, 0)."""
        if not self.cells:
            return Pattern(self.name, [], self.description, self.metadata.copy())

        min_x, min_y, _, _ = self.get_bounding_box()
        normalized_cells = [(x - min_x, y - min_y) for x, y in self.cells]

        return Pattern(self.name, normalized_cells, self.description, self.metadata.copy())

    def to_array(self) -> np.ndarray:
        """Render the pattern as a boolean array of shape (height, width)."""
        width, height = self.get_size()
        arr = np.zeros((height, width), dtype=bool)
        for x, y in self.cells:
            if 0 <= x < width and 0 <= y < height:
                arr[y, x] = True
        return arr

    def to_dict(self) -> Dict[str, Any]:
        """Convert pattern to dictionary for serialization."""
        return {
            "name": self.name,
            "cells": self.cells,
            "description": self.description,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pattern":
        """Create pattern from dictionary."""
        cells = [tuple(cell) for cell in data["cells"]]

        return cls(
            name=data["name"],
            cells=cells,
            description=data.get("description", ""),
            metadata=data.get("metadata", {}),
        )

    @classmethod
    def from_cube_face(cls, cube: Cube, dim: int, sign: bool, name: str, description: str = "") -> "Pattern":
        """Create pattern from the living cells of one face."""
        face = cube.face(dim, sign)
        vs, us = np.nonzero(face)
        cells = [(int(u), int(v)) for u, v in zip(us, vs)]

        metadata = {
            "source_width": cube.width,
            "source_face": [dim, sign],
            "population": len(cells),
        }
        return cls(name, cells, description, metadata)

    @classmethod
    def from_rle(cls, text: str, name: Optional[str] = None, default_name: str = "Unnamed") -> "Pattern":
        """Parse a run-length encoded pattern.

        Lines starting with ``#`` before the header are comments; ``#N`` names
        the pattern and ``#C`` lines become its description. The header
        ``x = W, y = H`` is required and may carry a ``rule`` entry.

        Raises:
            ValueError: If the header is missing or malformed, a row is wider
                than ``x``, the pattern is taller than ``y``, or an unknown
                character appears
        """
        lines = text.splitlines()
        comments = []
        header = None
        body_start = len(lines)

        for i, line in enumerate(lines):
            stripped = line.strip()
            if not stripped:
                continue
            if stripped.startswith("#"):
                tag, rest = stripped[:2], stripped[2:].strip()
                if tag == "#N" and name is None:
                    name = rest
                elif tag in ("#C", "#c"):
                    comments.append(rest)
                continue
            header = stripped
            body_start = i + 1
            break

        if header is None:
            raise ValueError("Missing RLE header")

        width, height, rule = _parse_rle_header(header)

        cells = []
        x = y = 0
        digits = ""
        finished = False

        for line in lines[body_start:]:
            for char in line.strip():
                if char.isdigit():
                    digits += char
                    continue
                if char.isspace():
                    continue

                run = int(digits) if digits else 1
                digits = ""

                if char in "bo":
                    if x + run > width:
                        raise ValueError(f"Pattern exceeds width {width} on row {y}")
                    if char == "o":
                        if y >= height:
                            raise ValueError(f"Pattern exceeds height {height}")
                        cells.extend((x + i, y) for i in range(run))
                    x += run
                elif char == "$":
                    y += run
                    x = 0
                elif char == "!":
                    finished = True
                    break
                else:
                    raise ValueError(f"Unrecognized character {char!r} in RLE data")
            if finished:
                break

        metadata: Dict[str, Any] = {"width": width, "height": height}
        if rule:
            metadata["rule"] = rule

        return cls(name or default_name, cells, "\n".join(comments), metadata)


def _parse_rle_header(header: str) -> Tuple[int, int, Optional[str]]:
    """Parse ``x = W, y = H[, rule = R]``."""
    values = {}
    for section in header.split(","):
        key, sep, value = section.partition("=")
        if not sep:
            raise ValueError(f"Header failed to parse: {header!r}")
        values[key.strip()] = value.strip()

    try:
        width = int(values["x"])
        height = int(values["y"])
    except (KeyError, ValueError):
        raise ValueError(f"Header failed to parse: {header!r}") from None

    if width < 0 or height < 0:
        raise ValueError(f"Header failed to parse: {header!r}")

    return width, height, values.get("rule")


def load_cube_rle(
    path: Union[str, Path],
    width: Optional[int] = None,
    dim: int = 0,
    sign: bool = False,
) -> Cube:
    """Load an RLE file onto one face of a fresh cube.

    Args:
        path: RLE file
        width: Cube width; defaults to the larger pattern dimension
        dim: Face dimension to draw on
        sign: Face sign to draw on

    Returns:
        Cube with the pattern on one face and every other cell dead
    """
    path = Path(path)
    pattern = Pattern.from_rle(path.read_text(), default_name=path.stem)

    if width is None:
        width = max(max(pattern.get_size()), 1)

    cube = Cube(width)
    pattern.apply_to_cube(cube, dim, sign)
    return cube


class PatternLibrary:
    """Manages a collection of patterns."""

    def __init__(self, storage_dir: Optional[str] = None) -> None:
        """Initialize pattern library.

        Args:
            storage_dir: Directory for storing patterns (defaults to 'patterns')
        """
        self.storage_dir = Path(storage_dir or "patterns")
        self._patterns: Dict[str, Pattern] = {}
        self._load_builtin_patterns()

    def _load_builtin_patterns(self) -> None:
        """Load built-in common patterns."""
        self.add_pattern(Pattern("Block", [(0, 0), (0, 1), (1, 0), (1, 1)], "2x2 still life block"))
        self.add_pattern(
            Pattern("Beehive", [(1, 0), (2, 0), (0, 1), (3, 1), (1, 2), (2, 2)], "Beehive still life")
        )
        self.add_pattern(
            Pattern("Loaf", [(1, 0), (2, 0), (0, 1), (3, 1), (1, 2), (3, 2), (2, 3)], "Loaf still life")
        )

        self.add_pattern(Pattern("Blinker", [(0, 1), (1, 1), (2, 1)], "Period-2 oscillator"))
        self.add_pattern(
            Pattern("Toad", [(1, 0), (2, 0), (3, 0), (0, 1), (1, 1), (2, 1)], "Period-2 oscillator")
        )
        self.add_pattern(
            Pattern("Beacon", [(0, 0), (1, 0), (0, 1), (3, 2), (2, 3), (3, 3)], "Period-2 oscillator")
        )

        pulsar_quadrant = [(2, 0), (3, 0), (4, 0), (0, 2), (0, 3), (0, 4), (5, 2), (5, 3), (5, 4), (2, 5), (3, 5), (4, 5)]
        pulsar = sorted({(x if mx == 0 else 12 - x, y if my == 0 else 12 - y)
                         for x, y in pulsar_quadrant for mx in (0, 1) for my in (0, 1)})
        self.add_pattern(Pattern("Pulsar", pulsar, "Period-3 oscillator"))

        self.add_pattern(Pattern("Glider", [(1, 0), (2, 1), (0, 2), (1, 2), (2, 2)], "Smallest spaceship, period-4"))
        self.add_pattern(
            Pattern(
                "Lightweight Spaceship",
                [(0, 0), (3, 0), (4, 1), (0, 2), (4, 2), (1, 3), (2, 3), (3, 3), (4, 3)],
                "LWSS - Period-4 spaceship",
            )
        )

        self.add_pattern(
            Pattern(
                "R-pentomino",
                [(1, 0), (2, 0), (0, 1), (1, 1), (1, 2)],
                "Famous methuselah that stabilizes after 1103 generations",
            )
        )
        self.add_pattern(
            Pattern(
                "Diehard",
                [(6, 0), (0, 1), (1, 1), (1, 2), (5, 2), (6, 2), (7, 2)],
                "Dies after exactly 130 generations",
            )
        )
        self.add_pattern(
            Pattern(
                "Acorn",
                [(1, 0), (3, 1), (0, 2), (1, 2), (4, 2), (5, 2), (6, 2)],
                "Takes 5206 generations to stabilize",
            )
        )

    def add_pattern(self, pattern: Pattern) -> None:
        """Add a pattern to the library."""
        self._patterns[pattern.name] = pattern

    def get_pattern(self, name: str) -> Optional[Pattern]:
        """Get a pattern by name, or None if not found."""
        return self._patterns.get(name)

    def list_patterns(self) -> List[str]:
        """Get list of all pattern names."""
        return list(self._patterns.keys())

    def get_patterns_by_category(self) -> Dict[str, List[str]]:
        """Get patterns organized by category.

        Returns:
            Dictionary mapping categories to pattern name lists
        """
        categories = {
            "Still Life": ["Block", "Beehive", "Loaf"],
            "Oscillators": ["Blinker", "Toad", "Beacon", "Pulsar"],
            "Spaceships": ["Glider", "Lightweight Spaceship"],
            "Methuselahs": ["R-pentomino", "Diehard", "Acorn"],
            "Custom": [],
        }

        all_builtin = set()
        for cat_patterns in categories.values():
            all_builtin.update(cat_patterns)

        for name in self._patterns:
            if name not in all_builtin:
                categories["Custom"].append(name)

        return {cat: patterns for cat, patterns in categories.items() if patterns}

    def save_pattern(self, pattern: Pattern, filename: Optional[str] = None) -> Path:
        """Save a pattern to disk as JSON.

        Args:
            pattern: Pattern to save
            filename: Optional filename (defaults to pattern name)

        Returns:
            Path of the written file
        """
        if filename is None:
            filename = f"{pattern.name.replace(' ', '_').lower()}.json"

        self.storage_dir.mkdir(parents=True, exist_ok=True)
        filepath = self.storage_dir / filename
        with open(filepath, "w") as f:
            json.dump(pattern.to_dict(), f, indent=2)
        return filepath

    def load_pattern(self, filename: str) -> Pattern:
        """Load a JSON pattern from the storage directory.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file format is invalid
        """
        filepath = self.storage_dir / filename

        with open(filepath, "r") as f:
            data = json.load(f)

        pattern = Pattern.from_dict(data)
        self.add_pattern(pattern)
        return pattern

    def load_rle(self, path: Union[str, Path]) -> Pattern:
        """Load an RLE file and add it to the library.

        Raises:
            ValueError: If the RLE data is invalid
        """
        path = Path(path)
        pattern = Pattern.from_rle(path.read_text(), default_name=path.stem)
        self.add_pattern(pattern)
        return pattern
