"""Cell buffer for one generation of a cube."""

from typing import Iterator, List, Optional, Tuple
import numpy as np
import torch

from .topology import FACES, NEIGHBOR_OFFSETS, face_index, linear_index, neighbor_table, resolve_neighbor


class Cube:
    """Six ``width x width`` faces stored as one flat boolean buffer.

    Faces appear in ``FACES`` order and each face is row-major by ``(v, u)``,
    so the buffer can be handed directly to collaborators that read or write
    raw cell data.
    """

    def __init__(self, width: int, cells: Optional[np.ndarray] = None) -> None:
        """Initialize a cube.

        Args:
            width: Side length of each face
            cells: Optional initial buffer of length ``6 * width**2``

        Raises:
            ValueError: If width is not positive or cells has the wrong length
        """
        if width < 1:
            raise ValueError(f"Width must be positive, got {width}")

        self._width = width
        self._cells = np.zeros(6 * width * width, dtype=bool)
        if cells is not None:
            self.load_buffer(cells)

    @classmethod
    def from_buffer(cls, width: int, data) -> "Cube":
        """Create a cube from a flat sequence of cell values."""
        return cls(width, np.asarray(data))

    @property
    def width(self) -> int:
        """Side length of each face."""
        return self._width

    @property
    def cells(self) -> np.ndarray:
        """Get the flat cell buffer."""
        return self._cells

    @property
    def face_size(self) -> int:
        """Number of cells on one face."""
        return self._width * self._width

    def __len__(self) -> int:
        return self._cells.size

    def face(self, dim: int, sign: bool) -> np.ndarray:
        """Get a writable ``(width, width)`` view of one face, indexed ``[v, u]``."""
        start = face_index(dim, sign) * self.face_size
        return self._cells[start:start + self.face_size].reshape(self._width, self._width)

    def faces(self) -> Iterator[Tuple[int, bool, np.ndarray]]:
        """Iterate over ``(dim, sign, view)`` in buffer order."""
        for dim, sign in FACES:
            yield dim, sign, self.face(dim, sign)

    def get_cell(self, dim: int, sign: bool, u: int, v: int) -> bool:
        """Get the state of a cell.

        Raises:
            IndexError: If coordinates are out of bounds
        """
        return bool(self._cells[linear_index(u, v, sign, dim, self._width)])

    def set_cell(self, dim: int, sign: bool, u: int, v: int, alive: bool) -> None:
        """Set the state of a cell.

        Raises:
            IndexError: If coordinates are out of bounds
        """
        self._cells[linear_index(u, v, sign, dim, self._width)] = alive

    def toggle_cell(self, dim: int, sign: bool, u: int, v: int) -> bool:
        """Toggle the state of a cell.

        Returns:
            New state of the cell
        """
        new_state = not self.get_cell(dim, sign, u, v)
        self.set_cell(dim, sign, u, v, new_state)
        return new_state

    def clear(self) -> None:
        """Clear all cells (set all to dead)."""
        self._cells.fill(False)

    def randomize(self, probability: float = 0.25, seed: Optional[int] = None) -> None:
        """Randomly populate the cube.

        Args:
            probability: Chance each cell will be alive (0.0 to 1.0)
            seed: Seed for the generator; the same seed gives the same cube
        """
        rng = np.random.default_rng(seed)
        self._cells[:] = rng.random(self._cells.size) < probability

    def load_buffer(self, data) -> None:
        """Replace all cells from a flat buffer.

        Raises:
            ValueError: If the buffer length is not ``6 * width**2``
        """
        arr = np.asarray(data).reshape(-1)
        if arr.size != self._cells.size:
            raise ValueError(
                f"Buffer length {arr.size} doesn't match cube of width {self._width} "
                f"({self._cells.size} cells)"
            )
        self._cells[:] = arr != 0

    def copy_from(self, other: "Cube") -> None:
        """Copy cell states from another cube.

        Raises:
            ValueError: If cubes have different widths
        """
        if other.width != self._width:
            raise ValueError(f"Cube widths don't match: {other.width} vs {self._width}")

        self._cells[:] = other._cells

    def copy(self) -> "Cube":
        """Return an independent cube with the same cells."""
        return Cube(self._width, self._cells.copy())

    @property
    def population(self) -> int:
        """Get the number of living cells."""
        return int(np.count_nonzero(self._cells))

    @property
    def face_populations(self) -> List[int]:
        """Living cells on each face, in buffer order."""
        return [int(n) for n in self._cells.reshape(6, -1).sum(axis=1)]

    def get_neighbors(self, dim: int, sign: bool, u: int, v: int, corner_fallback: bool = False) -> int:
        """Count living neighbors of a single cell.

        Args:
            dim: Face dimension
            sign: Face sign (True for the high face)
            u: Column on the face
            v: Row on the face
            corner_fallback: Value counted for each corner-diagonal neighbor

        Returns:
            Number of living neighbors (0-8)
        """
        count = 0
        for du, dv in NEIGHBOR_OFFSETS:
            idx = resolve_neighbor(u + du, v + dv, sign, dim, self._width)
            if idx is None:
                count += int(corner_fallback)
            else:
                count += int(self._cells[idx])
        return count

    def count_all_neighbors(self, corner_fallback: bool = False) -> np.ndarray:
        """Count neighbors for all cells with a single torch gather.

        Returns:
            Flat array of neighbor counts in buffer order
        """
        table = neighbor_table(self._width)
        n = self._cells.size

        # Slot n holds the fallback value for corner-diagonal neighbors
        padded = torch.zeros(n + 1, dtype=torch.int8)
        padded[:n] = torch.from_numpy(self._cells.astype(np.int8))
        padded[n] = int(corner_fallback)

        index = torch.from_numpy(np.where(table < 0, n, table))
        neighbors = padded[index].sum(dim=1)
        return neighbors.numpy().astype(np.int8)

    def to_list(self) -> list:
        """Convert cube to a flat list of bools for serialization."""
        return self._cells.tolist()

    def from_list(self, data: list) -> None:
        """Load cube from a flat list.

        Raises:
            ValueError: If data length doesn't match the cube
        """
        self.load_buffer(np.array(data, dtype=bool))

    def __eq__(self, other: object) -> bool:
        """Check if two cubes are equal."""
        if not isinstance(other, Cube):
            return False
        return self._width == other._width and np.array_equal(self._cells, other._cells)

    def __str__(self) -> str:
        """Faces one after another, living cells as '*' and dead as '.'."""
        result = []
        for dim, sign, face in self.faces():
            result.append(f"face dim={dim} sign={'high' if sign else 'low'}")
            for row in face:
                result.append("".join("*" if cell else "." for cell in row))
        return "\n".join(result)
