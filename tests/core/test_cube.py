"""Tests for the Cube class."""

import numpy as np
import pytest

from cubelife.core.cube import Cube
from cubelife.core.topology import FACES, linear_index


class TestCube:
    """Test cases for the Cube class."""

    def test_initialization(self):
        """Test cube initialization."""
        cube = Cube(4)
        assert cube.width == 4
        assert cube.face_size == 16
        assert len(cube) == 96
        assert cube.cells.dtype == bool
        assert cube.population == 0

    def test_invalid_width(self):
        with pytest.raises(ValueError):
            Cube(0)

    def test_from_buffer(self):
        """A flat buffer is taken over as-is."""
        data = [False] * 54
        data[5] = True
        data[53] = True
        cube = Cube.from_buffer(3, data)
        assert cube.population == 2
        assert cube.cells[5]
        assert cube.cells[53]

    def test_from_buffer_wrong_length(self):
        with pytest.raises(ValueError):
            Cube.from_buffer(3, [False] * 53)

    def test_cell_operations(self):
        """Test basic cell get/set operations."""
        cube = Cube(5)

        assert not cube.get_cell(1, True, 2, 3)

        cube.set_cell(1, True, 2, 3, True)
        assert cube.get_cell(1, True, 2, 3)
        assert cube.cells[linear_index(2, 3, True, 1, 5)]
        assert cube.population == 1

        cube.set_cell(1, True, 2, 3, False)
        assert not cube.get_cell(1, True, 2, 3)

    def test_cell_out_of_bounds(self):
        cube = Cube(3)
        with pytest.raises(IndexError):
            cube.set_cell(0, False, 3, 0, True)
        with pytest.raises(IndexError):
            cube.get_cell(3, False, 0, 0)

    def test_toggle_cell(self):
        """Test cell toggling."""
        cube = Cube(3)
        assert cube.toggle_cell(2, False, 1, 1) is True
        assert cube.get_cell(2, False, 1, 1) is True
        assert cube.toggle_cell(2, False, 1, 1) is False

    def test_face_views(self):
        """Face views are writable windows onto the flat buffer."""
        cube = Cube(3)
        face = cube.face(1, False)
        assert face.shape == (3, 3)

        face[2, 1] = True  # v = 2, u = 1
        assert cube.get_cell(1, False, 1, 2)
        assert cube.face_populations == [0, 0, 1, 0, 0, 0]

        assert [(dim, sign) for dim, sign, _ in cube.faces()] == FACES

    def test_clear(self):
        cube = Cube(3)
        cube.cells[:] = True
        cube.clear()
        assert cube.population == 0

    def test_randomize_is_seeded(self):
        """The same seed gives the same cube."""
        a = Cube(6)
        b = Cube(6)
        a.randomize(0.3, seed=7)
        b.randomize(0.3, seed=7)
        assert a == b
        assert 0 < a.population < len(a)

        b.randomize(0.3, seed=8)
        assert a != b

    def test_randomize_extremes(self):
        cube = Cube(4)
        cube.randomize(0.0, seed=1)
        assert cube.population == 0
        cube.randomize(1.0, seed=1)
        assert cube.population == len(cube)

    def test_copy_from(self):
        a = Cube(3)
        a.set_cell(0, True, 1, 1, True)
        b = Cube(3)
        b.copy_from(a)
        assert a == b
        assert a.cells is not b.cells

        with pytest.raises(ValueError):
            Cube(4).copy_from(a)

    def test_copy(self):
        a = Cube(3)
        a.set_cell(2, True, 0, 2, True)
        b = a.copy()
        assert a == b
        b.clear()
        assert a.population == 1

    def test_list_round_trip(self):
        cube = Cube(2)
        cube.randomize(0.5, seed=3)
        other = Cube(2)
        other.from_list(cube.to_list())
        assert other == cube

        with pytest.raises(ValueError):
            other.from_list([True] * 5)

    def test_str(self):
        """String form lists each face with '*' for living cells."""
        cube = Cube(2)
        cube.set_cell(0, False, 1, 0, True)
        text = str(cube)
        lines = text.splitlines()
        assert lines[0] == "face dim=0 sign=low"
        assert lines[1] == ".*"
        assert lines[2] == ".."
        assert "face dim=2 sign=high" in text

    def test_equality(self):
        assert Cube(3) == Cube(3)
        assert Cube(3) != Cube(4)
        assert Cube(3) != "cube"


class TestNeighborCounting:
    """Test cases for neighbor counting."""

    def test_all_dead(self):
        cube = Cube(4)
        assert not cube.count_all_neighbors().any()
        assert cube.get_neighbors(0, False, 0, 0) == 0

    def test_corner_fallback(self):
        """Corner-diagonal neighbors count as the fallback value."""
        cube = Cube(4)
        counts = cube.count_all_neighbors(corner_fallback=True)
        # Face corners have one missing neighbor, other cells none
        assert counts[linear_index(0, 0, False, 0, 4)] == 1
        assert counts[linear_index(3, 3, True, 2, 4)] == 1
        assert counts[linear_index(1, 0, True, 1, 4)] == 0
        assert counts.sum() == 6 * 4
        assert cube.get_neighbors(0, False, 0, 0, corner_fallback=True) == 1

    def test_full_cube(self):
        """Every cell of a full cube has seven or eight living neighbors."""
        cube = Cube(3)
        cube.cells[:] = True
        counts = cube.count_all_neighbors()
        assert counts[linear_index(1, 1, False, 0, 3)] == 8
        assert counts[linear_index(1, 0, False, 0, 3)] == 8
        assert counts[linear_index(0, 0, False, 0, 3)] == 7
        assert cube.count_all_neighbors(corner_fallback=True).min() == 8

    @pytest.mark.parametrize("width", [1, 2, 3, 5, 8])
    def test_vectorized_matches_scalar(self, width):
        """The batched gather agrees with per-cell counting."""
        cube = Cube(width)
        cube.randomize(0.4, seed=width)

        for fallback in (False, True):
            counts = cube.count_all_neighbors(fallback)
            expected = np.array(
                [
                    cube.get_neighbors(dim, sign, u, v, fallback)
                    for dim, sign in FACES
                    for v in range(width)
                    for u in range(width)
                ]
            )
            np.testing.assert_array_equal(counts, expected)

    def test_seam_neighbor_counted(self):
        """A living cell across a seam is counted by the border cell."""
        cube = Cube(3)
        # Low face of dim 2 at (1, 0) touches column u = 0 of the low face of dim 0
        cube.set_cell(2, False, 1, 0, True)
        assert cube.get_neighbors(0, False, 0, 0) == 1
        assert cube.get_neighbors(0, False, 0, 1) == 1
        assert cube.get_neighbors(0, False, 0, 2) == 1
        assert cube.get_neighbors(0, False, 1, 1) == 0
