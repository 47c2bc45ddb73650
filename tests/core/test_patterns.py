"""Tests for the Pattern and PatternLibrary classes."""

import json

import numpy as np
import pytest

from cubelife.core.cube import Cube
from cubelife.core.patterns import Pattern, PatternLibrary, load_cube_rle

GLIDER_RLE = """#N Glider
#C The smallest, most common spaceship.
#C Moves diagonally.
x = 3, y = 3, rule = B3/S23
bob$2bo$3o!
"""


class TestPattern:
    """Test cases for the Pattern class."""

    def test_initialization(self):
        """Test pattern initialization."""
        cells = [(0, 0), (1, 0), (2, 0)]
        pattern = Pattern("Blinker", cells, "Period-2 oscillator")

        assert pattern.name == "Blinker"
        assert pattern.cells == cells
        assert pattern.description == "Period-2 oscillator"
        assert pattern.metadata == {}

    def test_apply_to_cube(self):
        """The pattern is drawn on one face with x as u and y as v."""
        cube = Cube(6)
        cube.set_cell(2, True, 0, 0, True)
        pattern = Pattern("L", [(0, 0), (0, 1), (1, 1)])

        pattern.apply_to_cube(cube, dim=1, sign=True, offset_x=2, offset_y=3)

        assert cube.population == 3
        assert cube.get_cell(1, True, 2, 3)
        assert cube.get_cell(1, True, 2, 4)
        assert cube.get_cell(1, True, 3, 4)

    def test_apply_to_cube_clips(self):
        """Cells past the face edge are skipped, not wrapped."""
        cube = Cube(3)
        Pattern("Row", [(0, 0), (1, 0), (2, 0)]).apply_to_cube(cube, offset_x=2)
        assert cube.population == 1
        assert cube.get_cell(0, False, 2, 0)

    def test_bounding_box_and_size(self):
        pattern = Pattern("Test", [(1, 2), (3, 5), (2, 4)])
        assert pattern.get_bounding_box() == (1, 2, 3, 5)
        assert pattern.get_size() == (3, 4)
        assert Pattern("Empty", []).get_bounding_box() == (0, 0, 0, 0)

    def test_normalize(self):
        pattern = Pattern("Test", [(5, 5), (6, 5), (5, 7)], "desc", {"k": 1})
        normalized = pattern.normalize()
        assert normalized.cells == [(0, 0), (1, 0), (0, 2)]
        assert normalized.metadata == {"k": 1}
        assert pattern.cells[0] == (5, 5)

    def test_to_array(self):
        pattern = Pattern("Test", [(0, 0), (2, 1)])
        arr = pattern.to_array()
        assert arr.shape == (2, 3)
        assert arr.tolist() == [[True, False, False], [False, False, True]]

    def test_dict_round_trip(self):
        pattern = Pattern("Test", [(0, 1), (2, 3)], "desc", {"period": 2})
        restored = Pattern.from_dict(json.loads(json.dumps(pattern.to_dict())))
        assert restored.name == "Test"
        assert restored.cells == [(0, 1), (2, 3)]
        assert restored.metadata == {"period": 2}

    def test_from_cube_face(self):
        cube = Cube(4)
        cube.set_cell(2, False, 1, 3, True)
        cube.set_cell(0, False, 0, 0, True)
        pattern = Pattern.from_cube_face(cube, 2, False, "Captured")
        assert pattern.cells == [(1, 3)]
        assert pattern.metadata["population"] == 1
        assert pattern.metadata["source_width"] == 4


class TestRLE:
    """Test cases for run-length encoded patterns."""

    def test_glider(self):
        pattern = Pattern.from_rle(GLIDER_RLE)
        assert pattern.name == "Glider"
        assert sorted(pattern.cells) == sorted([(1, 0), (2, 1), (0, 2), (1, 2), (2, 2)])
        assert pattern.description == "The smallest, most common spaceship.\nMoves diagonally."
        assert pattern.metadata == {"width": 3, "height": 3, "rule": "B3/S23"}

    def test_name_precedence(self):
        assert Pattern.from_rle(GLIDER_RLE, name="Mine").name == "Mine"
        assert Pattern.from_rle("x = 1, y = 1\no!", default_name="file").name == "file"

    def test_multi_line_and_row_counts(self):
        """Runs may span lines and '$' may carry a count."""
        text = "x = 4, y = 4\n2o\n2b$\n2$3bo!"
        pattern = Pattern.from_rle(text)
        assert sorted(pattern.cells) == [(0, 0), (1, 0), (3, 3)]

    def test_trailing_dead_cells_implicit(self):
        pattern = Pattern.from_rle("x = 5, y = 2\no$o!")
        assert pattern.get_size() == (5, 2)
        assert pattern.to_array().sum() == 2

    def test_count_before_whitespace(self):
        """A run count separated from its tag by whitespace still applies."""
        assert Pattern.from_rle("x = 3, y = 1\n3 o!").cells == [(0, 0), (1, 0), (2, 0)]
        assert sorted(Pattern.from_rle("x = 2, y = 3\no2 \n$o!").cells) == [(0, 0), (0, 2)]

    def test_stops_at_bang(self):
        pattern = Pattern.from_rle("x = 2, y = 2\no!\nthis is ignored")
        assert pattern.cells == [(0, 0)]

    def test_missing_header(self):
        with pytest.raises(ValueError, match="Missing RLE header"):
            Pattern.from_rle("#C only comments\n")

    @pytest.mark.parametrize("header", ["x = 3", "y = 3", "x = -1, y = 3","x = a, y = 3", "width 3"])
    def test_bad_header(self, header):
        with pytest.raises(ValueError, match="Header failed to parse"):
            Pattern.from_rle(f"{header}\no!")

    def test_row_too_wide(self):
        with pytest.raises(ValueError, match="exceeds width"):
            Pattern.from_rle("x = 2, y = 1\n3o!")

    def test_too_tall(self):
        with pytest.raises(ValueError, match="exceeds height"):
            Pattern.from_rle("x = 2, y = 1\no$o!")

    def test_unrecognized_character(self):
        with pytest.raises(ValueError, match="Unrecognized character"):
            Pattern.from_rle("x = 2, y = 1\nozq!")

    def test_load_cube_rle(self, tmp_path):
        """An RLE file lands on one face of a fresh cube."""
        path = tmp_path / "glider.rle"
        path.write_text(GLIDER_RLE)

        cube = load_cube_rle(path)
        assert cube.width == 3
        assert cube.population == 5
        assert cube.face_populations == [5, 0, 0, 0, 0, 0]

        cube = load_cube_rle(path, width=8, dim=2, sign=True)
        assert cube.width == 8
        assert cube.face_populations == [0, 0, 0, 0, 0, 5]
        assert cube.get_cell(2, True, 1, 0)


class TestPatternLibrary:
    """Test cases for the PatternLibrary class."""

    def test_builtin_patterns(self, tmp_path):
        library = PatternLibrary(str(tmp_path))
        names = library.list_patterns()
        for name in ["Block", "Blinker", "Glider", "Pulsar", "Acorn"]:
            assert name in names

        pulsar = library.get_pattern("Pulsar")
        assert len(pulsar.cells) == 48
        assert pulsar.get_size() == (13, 13)

    def test_get_missing_pattern(self, tmp_path):
        assert PatternLibrary(str(tmp_path)).get_pattern("Nope") is None

    def test_categories(self, tmp_path):
        library = PatternLibrary(str(tmp_path))
        library.add_pattern(Pattern("Mine", [(0, 0)]))
        categories = library.get_patterns_by_category()
        assert "Glider" in categories["Spaceships"]
        assert categories["Custom"] == ["Mine"]

    def test_save_and_load(self, tmp_path):
        library = PatternLibrary(str(tmp_path / "store"))
        path = library.save_pattern(Pattern("My Shape", [(0, 0), (1, 1)], "diagonal"))
        assert path.name == "my_shape.json"

        other = PatternLibrary(str(tmp_path / "store"))
        loaded = other.load_pattern("my_shape.json")
        assert loaded.cells == [(0, 0), (1, 1)]
        assert other.get_pattern("My Shape") is loaded

    def test_load_rle(self, tmp_path):
        path = tmp_path / "thing.rle"
        path.write_text("x = 3, y = 1\n3o!")
        library = PatternLibrary(str(tmp_path))
        pattern = library.load_rle(path)
        assert pattern.name == "thing"
        assert library.get_pattern("thing") is pattern
        assert np.array_equal(pattern.to_array(), [[True, True, True]])
