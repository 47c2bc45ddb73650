"""Conway's Game of Life on the surface of a cube."""

from typing import Deque, Dict, Tuple
from collections import deque
import numpy as np

from .cube import Cube

MAX_TRACKED_STATES = 1000


def step(current: Cube, next_cube: Cube, corner_fallback: bool = False) -> None:
    """Compute the next generation of ``current`` into ``next_cube``.

    Implements the classic rules:
    - Live cell with 2-3 neighbors survives
    - Dead cell with exactly 3 neighbors becomes alive
    - All other cells die or stay dead

    Every cell of ``next_cube`` is overwritten; ``current`` is only read.

    Args:
        current: Generation to read from
        next_cube: Generation to write into
        corner_fallback: Value counted for each corner-diagonal neighbor

    Raises:
        ValueError: If the widths differ or both cubes share one buffer
    """
    if current.width != next_cube.width:
        raise ValueError(f"Cube widths don't match: {current.width} vs {next_cube.width}")
    if np.shares_memory(current.cells, next_cube.cells):
        raise ValueError("Current and next generation must not share a buffer")

    neighbor_counts = current.count_all_neighbors(corner_fallback)
    cells = current.cells

    survive_mask = cells & ((neighbor_counts == 2) | (neighbor_counts == 3))
    birth_mask = ~cells & (neighbor_counts == 3)

    next_cube.cells[:] = survive_mask | birth_mask


class CubeGameOfLife:
    """Double-buffered simulation engine.

    The engine owns two cubes of the same width. Each generation is written
    into the back buffer from the front buffer, then the two swap roles.
    """

    def __init__(self, cube: Cube, corner_fallback: bool = False) -> None:
        """Initialize the game with a cube.

        Args:
            cube: Initial generation; becomes the front buffer
            corner_fallback: Value counted for each corner-diagonal neighbor
        """
        self._front = cube
        self._back = Cube(cube.width)
        self.corner_fallback = corner_fallback
        self._generation = 0
        self._population_history: Deque[int] = deque(maxlen=100)
        self._seen_states: Dict[bytes, int] = {}
        self._cycle_detected = False
        self._cycle_length = 0
        self._cycle_start_generation = 0

        self._update_population_history()

    @property
    def cube(self) -> Cube:
        """The current generation."""
        return self._front

    @property
    def width(self) -> int:
        return self._front.width

    @property
    def generation(self) -> int:
        """Current generation number."""
        return self._generation

    @property
    def population(self) -> int:
        """Current number of living cells."""
        return self._front.population

    @property
    def population_history(self) -> list:
        """History of population counts."""
        return list(self._population_history)

    @property
    def cycle_detected(self) -> bool:
        """Whether a cycle has been detected."""
        return self._cycle_detected

    @property
    def cycle_length(self) -> int:
        """Length of detected cycle (0 if no cycle)."""
        return self._cycle_length

    @property
    def cycle_start_generation(self) -> int:
        """Generation where cycle started (0 if no cycle)."""
        return self._cycle_start_generation

    def step(self) -> None:
        """Advance the simulation by one generation."""
        self._check_for_cycles()

        step(self._front, self._back, self.corner_fallback)
        self._front, self._back = self._back, self._front

        self._generation += 1
        self._update_population_history()

    def _update_population_history(self) -> None:
        self._population_history.append(self.population)

    def _check_for_cycles(self) -> None:
        """Check if the current state has been seen before (cycle detection)."""
        if self._cycle_detected:
            return

        current_state = np.packbits(self._front.cells).tobytes()

        if current_state in self._seen_states:
            first_occurrence = self._seen_states[current_state]
            self._cycle_detected = True
            self._cycle_length = self._generation - first_occurrence
            self._cycle_start_generation = first_occurrence
            return

        self._seen_states[current_state] = self._generation

        # Insertion order is generation order; drop the oldest state
        if len(self._seen_states) > MAX_TRACKED_STATES:
            del self._seen_states[next(iter(self._seen_states))]

    def reset(self, clear_cube: bool = True) -> None:
        """Reset the simulation.

        Args:
            clear_cube: Whether to clear the cube as well
        """
        if clear_cube:
            self._front.clear()

        self._generation = 0
        self._population_history.clear()
        self.clear_cycle_detection()
        self._update_population_history()

    def clear_cycle_detection(self) -> None:
        """Forget seen states; call after editing the cube by hand."""
        self._cycle_detected = False
        self._cycle_length = 0
        self._cycle_start_generation = 0
        self._seen_states.clear()

    def run_until_stable(self, max_generations: int = 10000) -> Tuple[int, str]:
        """Run simulation until it becomes stable or cycles.

        Args:
            max_generations: Maximum generations to run

        Returns:
            Tuple of (final_generation, reason) where reason is one of:
            'cycle', 'extinction', 'max_generations'
        """
        for _ in range(max_generations):
            self.step()

            if self._cycle_detected:
                return self._generation, "cycle"

            if self.population == 0:
                return self._generation, "extinction"

        return self._generation, "max_generations"

    def get_population_change_rate(self, window_size: int = 10) -> float:
        """Calculate recent population change rate.

        Args:
            window_size: Number of recent generations to consider

        Returns:
            Average population change per generation
        """
        recent_history = list(self._population_history)[-window_size:]
        if len(recent_history) < 2:
            return 0.0

        return float(np.mean(np.diff(recent_history)))

    def save_state(self) -> Dict:
        """Save complete game state for serialization."""
        return {
            "generation": self._generation,
            "cube_data": self._front.to_list(),
            "width": self.width,
            "corner_fallback": self.corner_fallback,
            "population_history": list(self._population_history),
            "cycle_detected": self._cycle_detected,
            "cycle_length": self._cycle_length,
            "cycle_start_generation": self._cycle_start_generation,
        }

    def load_state(self, state: Dict) -> None:
        """Load complete game state from serialization.

        Raises:
            ValueError: If state is incompatible with current cube
        """
        if state["width"] != self.width:
            raise ValueError(f"Cube size mismatch: saved width {state['width']} vs current {self.width}")

        self._front.from_list(state["cube_data"])

        self._generation = state["generation"]
        self.corner_fallback = state.get("corner_fallback", self.corner_fallback)
        self._population_history = deque(state["population_history"], maxlen=100)
        self._cycle_detected = state["cycle_detected"]
        self._cycle_length = state["cycle_length"]
        self._cycle_start_generation = state["cycle_start_generation"]

        # Seen states are not serialized
        self._seen_states.clear()

    def get_statistics(self) -> Dict:
        """Get simulation statistics."""
        return {
            "generation": self._generation,
            "population": self.population,
            "face_populations": self._front.face_populations,
            "population_change_rate": self.get_population_change_rate(),
            "population_history": list(self._population_history),
            "cycle_detected": self._cycle_detected,
            "cycle_length": self._cycle_length,
            "cycle_start_generation": self._cycle_start_generation,
            "width": self.width,
            "corner_fallback": self.corner_fallback,
            "population_density": self.population / len(self._front),
        }
