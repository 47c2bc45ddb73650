"""Command-line interface for Conway's Game of Life on a cube."""

import argparse
import random
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, List

from ..core.cube import Cube
from ..core.game import CubeGameOfLife
from ..core.patterns import PatternLibrary, Pattern, load_cube_rle
from ..core.imaging import import_cube_png, export_cube_png, write_png_binary


@dataclass
class SimulationConfig:
    """Configuration for a simulation run."""
    width: int = 100
    population_rate: float = 0.25
    seed: Optional[int] = None
    corner_fallback: bool = False
    max_generations: int = 1000
    interval: int = 0
    import_path: Optional[str] = None
    export_path: Optional[str] = None
    pattern: Optional[str] = None
    face_dim: int = 0
    face_high: bool = False
    pattern_x: int = 0
    pattern_y: int = 0


class CLICubeLife:
    """Command-line interface for running cube Life simulations."""

    def __init__(self, storage_dir: Optional[str] = None):
        self.pattern_library = PatternLibrary(storage_dir)

    def build_cube(self, config: SimulationConfig, verbose: bool = False) -> Tuple[Cube, Optional[int]]:
        """Create the initial generation described by a config.

        An imported file takes precedence over a pattern, and a pattern over
        a random fill.

        Returns:
            Tuple of (cube, seed) where seed is None unless the cube was
            randomly filled

        Raises:
            ValueError: If the import file type or pattern name is unknown
        """
        if config.import_path:
            path = Path(config.import_path)
            suffix = path.suffix.lower()
            if suffix == ".png":
                cube = import_cube_png(path)
            elif suffix == ".rle":
                cube = load_cube_rle(path, dim=config.face_dim, sign=config.face_high)
            else:
                raise ValueError("Unrecognized file extension, supports only PNG and RLE")
            if verbose:
                print(f"Imported {path} (width {cube.width})")
            return cube, None

        cube = Cube(config.width)

        if config.pattern:
            pattern = self.pattern_library.get_pattern(config.pattern)
            if pattern is None:
                raise ValueError(f"Pattern '{config.pattern}' not found")
            if verbose:
                print(
                    f"Loading pattern '{config.pattern}' on face dim={config.face_dim} "
                    f"sign={'high' if config.face_high else 'low'} at ({config.pattern_x}, {config.pattern_y})"
                )
            pattern.apply_to_cube(cube, config.face_dim, config.face_high, config.pattern_x, config.pattern_y)
            return cube, None

        seed = config.seed if config.seed is not None else random.randrange(2**32)
        print(f"Using seed {seed}")
        if verbose:
            print(f"Generating random population (rate: {config.population_rate:.2%})")
        cube.randomize(config.population_rate, seed=seed)
        return cube, seed

    def run_simulation(
        self,
        config: SimulationConfig,
        verbose: bool = False,
        show_cube: bool = False,
    ) -> Tuple[int, str, dict]:
        """Run a cube Life simulation.

        Args:
            config: Simulation configuration
            verbose: Print progress updates
            show_cube: Show initial and final cube states

        Returns:
            Tuple of (final_generation, finish_reason, statistics)
        """
        cube, seed = self.build_cube(config, verbose)
        game = CubeGameOfLife(cube, corner_fallback=config.corner_fallback)
        initial_population = game.population

        if verbose:
            print(f"Initial population: {initial_population} cells on a width-{cube.width} cube")

        if show_cube:
            print("\nInitial cube:")
            print(self._format_cube(game.cube))

        start_time = time.time()

        # Run in chunks of `interval` generations so progress can be reported
        chunk = config.interval or config.max_generations
        remaining = config.max_generations
        reason = "max_generations"
        while remaining > 0:
            before = game.generation
            _, reason = game.run_until_stable(min(chunk, remaining))
            remaining -= game.generation - before
            if config.interval:
                print(f"Generation {game.generation}: population {game.population}")
            if reason != "max_generations":
                break

        duration = time.time() - start_time

        stats = game.get_statistics()
        stats["duration_seconds"] = duration
        stats["generations_per_second"] = game.generation / duration if duration > 0 else 0
        stats["initial_population"] = initial_population
        stats["seed"] = seed

        if show_cube:
            print(f"\nFinal cube (generation {game.generation}):")
            print(self._format_cube(game.cube))

        if config.export_path:
            export_cube_png(config.export_path, game.cube)
            if verbose:
                print(f"Exported generation {game.generation} to {config.export_path}")

        return game.generation, reason, stats

    def _format_cube(self, cube: Cube, max_width: int = 40) -> str:
        """Format cube for display, truncating if too large."""
        if cube.width > max_width:
            return f"Cube too large to display (width {cube.width})"

        return str(cube)

    def list_patterns(self) -> None:
        """List available patterns by category."""
        categories = self.pattern_library.get_patterns_by_category()

        print("Available patterns:")
        for category, patterns in categories.items():
            print(f"\n{category}:")
            for pattern_name in patterns:
                pattern = self.pattern_library.get_pattern(pattern_name)
                if pattern:
                    size = pattern.get_size()
                    print(f"  {pattern_name}: {size[0]}x{size[1]}, {len(pattern.cells)} cells")
                    if pattern.description:
                        print(f"    {pattern.description}")


def rle_to_png(path: str) -> Path:
    """Convert an RLE pattern file to a PNG next to it (``<path>.png``).

    Returns:
        Path of the written image
    """
    pattern = Pattern.from_rle(Path(path).read_text())
    pixels = pattern.to_array()
    out_path = Path(f"{path}.png")
    write_png_binary(out_path, pixels, pixels.shape[1])
    return out_path


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Run Conway's Game of Life on the surface of a cube",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Random width-100 cube with 25% population, fixed seed
  cubelife --width 100 --population 0.25 --seed 42

  # Glider on the high face of dimension 1, exported after 200 generations
  cubelife -w 20 --pattern Glider --face 1 --high -m 200 --export out.png

  # Continue from an exported image, counting missing corner cells as alive
  cubelife --import out.png --corner-true

  # List available patterns
  cubelife --list-patterns
        """,
    )

    parser.add_argument("-w", "--width", type=int, default=100, help="Cube width (default: 100)")

    parser.add_argument(
        "-p",
        "--population",
        type=float,
        default=0.25,
        help="Fill probability for the initial value 0.0-1.0 (default: 0.25)",
    )

    parser.add_argument("-s", "--seed", type=int, help="Random seed; random if unspecified")

    parser.add_argument(
        "--corner-true",
        action="store_true",
        help="Count the missing neighbors at cube corners as alive instead of dead",
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--import",
        dest="import_path",
        type=str,
        help="Import a PNG or RLE file; supersedes width",
    )
    source.add_argument(
        "--pattern",
        type=str,
        help="Load a built-in pattern instead of random population",
    )

    parser.add_argument(
        "--face",
        type=int,
        default=0,
        choices=[0, 1, 2],
        help="Face dimension to place a pattern or RLE file on (default: 0)",
    )

    parser.add_argument(
        "--high",
        action="store_true",
        help="Place the pattern on the high face of --face instead of the low one",
    )

    parser.add_argument("--pattern-x", type=int, default=0, help="X offset for pattern placement (default: 0)")

    parser.add_argument("--pattern-y", type=int, default=0, help="Y offset for pattern placement (default: 0)")

    parser.add_argument(
        "-m",
        "--max-generations",
        type=int,
        default=1000,
        help="Maximum generations to simulate (default: 1000)",
    )

    parser.add_argument(
        "-i",
        "--interval",
        type=int,
        default=0,
        help="Print progress every N generations (default: 0, never)",
    )

    parser.add_argument("--export", dest="export_path", type=str, help="Export a PNG image when the run ends")

    parser.add_argument("-v", "--verbose", action="store_true", help="Print detailed progress information")

    parser.add_argument(
        "-g",
        "--show-cube",
        action="store_true",
        help="Display initial and final cube states (small cubes only)",
    )

    parser.add_argument(
        "--list-patterns",
        action="store_true",
        help="List all available patterns and exit",
    )

    return parser


def validate_args(args: argparse.Namespace) -> bool:
    """Validate command-line arguments.

    Returns:
        True if arguments are valid
    """
    errors = []

    if args.width <= 0:
        errors.append("Width must be positive")

    if not 0.0 <= args.population <= 1.0:
        errors.append("Population rate must be between 0.0 and 1.0")

    if args.max_generations <= 0:
        errors.append("Max generations must be positive")

    if args.interval < 0:
        errors.append("Interval must be non-negative")

    if args.pattern_x < 0:
        errors.append("Pattern X offset must be non-negative")

    if args.pattern_y < 0:
        errors.append("Pattern Y offset must be non-negative")

    if errors:
        print("Error: Invalid arguments:")
        for error in errors:
            print(f"  - {error}")
        return False

    return True


def config_from_args(args: argparse.Namespace) -> SimulationConfig:
    """Build a SimulationConfig from parsed arguments."""
    return SimulationConfig(
        width=args.width,
        population_rate=args.population,
        seed=args.seed,
        corner_fallback=args.corner_true,
        max_generations=args.max_generations,
        interval=args.interval,
        import_path=args.import_path,
        export_path=args.export_path,
        pattern=args.pattern,
        face_dim=args.face,
        face_high=args.high,
        pattern_x=args.pattern_x,
        pattern_y=args.pattern_y,
    )


def format_finish_reason(reason: str, stats: dict) -> str:
    """Format the simulation finish reason for display."""
    if reason == "extinction":
        return "Extinction - all cells died"
    elif reason == "cycle":
        cycle_len = stats.get("cycle_length", 0)
        cycle_start = stats.get("cycle_start_generation", 0)
        return f"Cycle detected - length {cycle_len}, started at generation {cycle_start}"
    elif reason == "max_generations":
        return f"Maximum generations reached ({stats.get('generation', 0)})"
    else:
        return f"Unknown reason: {reason}"


def print_results(final_generation: int, reason: str, stats: dict, verbose: bool) -> None:
    """Print simulation results."""
    print(f"\nSimulation completed after {final_generation} generations")
    print(f"Finish reason: {format_finish_reason(reason, stats)}")

    if verbose:
        print("\nDetailed Statistics:")
        print(f"  Cube width: {stats['width']}")
        print(f"  Corner fallback: {'alive' if stats['corner_fallback'] else 'dead'}")
        print(f"  Initial population: {stats['initial_population']}")
        print(f"  Final population: {stats['population']}")
        print(f"  Face populations: {', '.join(str(n) for n in stats['face_populations'])}")
        print(f"  Population density: {stats['population_density']:.2%}")
        print(f"  Population change rate: {stats['population_change_rate']:.2f}")
        if "duration_seconds" in stats:
            print(f"  Duration: {stats['duration_seconds']:.3f} seconds")
            print(f"  Speed: {stats['generations_per_second']:.0f} generations/second")
    else:
        print(
            "Population: {} -> {}, "
            "Duration: {:.3f}s, "
            "Speed: {:.0f} gen/s".format(
                stats["initial_population"],
                stats["population"],
                stats.get("duration_seconds", 0),
                stats.get("generations_per_second", 0),
            )
        )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI interface.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    cli = CLICubeLife()

    if args.list_patterns:
        cli.list_patterns()
        return 0

    if not validate_args(args):
        return 1

    config = config_from_args(args)

    # Auto-center pattern if no offset specified
    if config.pattern and config.pattern_x == 0 and config.pattern_y == 0:
        pattern = cli.pattern_library.get_pattern(config.pattern)
        if pattern is not None:
            pattern_width, pattern_height = pattern.get_size()
            config.pattern_x = max(0, (config.width - pattern_width) // 2)
            config.pattern_y = max(0, (config.width - pattern_height) // 2)
            if args.verbose:
                print(f"Auto-centering pattern at ({config.pattern_x}, {config.pattern_y})")

    try:
        final_generation, reason, stats = cli.run_simulation(
            config, verbose=args.verbose, show_cube=args.show_cube
        )
    except (ValueError, OSError) as e:
        print(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nSimulation interrupted by user")
        return 1

    print_results(final_generation, reason, stats, args.verbose)
    return 0


def rle_to_png_main(argv: Optional[List[str]] = None) -> int:
    """Entry point converting an RLE file to ``<file>.png``."""
    parser = argparse.ArgumentParser(description="Convert an RLE pattern file to a PNG image")
    parser.add_argument("path", help="RLE file to convert")
    args = parser.parse_args(argv)

    try:
        out_path = rle_to_png(args.path)
    except (ValueError, OSError) as e:
        print(f"Error: {e}")
        return 1

    print(f"Wrote {out_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
