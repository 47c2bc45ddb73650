#!/usr/bin/env python3
"""
Example usage of the cubelife package.
"""

from cubelife import Cube, CubeGameOfLife, PatternLibrary


def main():
    """Send a glider across a seam and watch it change faces."""
    cube = Cube(8)
    game = CubeGameOfLife(cube)

    library = PatternLibrary()
    glider = library.get_pattern("Glider")

    if glider:
        # Start near the high-u, high-v corner of the low face of dim 0
        glider.apply_to_cube(cube, dim=0, sign=False, offset_x=3, offset_y=2)

        print("Initial state:")
        print(game.cube)
        print(f"Face populations: {game.cube.face_populations}")
        print()

        for _ in range(12):
            game.step()
            print(f"Generation {game.generation}: faces {game.cube.face_populations}")

            if game.cycle_detected:
                print(f"Cycle detected! Length: {game.cycle_length}")
                break

    stats = game.get_statistics()
    print("Final statistics:")
    for key, value in stats.items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    main()
