"""Index math for six square faces glued into a cube.

Each face is identified by ``(dim, sign)``. A face's local coordinates are
embedded in world space as::

    dim 0: (u, v, s)
    dim 1: (v, s, u)
    dim 2: (s, u, v)

where ``s`` is ``0`` on the low face and ``width - 1`` on the high face. A
neighbor that steps off a face in one coordinate lands on the face whose
normal is that coordinate's world axis, at the cell folded around the edge.
"""

from functools import lru_cache
from typing import List, Optional, Tuple

import numpy as np

FACES: List[Tuple[int, bool]] = [(dim, sign) for dim in range(3) for sign in (False, True)]

NEIGHBOR_OFFSETS: List[Tuple[int, int]] = [
    (du, dv) for du in (-1, 0, 1) for dv in (-1, 0, 1) if not (du == 0 and dv == 0)
]


def face_index(dim: int, sign: bool) -> int:
    """Position of a face in buffer order (0-5)."""
    return dim * 2 + (1 if sign else 0)


def linear_index(u: int, v: int, sign: bool, dim: int, width: int) -> int:
    """Return the buffer index of the cell at ``(u, v)`` on face ``(dim, sign)``.

    Raises:
        IndexError: If ``u`` or ``v`` is outside ``[0, width)`` or ``dim`` is
            not 0, 1 or 2
    """
    if not (0 <= u < width and 0 <= v < width):
        raise IndexError(f"Coordinates ({u}, {v}) out of bounds for width {width}")
    if not 0 <= dim < 3:
        raise IndexError(f"Face dimension {dim} out of range")

    face_stride = width * width
    dim_base = dim * face_stride * 2
    face_base = dim_base + (face_stride if sign else 0)
    return face_base + v * width + u


def locate(index: int, width: int) -> Tuple[int, bool, int, int]:
    """Inverse of :func:`linear_index`.

    Returns:
        Tuple of (dim, sign, u, v)
    """
    face_stride = width * width
    if not 0 <= index < 6 * face_stride:
        raise IndexError(f"Index {index} out of range for width {width}")

    face, offset = divmod(index, face_stride)
    v, u = divmod(offset, width)
    return face // 2, bool(face % 2), u, v


def resolve_neighbor(u: int, v: int, sign: bool, dim: int, width: int) -> Optional[int]:
    """Return the buffer index of a possibly off-face coordinate.

    ``u`` and ``v`` may each be one step outside ``[0, width)``. When only one
    of them is, the cell lives on an adjacent face and the coordinates are
    rotated into that face's frame. When both are, the offset points past a
    cube corner and no single cell owns it.

    Returns:
        Buffer index, or None for a corner-diagonal overflow
    """
    u_out = not 0 <= u < width
    v_out = not 0 <= v < width

    if not u_out and not v_out:
        return linear_index(u, v, sign, dim, width)

    if u_out and v_out:
        return None

    # The overflowed coordinate moves into the sign slot of the new face
    off = 2 if u_out else 1
    local = (u, v, width - 1 if sign else 0)

    rotated = [0, 0, 0]
    for i in range(3):
        rotated[(i + off) % 3] = local[i]

    new_u, new_v, new_sign = rotated
    return linear_index(new_u, new_v, new_sign > 0, (dim + off) % 3, width)


@lru_cache(maxsize=16)
def neighbor_table(width: int) -> np.ndarray:
    """Resolved neighbor indices for every cell of a cube.

    Row ``i`` holds the eight neighbors of cell ``i`` in
    ``NEIGHBOR_OFFSETS`` order, with ``-1`` marking corner-diagonal overflow.
    The returned array is shared between callers and is read-only.
    """
    if width < 1:
        raise ValueError(f"Width must be positive, got {width}")

    table = np.empty((6 * width * width, len(NEIGHBOR_OFFSETS)), dtype=np.int64)
    for dim, sign in FACES:
        for v in range(width):
            for u in range(width):
                row = table[linear_index(u, v, sign, dim, width)]
                for k, (du, dv) in enumerate(NEIGHBOR_OFFSETS):
                    idx = resolve_neighbor(u + du, v + dv, sign, dim, width)
                    row[k] = -1 if idx is None else idx

    table.setflags(write=False)
    return table
