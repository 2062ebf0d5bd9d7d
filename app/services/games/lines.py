# app/services/games/lines.py

from typing import Callable, Optional, Tuple
from models.piece import Side, Square

# Horizontal, vertical and both diagonals; each axis is walked both ways
LINE_AXES: Tuple[Tuple[int, int], ...] = ((1, 0), (0, 1), (1, 1), (1, -1))


def count_direction(side_at: Callable[[int, int], Optional[Side]], square: Square,
                    dx: int, dy: int, side: Side) -> int:
    """Count consecutive squares held by side, starting next to square and walking (dx, dy)"""
    x, y = square[0] + dx, square[1] + dy
    count = 0
    while side_at(x, y) == side:
        count += 1
        x += dx
        y += dy
    return count


def longest_line_through(side_at: Callable[[int, int], Optional[Side]], square: Square) -> int:
    """
    Length of the longest straight line of one side passing through square.

    Args:
        side_at: Returns the side holding a square, or None for empty/outside squares
        square: Square to measure from, must be occupied

    Returns:
        Number of squares in the longest line, 0 if square is empty
    """
    side = side_at(*square)
    if side is None:
        return 0
    return max(
        1 + count_direction(side_at, square, dx, dy, side) + count_direction(side_at, square, -dx, -dy, side)
        for dx, dy in LINE_AXES
    )
