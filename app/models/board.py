# app/models/board.py

from typing import Dict, Iterator, List, Optional
from models.piece import Piece, Side, Square


class Board:
    """
    Square grid holding pieces, 1-indexed in both axes.
    
    Pieces are indexed by coordinate, and every mutation checks that the
    target square is inside the board and unoccupied.
    """
    
    def __init__(self, size: int):
        if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
            raise ValueError(f"Board size must be a positive integer, got {size!r}")
        self.size = size
        self._squares: Dict[Square, Piece] = {}
    
    @classmethod
    def setup_checkers(cls, size: int, piece_rows: int = 3) -> "Board":
        """
        Create a board with the starting layout of a two-sided capture game.
        
        White fills rows 1..piece_rows and black fills the last piece_rows rows,
        using only squares where x + y is even: odd columns on the outer rows
        of white's band, even columns on its middle row, mirrored for black.
        
        Args:
            size: Board size, an even number leaving two empty rows between the bands
            piece_rows: Number of rows each side starts on
            
        Returns:
            Board with size // 2 * piece_rows pieces per side
        """
        if not isinstance(size, int) or isinstance(size, bool) or size % 2 != 0:
            raise ValueError(f"Checkers board size must be an even integer, got {size!r}")
        # At least two empty rows between the bands
        if piece_rows < 1 or size < 2 * piece_rows + 2:
            raise ValueError(f"Board size {size} is too small for {piece_rows} rows of pieces per side")
        
        board = cls(size)
        piece_id = 1
        
        bands = [
            (Side.WHITE, range(1, piece_rows + 1)),
            (Side.BLACK, range(size - piece_rows + 1, size + 1)),
        ]
        for side, rows in bands:
            for y in rows:
                # Playable squares alternate by row
                first_column = 1 if y % 2 == 1 else 2
                for x in range(first_column, size + 1, 2):
                    board.place(Piece(piece_id, side, x, y))
                    piece_id += 1
        
        return board
    
    def in_bounds(self, x: int, y: int) -> bool:
        """Check if a coordinate is inside the board"""
        return 1 <= x <= self.size and 1 <= y <= self.size
    
    def piece_at(self, x: int, y: int) -> Optional[Piece]:
        """Find the piece at the requested coordinates, or None"""
        return self._squares.get((x, y))
    
    def is_empty(self, x: int, y: int) -> bool:
        return (x, y) not in self._squares
    
    def place(self, piece: Piece) -> None:
        """Put a piece on the board at its own coordinates"""
        if not self.in_bounds(piece.x, piece.y):
            raise ValueError(f"Square {piece.position} is outside a {self.size}x{self.size} board")
        if not self.is_empty(piece.x, piece.y):
            raise ValueError(f"Square {piece.position} is already occupied")
        self._squares[piece.position] = piece
    
    def move(self, piece: Piece, x: int, y: int) -> None:
        """Move a piece already on the board to an empty square"""
        if self._squares.get(piece.position) is not piece:
            raise ValueError(f"{piece!r} is not on the board")
        if not self.in_bounds(x, y):
            raise ValueError(f"Square {(x, y)} is outside a {self.size}x{self.size} board")
        if not self.is_empty(x, y):
            raise ValueError(f"Square {(x, y)} is already occupied")
        
        del self._squares[piece.position]
        piece.x = x
        piece.y = y
        self._squares[(x, y)] = piece
    
    def remove(self, piece: Piece) -> None:
        """Take a piece off the board"""
        if self._squares.get(piece.position) is not piece:
            raise ValueError(f"{piece!r} is not on the board")
        del self._squares[piece.position]
    
    @property
    def pieces(self) -> List[Piece]:
        return list(self._squares.values())
    
    def pieces_of(self, side: Side) -> List[Piece]:
        """All pieces of a side currently on the board"""
        return [piece for piece in self._squares.values() if piece.side == side]
    
    def count(self, side: Side) -> int:
        return sum(1 for piece in self._squares.values() if piece.side == side)
    
    def __iter__(self) -> Iterator[Piece]:
        return iter(self.pieces)
    
    def __len__(self) -> int:
        return len(self._squares)
    
    def render(self) -> str:
        """
        Text rendering of the board, row 1 first.
        
        'w'/'b' are regular pieces, 'W'/'B' promoted pieces and '.' an empty square.
        """
        lines = []
        for y in range(1, self.size + 1):
            cells = []
            for x in range(1, self.size + 1):
                piece = self._squares.get((x, y))
                if piece is None:
                    cells.append(".")
                else:
                    symbol = piece.side.value[0]
                    cells.append(symbol.upper() if piece.promoted else symbol)
            lines.append("".join(cells))
        return "\n".join(lines)
    
    def __str__(self):
        return self.render()
