# app/models/piece.py

from enum import Enum
from typing import Tuple

Square = Tuple[int, int]


class Side(Enum):
    """The two opposing factions of a two-sided board game"""
    WHITE = "white"
    BLACK = "black"
    
    @property
    def opponent(self) -> "Side":
        return Side.BLACK if self is Side.WHITE else Side.WHITE


class Piece:
    """
    A game piece positioned on a board.
    
    Pieces compare by identity, so the same object can be tracked through
    a player's hand, the board and the capturing player's spoils.
    Position is changed through the Board only.
    """
    
    def __init__(self, piece_id: int, side: Side, x: int, y: int, promoted: bool = False):
        self.id = piece_id
        self.side = side
        self.x = x
        self.y = y
        self._promoted = promoted
    
    @property
    def position(self) -> Square:
        return (self.x, self.y)
    
    @property
    def promoted(self) -> bool:
        return self._promoted
    
    def promote(self) -> bool:
        """
        Promote the piece. Promotion never reverts.
        
        Returns:
            True if the piece was promoted by this call, False if it already was
        """
        if self._promoted:
            return False
        self._promoted = True
        return True
    
    def __repr__(self):
        return f"<Piece(id={self.id}, side='{self.side.value}', position={self.position}, promoted={self._promoted})>"
