# app/models/player.py

import logging
from typing import List, Optional, Set, TYPE_CHECKING
from models.piece import Piece

if TYPE_CHECKING:
    from schemas.player_schema import AccountRef

logger = logging.getLogger(__name__)


class Player:
    """
    A participant of one game session.
    
    Holds the pieces the player controls (hand) and the pieces captured
    from opponents (spoils). A piece only ever leaves a hand through
    capture_from, which moves it into the capturer's spoils in one step.
    """
    
    def __init__(self, account_ref: str, username: Optional[str] = None):
        if not account_ref:
            raise ValueError("Player requires an account reference")
        self.account_ref = account_ref
        self.username = username or account_ref
        self.plays = 0
        self.score = 0
        self._hand: Set[Piece] = set()
        self._spoils: List[Piece] = []
    
    @classmethod
    def from_account(cls, account: "AccountRef") -> "Player":
        """Create a Player for a game through their account"""
        return cls(account.identifier, account.username)
    
    @property
    def hand(self) -> frozenset:
        return frozenset(self._hand)
    
    @property
    def spoils(self) -> List[Piece]:
        return list(self._spoils)
    
    def add_to_hand(self, piece: Piece) -> None:
        self._hand.add(piece)
    
    def holds(self, piece: Piece) -> bool:
        """Check if a piece is in the player's hand"""
        return piece in self._hand
    
    def capture_from(self, opponent: "Player", piece: Piece) -> None:
        """
        Transfer a piece from the opponent's hand into this player's spoils.
        
        Raises:
            ValueError: If the piece is not in the opponent's hand. Nothing is changed.
        """
        if opponent is self:
            raise ValueError("A player cannot capture their own piece")
        if piece not in opponent._hand:
            raise ValueError(f"{piece!r} is not in the hand of {opponent.account_ref}")
        
        opponent._hand.remove(piece)
        self._spoils.append(piece)
        logger.debug(f"{self.account_ref} captured piece {piece.id} from {opponent.account_ref}")
    
    def add_play(self) -> None:
        self.plays += 1
    
    def add_points(self, points: int) -> None:
        self.score += points
    
    def __repr__(self):
        return f"<Player(account_ref='{self.account_ref}', username='{self.username}', plays={self.plays}, score={self.score})>"
