# app/models/__init__.py

from models.piece import Piece, Side, Square
from models.board import Board
from models.player import Player

__all__ = ["Piece", "Side", "Square", "Board", "Player"]
