# app/services/games/tictactoe_engine.py

from typing import Dict, Any, Optional, List, Tuple
from models.board import Board
from models.piece import Piece, Side, Square
from models.player import Player
from services.rules_engine_interface import (
    RulesEngineInterface,
    MoveValidationResult,
    DestinationQuery,
    MoveApplication,
    MoveError,
    GameResult,
)
from services.games.lines import longest_line_through
from schemas.game_schema import GameInfo, GameRuleOption, BoardSnapshot
from config.settings import settings


class TicTacToeEngine(RulesEngineInterface):
    """
    Tic-tac-toe game engine implementation.

    Rules:
    - 2 players only
    - 3x3 grid by default
    - Players alternate placing X and O
    - Win by getting win_length in a row (horizontal, vertical, or diagonal)
    - Draw if board is full with no winner

    Custom rules supported:
    - board_size: Size of the board (default: 3, supports 3-5)
    - win_length: Number in a row to win (default: 3)
    """

    def __init__(self, players: List[Player], rules: Optional[Dict[str, Any]] = None):
        super().__init__(players, rules)

        # Parse custom rules
        self.board_size = int(self._rule("board_size", settings.TICTACTOE_BOARD_SIZE))
        self.win_length = int(self._rule("win_length"))

        # Validate board size
        if not 3 <= self.board_size <= 5:
            raise ValueError("Board size must be between 3 and 5")

        # Validate win length
        if self.win_length > self.board_size:
            raise ValueError("Win length cannot exceed board size")

        self.board = Board(self.board_size)

        # Assign symbols to players
        self.player_sides: Dict[str, Side] = {
            self.player_ids[0]: Side.WHITE,
            self.player_ids[1]: Side.BLACK,
        }
        self.player_symbols = {
            self.player_ids[0]: "X",
            self.player_ids[1]: "O",
        }
        self.last_move: Optional[Square] = None
        self._next_piece_id = 1

    def _side_at(self, x: int, y: int) -> Optional[Side]:
        piece = self.board.piece_at(x, y)
        return piece.side if piece else None

    def legal_destinations(self, x: int, y: int) -> DestinationQuery:
        """Placed symbols never move, so an occupied square has no destinations"""
        if not self.board.in_bounds(x, y):
            return DestinationQuery.reject(
                MoveError.OUT_OF_BOUNDS,
                f"Position out of bounds (board size: {self.board_size}x{self.board_size})"
            )
        if self.board.is_empty(x, y):
            return DestinationQuery.reject(MoveError.NO_PIECE_AT_SQUARE, f"No piece at ({x}, {y})")
        return DestinationQuery(True, set())

    def legal_moves(self, player_id: str) -> List[Dict[str, Any]]:
        """Every empty square is a legal placement"""
        return [
            {"x": x, "y": y}
            for y in range(1, self.board_size + 1)
            for x in range(1, self.board_size + 1)
            if self.board.is_empty(x, y)
        ]

    def _parse_move(self, move_data: Dict[str, Any]) -> Tuple[int, int]:
        if "x" not in move_data or "y" not in move_data:
            raise ValueError("Move must contain 'x' and 'y' fields")
        try:
            return int(move_data["x"]), int(move_data["y"])
        except (ValueError, TypeError):
            raise ValueError("x and y must be integers")

    def validate_move(self, player_id: str, move_data: Dict[str, Any]) -> MoveValidationResult:
        """
        Validate a tic-tac-toe move.

        Move data should contain:
        - x: int (1 to board_size)
        - y: int (1 to board_size)
        """
        try:
            x, y = self._parse_move(move_data)
        except ValueError as e:
            return MoveValidationResult.reject(MoveError.INVALID_MOVE_DATA, str(e))

        # Check if position is within bounds
        if not self.board.in_bounds(x, y):
            return MoveValidationResult.reject(
                MoveError.OUT_OF_BOUNDS,
                f"Position out of bounds (board size: {self.board_size}x{self.board_size})"
            )

        # Check if position is empty
        if not self.board.is_empty(x, y):
            return MoveValidationResult.reject(MoveError.ILLEGAL_MOVE, "Position already occupied")

        return MoveValidationResult(True)

    def apply_move(self, player_id: str, move_data: Dict[str, Any]) -> MoveApplication:
        """Place the player's symbol on the board"""
        x, y = self._parse_move(move_data)
        piece = Piece(self._next_piece_id, self.player_sides[player_id], x, y)
        self._next_piece_id += 1

        self.board.place(piece)
        self.get_player(player_id).add_to_hand(piece)
        self.last_move = (x, y)

        return MoveApplication()

    def check_game_result(self, mover_id: str) -> tuple[GameResult, Optional[str]]:
        """Check for win or draw conditions"""
        if self.last_move is not None:
            if longest_line_through(self._side_at, self.last_move) >= self.win_length:
                return GameResult.PLAYER_WIN, mover_id

        # Check for draw (board full)
        if len(self.board) >= self.board_size * self.board_size:
            return GameResult.DRAW, None

        # Game still in progress
        return GameResult.IN_PROGRESS, None

    def render(self) -> str:
        """Board as rows of 'X', 'O' and '.'"""
        symbols = {side: self.player_symbols[player_id] for player_id, side in self.player_sides.items()}
        return "\n".join(
            "".join(symbols.get(self._side_at(x, y), ".") for x in range(1, self.board_size + 1))
            for y in range(1, self.board_size + 1)
        )

    def board_snapshot(self) -> BoardSnapshot:
        return BoardSnapshot(
            width=self.board_size,
            height=self.board_size,
            pieces=[self._piece_snapshot(piece) for piece in sorted(self.board, key=lambda p: p.id)],
        )

    def engine_state(self) -> Dict[str, Any]:
        state = super().engine_state()
        state["player_symbols"] = dict(self.player_symbols)
        state["rendered"] = self.render()
        return state

    @classmethod
    def get_game_name(cls) -> str:
        """Get the game name"""
        return "tictactoe"

    @classmethod
    def get_game_info(cls) -> GameInfo:
        """Get static tic-tac-toe game information"""
        return GameInfo(
            game_name=cls.get_game_name(),
            display_name="Tic-Tac-Toe",
            description="Classic tic-tac-toe game. Get 3 in a row to win!",
            min_players=2,
            max_players=2,
            supported_rules={
                "board_size": GameRuleOption(
                    type="integer",
                    min=3,
                    max=5,
                    default=settings.TICTACTOE_BOARD_SIZE,
                    description="Size of the game board (NxN)"
                ),
                "win_length": GameRuleOption(
                    type="integer",
                    min=3,
                    max=5,
                    default=3,
                    description="Number of symbols in a row needed to win"
                )
            },
            turn_based=True,
            category="strategy",
        )
