# app/services/games/connect_four_engine.py

from typing import Dict, Any, Optional, List
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


class ConnectFourEngine(RulesEngineInterface):
    """
    Connect four game engine implementation.

    Rules:
    - 2 players only
    - 7 columns by 6 rows by default, row 1 is the bottom
    - Players alternate dropping a piece into a column; it lands on the lowest empty row
    - A full column cannot be played
    - Win by getting connect pieces in a row (horizontal, vertical, or diagonal)
    - Draw if the grid is full with no winner

    Custom rules supported:
    - rows: Number of rows (default: 6, supports 4-10)
    - columns: Number of columns (default: 7, supports 4-10)
    - connect: Pieces in a row needed to win (default: 4, supports 3-6)
    """

    def __init__(self, players: List[Player], rules: Optional[Dict[str, Any]] = None):
        super().__init__(players, rules)

        self.rows = int(self._rule("rows", settings.CONNECT_FOUR_ROWS))
        self.columns = int(self._rule("columns", settings.CONNECT_FOUR_COLUMNS))
        self.connect = int(self._rule("connect"))

        if self.connect > max(self.rows, self.columns):
            raise ValueError("Connect length cannot exceed both grid dimensions")

        # (column, row) -> piece
        self.grid: Dict[Square, Piece] = {}

        self.player_sides: Dict[str, Side] = {
            self.player_ids[0]: Side.WHITE,
            self.player_ids[1]: Side.BLACK,
        }
        self.last_move: Optional[Square] = None
        self._next_piece_id = 1

    def _in_bounds(self, column: int, row: int) -> bool:
        return 1 <= column <= self.columns and 1 <= row <= self.rows

    def _side_at(self, column: int, row: int) -> Optional[Side]:
        piece = self.grid.get((column, row))
        return piece.side if piece else None

    def _lowest_empty_row(self, column: int) -> Optional[int]:
        for row in range(1, self.rows + 1):
            if (column, row) not in self.grid:
                return row
        return None

    def legal_destinations(self, x: int, y: int) -> DestinationQuery:
        """Dropped pieces never move, so an occupied square has no destinations"""
        if not self._in_bounds(x, y):
            return DestinationQuery.reject(
                MoveError.OUT_OF_BOUNDS,
                f"Square ({x}, {y}) is outside the {self.columns}x{self.rows} grid"
            )
        if (x, y) not in self.grid:
            return DestinationQuery.reject(MoveError.NO_PIECE_AT_SQUARE, f"No piece at ({x}, {y})")
        return DestinationQuery(True, set())

    def legal_moves(self, player_id: str) -> List[Dict[str, Any]]:
        """Every column that is not full"""
        return [
            {"column": column}
            for column in range(1, self.columns + 1)
            if self._lowest_empty_row(column) is not None
        ]

    def _parse_move(self, move_data: Dict[str, Any]) -> int:
        if "column" not in move_data:
            raise ValueError("Move must contain 'column' field")
        try:
            return int(move_data["column"])
        except (ValueError, TypeError):
            raise ValueError("Column must be an integer")

    def validate_move(self, player_id: str, move_data: Dict[str, Any]) -> MoveValidationResult:
        """
        Validate a connect four move.

        Move data should contain:
        - column: int (1 to columns)
        """
        try:
            column = self._parse_move(move_data)
        except ValueError as e:
            return MoveValidationResult.reject(MoveError.INVALID_MOVE_DATA, str(e))

        if not 1 <= column <= self.columns:
            return MoveValidationResult.reject(
                MoveError.OUT_OF_BOUNDS,
                f"Column out of bounds (columns: 1-{self.columns})"
            )

        if self._lowest_empty_row(column) is None:
            return MoveValidationResult.reject(MoveError.ILLEGAL_MOVE, f"Column {column} is full")

        return MoveValidationResult(True)

    def apply_move(self, player_id: str, move_data: Dict[str, Any]) -> MoveApplication:
        """Drop the player's piece into the column"""
        column = self._parse_move(move_data)
        row = self._lowest_empty_row(column)

        piece = Piece(self._next_piece_id, self.player_sides[player_id], column, row)
        self._next_piece_id += 1

        self.grid[(column, row)] = piece
        self.get_player(player_id).add_to_hand(piece)
        self.last_move = (column, row)

        return MoveApplication()

    def check_game_result(self, mover_id: str) -> tuple[GameResult, Optional[str]]:
        """Check for win or draw conditions"""
        if self.last_move is not None:
            if longest_line_through(self._side_at, self.last_move) >= self.connect:
                return GameResult.PLAYER_WIN, mover_id

        # Check for draw (grid full)
        if len(self.grid) >= self.rows * self.columns:
            return GameResult.DRAW, None

        return GameResult.IN_PROGRESS, None

    def board_snapshot(self) -> BoardSnapshot:
        return BoardSnapshot(
            width=self.columns,
            height=self.rows,
            pieces=[self._piece_snapshot(piece) for piece in sorted(self.grid.values(), key=lambda p: p.id)],
        )

    @classmethod
    def get_game_name(cls) -> str:
        """Get the game name"""
        return "connect_four"

    @classmethod
    def get_game_info(cls) -> GameInfo:
        """Get static connect four game information"""
        return GameInfo(
            game_name=cls.get_game_name(),
            display_name="Connect Four",
            description="Drop pieces into the columns and connect four in a row to win!",
            min_players=2,
            max_players=2,
            supported_rules={
                "rows": GameRuleOption(
                    type="integer",
                    min=4,
                    max=10,
                    default=settings.CONNECT_FOUR_ROWS,
                    description="Number of rows in the grid"
                ),
                "columns": GameRuleOption(
                    type="integer",
                    min=4,
                    max=10,
                    default=settings.CONNECT_FOUR_COLUMNS,
                    description="Number of columns in the grid"
                ),
                "connect": GameRuleOption(
                    type="integer",
                    min=3,
                    max=6,
                    default=4,
                    description="Number of pieces in a row needed to win"
                ),
            },
            turn_based=True,
            category="strategy",
        )
