# app/services/games/checkers_engine.py

from typing import Dict, Any, Optional, List, Set, Tuple
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
from schemas.game_schema import GameInfo, GameRuleOption, BoardSnapshot
from config.settings import settings
import logging

logger = logging.getLogger(__name__)

ALL_DIRECTIONS: List[Tuple[int, int]] = [(-1, -1), (1, -1), (-1, 1), (1, 1)]

# Row direction a regular piece advances in
FORWARD = {
    Side.WHITE: 1,
    Side.BLACK: -1,
}


class CheckersEngine(RulesEngineInterface):
    """
    Checkers game engine implementation.

    Rules:
    - 2 players only, the first plays white (rows 1-3), the second black
    - Pieces move one square diagonally towards the opponent's home row
    - A piece captures by jumping an adjacent opposing piece onto the empty square beyond
    - After a capture, the same piece must keep capturing while it can (multi-jump)
    - Pieces reaching the far row are promoted and move in all diagonal directions
    - A player wins when the opponent has no pieces left or none of them can move

    Custom rules supported:
    - board_size: Size of the board (even, 6-16, default 8)
    - forced_capture: Whether a side that can capture must capture (default: No)
    - backward_capture: Whether regular pieces can capture backward (default: No)
    - non_capture_draw_limit: Moves without capture before a draw, 0 disables (default: 0)
    """

    def __init__(self, players: List[Player], rules: Optional[Dict[str, Any]] = None):
        super().__init__(players, rules)

        # Parse and convert custom rules (validation already done by parent class)
        self.board_size = int(self._rule("board_size", settings.CHECKERS_BOARD_SIZE))
        self.forced_capture = self._convert_to_boolean(self._rule("forced_capture"))
        self.backward_capture = self._convert_to_boolean(self._rule("backward_capture"))
        self.non_capture_draw_limit = int(self._rule("non_capture_draw_limit"))

        self.board = Board.setup_checkers(self.board_size, settings.CHECKERS_PIECE_ROWS)

        # Assign sides to players
        # Player 1 = White (starts on row 1, moves up)
        # Player 2 = Black (starts on the last row, moves down)
        self.player_sides: Dict[str, Side] = {
            self.player_ids[0]: Side.WHITE,
            self.player_ids[1]: Side.BLACK,
        }
        for piece in self.board:
            self._player_for_side(piece.side).add_to_hand(piece)

        # Piece that must keep capturing before the turn passes
        self.pending_piece: Optional[Piece] = None
        self.pending_jumps: List[Square] = []
        self.consecutive_non_capture_moves = 0

    def _player_for_side(self, side: Side) -> Player:
        player_id = next(pid for pid, player_side in self.player_sides.items() if player_side == side)
        return self.get_player(player_id)

    def _far_row(self, side: Side) -> int:
        return self.board_size if side == Side.WHITE else 1

    def _move_directions(self, piece: Piece) -> List[Tuple[int, int]]:
        if piece.promoted:
            return ALL_DIRECTIONS
        return [(dx, dy) for dx, dy in ALL_DIRECTIONS if dy == FORWARD[piece.side]]

    def _capture_directions(self, piece: Piece) -> List[Tuple[int, int]]:
        if piece.promoted or self.backward_capture:
            return ALL_DIRECTIONS
        return self._move_directions(piece)

    def _scan(self, piece: Piece) -> Tuple[Set[Square], Set[Square]]:
        """
        Look one and two squares along each diagonal the piece may use.

        Returns:
            Tuple of (simple move destinations, capture destinations)
        """
        simple: Set[Square] = set()
        jumps: Set[Square] = set()

        for dx, dy in self._move_directions(piece):
            adjacent = (piece.x + dx, piece.y + dy)
            if self.board.in_bounds(*adjacent) and self.board.is_empty(*adjacent):
                simple.add(adjacent)

        for dx, dy in self._capture_directions(piece):
            neighbour = self.board.piece_at(piece.x + dx, piece.y + dy)
            if neighbour is None or neighbour.side == piece.side:
                continue
            landing = (piece.x + 2 * dx, piece.y + 2 * dy)
            if self.board.in_bounds(*landing) and self.board.is_empty(*landing):
                jumps.add(landing)

        return simple, jumps

    def _side_can_capture(self, side: Side) -> bool:
        return any(self._scan(piece)[1] for piece in self.board.pieces_of(side))

    def _unrestricted_destinations(self, piece: Piece) -> Set[Square]:
        """Destinations for a piece ignoring any capture chain in progress"""
        simple, jumps = self._scan(piece)
        if self.forced_capture and self._side_can_capture(piece.side):
            return jumps
        return simple | jumps

    def _destinations_for(self, piece: Piece) -> Set[Square]:
        if self.pending_piece is not None:
            # Only the chain piece may move, and only by jumping on
            if piece is self.pending_piece:
                return set(self.pending_jumps)
            return set()
        return self._unrestricted_destinations(piece)

    def legal_destinations(self, x: int, y: int) -> DestinationQuery:
        """Get the squares the piece at (x, y) may legally move to"""
        if not self.board.in_bounds(x, y):
            return DestinationQuery.reject(
                MoveError.OUT_OF_BOUNDS,
                f"Square ({x}, {y}) is outside the {self.board_size}x{self.board_size} board"
            )

        piece = self.board.piece_at(x, y)
        if piece is None:
            return DestinationQuery.reject(MoveError.NO_PIECE_AT_SQUARE, f"No piece at ({x}, {y})")

        return DestinationQuery(True, self._destinations_for(piece))

    def legal_moves(self, player_id: str) -> List[Dict[str, Any]]:
        """Get all legal moves for a player"""
        side = self.player_sides[player_id]
        moves = []

        for piece in sorted(self.board.pieces_of(side), key=lambda p: p.id):
            for to_x, to_y in sorted(self._destinations_for(piece)):
                moves.append({
                    "from_x": piece.x,
                    "from_y": piece.y,
                    "to_x": to_x,
                    "to_y": to_y,
                })

        return moves

    def _parse_move(self, move_data: Dict[str, Any]) -> Tuple[Square, Square]:
        required_fields = ["from_x", "from_y", "to_x", "to_y"]
        for field in required_fields:
            if field not in move_data:
                raise ValueError(f"Move must contain '{field}' field")
        try:
            origin = (int(move_data["from_x"]), int(move_data["from_y"]))
            destination = (int(move_data["to_x"]), int(move_data["to_y"]))
        except (ValueError, TypeError):
            raise ValueError("All coordinates must be integers")
        return origin, destination

    def validate_move(self, player_id: str, move_data: Dict[str, Any]) -> MoveValidationResult:
        """
        Validate a checkers move.

        Move data should contain:
        - from_x: int (starting column)
        - from_y: int (starting row)
        - to_x: int (destination column)
        - to_y: int (destination row)
        """
        try:
            origin, destination = self._parse_move(move_data)
        except ValueError as e:
            return MoveValidationResult.reject(MoveError.INVALID_MOVE_DATA, str(e))

        # Check if positions are within bounds
        if not self.board.in_bounds(*origin):
            return MoveValidationResult.reject(MoveError.OUT_OF_BOUNDS, "Starting position out of bounds")

        if not self.board.in_bounds(*destination):
            return MoveValidationResult.reject(MoveError.OUT_OF_BOUNDS, "Destination position out of bounds")

        piece = self.board.piece_at(*origin)
        if piece is None:
            return MoveValidationResult.reject(MoveError.NO_PIECE_AT_SQUARE, f"No piece at {origin}")

        if piece.side != self.player_sides.get(player_id):
            return MoveValidationResult.reject(MoveError.NOT_YOUR_PIECE, "No piece of yours at starting position")

        if self.pending_piece is not None and piece is not self.pending_piece:
            return MoveValidationResult.reject(
                MoveError.FORCED_CONTINUATION,
                f"The piece at {self.pending_piece.position} must continue capturing"
            )

        if destination not in self._destinations_for(piece):
            return MoveValidationResult.reject(
                MoveError.ILLEGAL_MOVE,
                f"{destination} is not a legal destination for the piece at {origin}"
            )

        return MoveValidationResult(True)

    def apply_move(self, player_id: str, move_data: Dict[str, Any]) -> MoveApplication:
        """Apply a validated checkers move"""
        origin, destination = self._parse_move(move_data)
        piece = self.board.piece_at(*origin)
        return self.move_piece(self.get_player(player_id), piece, destination)

    def move_piece(self, player: Player, piece: Piece, destination: Square) -> MoveApplication:
        """
        Move a piece to a destination taken from its legal destinations.

        A jump removes the piece in between from the board and hands it to
        the mover's spoils. If the moving piece can jump again from where it
        lands, the returned continuation lists those landings and the same
        piece must move next.

        Args:
            player: Player making the move
            piece: Piece being moved
            destination: Square to move to

        Returns:
            MoveApplication with captured pieces, promotion and continuation
        """
        to_x, to_y = destination
        dx = to_x - piece.x
        dy = to_y - piece.y
        captured: List[Piece] = []

        if abs(dx) > 1:
            victim = self.board.piece_at(piece.x + dx // 2, piece.y + dy // 2)
            player.capture_from(self._player_for_side(victim.side), victim)
            self.board.remove(victim)
            captured.append(victim)

        self.board.move(piece, to_x, to_y)

        promoted = False
        if piece.y == self._far_row(piece.side):
            promoted = piece.promote()

        continuation: List[Square] = []
        if captured:
            self.consecutive_non_capture_moves = 0
            _, jumps = self._scan(piece)
            continuation = sorted(jumps)
        else:
            self.consecutive_non_capture_moves += 1

        self.pending_piece = piece if continuation else None
        self.pending_jumps = continuation

        logger.debug(
            f"{player.account_ref} moved piece {piece.id} to {destination} "
            f"(captured: {[p.id for p in captured]}, promoted: {promoted}, continuation: {continuation})"
        )

        return MoveApplication(continuation, captured, promoted)

    def game_won(self, player_id: str) -> bool:
        """
        Check if a player has won.

        The player wins when the opponent holds no pieces, or when no piece
        of the opponent's on the board has a legal destination.
        """
        opponent = self.opponent_of(player_id)
        if not opponent.hand:
            return True

        opponent_side = self.player_sides[opponent.account_ref]
        return all(
            not self._unrestricted_destinations(piece)
            for piece in self.board.pieces_of(opponent_side)
        )

    def check_game_result(self, mover_id: str) -> tuple[GameResult, Optional[str]]:
        """
        Check if the game has ended after the mover's turn.

        Win conditions:
        - Opponent has no pieces left
        - Opponent has no legal moves

        Draw conditions:
        - non_capture_draw_limit moves in a row without a capture (when enabled)
        """
        # The turn has not resolved while a capture chain is pending
        if self.pending_piece is not None:
            return GameResult.IN_PROGRESS, None

        if self.game_won(mover_id):
            return GameResult.PLAYER_WIN, mover_id

        if self.non_capture_draw_limit and self.consecutive_non_capture_moves >= self.non_capture_draw_limit:
            return GameResult.DRAW, None

        # Game continues
        return GameResult.IN_PROGRESS, None

    def board_snapshot(self) -> BoardSnapshot:
        return BoardSnapshot(
            width=self.board_size,
            height=self.board_size,
            pieces=[self._piece_snapshot(piece) for piece in sorted(self.board, key=lambda p: p.id)],
        )

    def engine_state(self) -> Dict[str, Any]:
        state = super().engine_state()
        state.update({
            "player_sides": {player_id: side.value for player_id, side in self.player_sides.items()},
            "pending_piece": self.pending_piece.id if self.pending_piece else None,
            "consecutive_non_capture_moves": self.consecutive_non_capture_moves,
            "rendered": self.board.render(),
        })
        return state

    @classmethod
    def get_game_name(cls) -> str:
        """Get the game name"""
        return "checkers"

    @classmethod
    def get_game_info(cls) -> GameInfo:
        """Get static checkers game information"""
        return GameInfo(
            game_name=cls.get_game_name(),
            display_name="Checkers",
            description="Classic checkers game. Capture opponent's pieces by jumping diagonally. Reaching the opposite end promotes a piece. Leave your opponent without a move to win!",
            min_players=2,
            max_players=2,
            supported_rules={
                "board_size": GameRuleOption(
                    type="integer",
                    min=8,
                    max=16,
                    default=settings.CHECKERS_BOARD_SIZE,
                    description="Board size (NxN, even)"
                ),
                "forced_capture": GameRuleOption(
                    type="string",
                    allowed_values=["Yes", "No"],
                    default="No",
                    description="Whether captures are mandatory (must capture when possible)"
                ),
                "backward_capture": GameRuleOption(
                    type="string",
                    allowed_values=["Yes", "No"],
                    default="No",
                    description="Whether regular pieces can capture backward"
                ),
                "non_capture_draw_limit": GameRuleOption(
                    type="integer",
                    min=0,
                    max=200,
                    default=0,
                    description="Consecutive moves without a capture that end the game in a draw (0 disables)"
                ),
            },
            turn_based=True,
            category="strategy",
        )
