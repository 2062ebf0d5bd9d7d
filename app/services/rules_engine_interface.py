# app/services/rules_engine_interface.py

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List, Set
from enum import Enum
from models.piece import Piece, Square
from models.player import Player
from schemas.game_schema import GameInfo, BoardSnapshot, PieceSnapshot
from config.settings import settings
import logging

logger = logging.getLogger(__name__)


class GameResult(Enum):
    """Possible game results"""
    IN_PROGRESS = "in_progress"
    PLAYER_WIN = "player_win"
    DRAW = "draw"
    FORFEIT = "forfeit"


class MoveError(Enum):
    """Reasons a query or move is rejected"""
    OUT_OF_BOUNDS = "out_of_bounds"
    NO_PIECE_AT_SQUARE = "no_piece_at_square"
    NOT_YOUR_PIECE = "not_your_piece"
    ILLEGAL_MOVE = "illegal_move"
    FORCED_CONTINUATION = "forced_continuation"
    NOT_YOUR_TURN = "not_your_turn"
    GAME_OVER = "game_over"
    INVALID_MOVE_DATA = "invalid_move_data"
    PLAYER_LEFT = "player_left"


class MoveValidationResult:
    """Result of move validation"""
    def __init__(self, valid: bool, error_message: Optional[str] = None, error_code: Optional[MoveError] = None):
        self.valid = valid
        self.error_message = error_message
        self.error_code = error_code

    @classmethod
    def reject(cls, error_code: MoveError, error_message: str) -> "MoveValidationResult":
        return cls(False, error_message, error_code)


class DestinationQuery(MoveValidationResult):
    """Result of a legal-destination query for one square"""
    def __init__(self, valid: bool, destinations: Optional[Set[Square]] = None,
                 error_message: Optional[str] = None, error_code: Optional[MoveError] = None):
        super().__init__(valid, error_message, error_code)
        self.destinations: Set[Square] = set(destinations or ())

    @classmethod
    def reject(cls, error_code: MoveError, error_message: str) -> "DestinationQuery":
        return cls(False, error_message=error_message, error_code=error_code)


class MoveApplication:
    """Side effects of a committed move"""
    def __init__(self, continuation: Optional[List[Square]] = None,
                 captured: Optional[List[Piece]] = None, promoted: bool = False):
        # Non-empty when the same piece must keep capturing before the turn passes
        self.continuation = list(continuation or [])
        self.captured = list(captured or [])
        self.promoted = promoted

    @property
    def turn_ends(self) -> bool:
        return not self.continuation


class RulesEngineInterface(ABC):
    """
    Abstract interface for turn-based rules engines.

    Each game implementation should:
    - Report legal destinations for a square and legal moves for a player
    - Validate moves according to game rules without mutating anything
    - Apply validated moves to the board and the players' hands/spoils
    - Determine win/draw conditions
    - Support custom rule configurations

    Turn order is not tracked here; the Game wrapping the engine owns it.
    """

    def __init__(self, players: List[Player], rules: Optional[Dict[str, Any]] = None):
        """
        Initialize the rules engine.

        Args:
            players: Players participating in the game, in turn order
            rules: Optional dictionary of custom rules for this game instance
        """
        self.players = list(players)
        self.player_ids = [player.account_ref for player in self.players]
        self.rules = rules or {}

        game_info = self.get_game_info()
        if not game_info.min_players <= len(self.players) <= game_info.max_players:
            if game_info.min_players == game_info.max_players:
                raise ValueError(f"{game_info.display_name} requires exactly {game_info.min_players} players")
            raise ValueError(
                f"{game_info.display_name} requires between {game_info.min_players} "
                f"and {game_info.max_players} players"
            )

        # Validate custom rules against game info
        self._validate_rules()

    def _validate_rules(self):
        """
        Validate custom rules against the game's supported rules.
        This uses the GameRuleOption definitions from get_game_info().
        Only validates rules that are explicitly provided by the user.
        """
        game_info = self.get_game_info()

        for rule_name, rule_value in self.rules.items():
            # Skip validation for rules not defined in game info
            if rule_name not in game_info.supported_rules:
                continue

            # Skip validation for None values - they'll use defaults
            if rule_value is None:
                continue

            rule_option = game_info.supported_rules[rule_name]

            # Type validation
            if rule_option.type == "integer":
                if not isinstance(rule_value, int) or isinstance(rule_value, bool):
                    raise ValueError(f"{rule_name} must be an integer, got {type(rule_value).__name__}")
            elif rule_option.type == "boolean":
                if not isinstance(rule_value, bool):
                    raise ValueError(f"{rule_name} must be a boolean, got {type(rule_value).__name__}")
            elif rule_option.type == "string":
                if not isinstance(rule_value, str):
                    raise ValueError(f"{rule_name} must be a string, got {type(rule_value).__name__}")

            # Range validation for numeric rules
            if rule_option.min is not None and rule_value < rule_option.min:
                raise ValueError(f"{rule_name} must be at least {rule_option.min}, got {rule_value}")
            if rule_option.max is not None and rule_value > rule_option.max:
                raise ValueError(f"{rule_name} must be at most {rule_option.max}, got {rule_value}")

            # Allowed values validation
            if rule_option.allowed_values is not None:
                if rule_value not in rule_option.allowed_values:
                    raise ValueError(f"{rule_name} value '{rule_value}' is not in allowed values: {rule_option.allowed_values}")

    def _rule(self, rule_name: str, fallback: Any = None) -> Any:
        """Get a rule value, falling back to the given default, then the declared one"""
        value = self.rules.get(rule_name)
        if value is not None:
            return value
        if fallback is not None:
            return fallback
        return self.get_game_info().supported_rules[rule_name].default

    @staticmethod
    def _convert_to_boolean(value: Any) -> bool:
        """Convert a value to boolean, handling string representations."""
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.lower() in ["true", "1", "yes"]
        return bool(value)

    def get_player(self, player_id: str) -> Player:
        """Get a participating player by account reference"""
        for player in self.players:
            if player.account_ref == player_id:
                return player
        raise KeyError(f"Unknown player: {player_id}")

    def opponent_of(self, player_id: str) -> Player:
        """Get the next player in turn order after the given one"""
        index = self.player_ids.index(player_id)
        return self.players[(index + 1) % len(self.players)]

    @abstractmethod
    def legal_destinations(self, x: int, y: int) -> DestinationQuery:
        """
        Get the squares the piece at (x, y) may legally move to.

        Args:
            x: Column, 1-indexed
            y: Row, 1-indexed

        Returns:
            DestinationQuery with the destination set, or an error code
            (OUT_OF_BOUNDS, NO_PIECE_AT_SQUARE)
        """
        pass

    @abstractmethod
    def legal_moves(self, player_id: str) -> List[Dict[str, Any]]:
        """
        Get every legal move for a player, as move data dictionaries.

        Args:
            player_id: Account reference of the player

        Returns:
            List of move data accepted by validate_move/apply_move
        """
        pass

    @abstractmethod
    def validate_move(self, player_id: str, move_data: Dict[str, Any]) -> MoveValidationResult:
        """
        Validate game-specific move rules without changing any state.

        Args:
            player_id: Account reference of the player making the move
            move_data: Data describing the move

        Returns:
            MoveValidationResult indicating if the move is valid
        """
        pass

    @abstractmethod
    def apply_move(self, player_id: str, move_data: Dict[str, Any]) -> MoveApplication:
        """
        Apply a validated move.

        Args:
            player_id: Account reference of the player making the move
            move_data: Data describing the move, already accepted by validate_move

        Returns:
            MoveApplication describing captures, promotion and forced continuation
        """
        pass

    @abstractmethod
    def check_game_result(self, mover_id: str) -> tuple[GameResult, Optional[str]]:
        """
        Check if the game has ended after the mover's turn resolved.

        Args:
            mover_id: Account reference of the player who just moved

        Returns:
            Tuple of (GameResult, winner account reference or None)
        """
        pass

    def is_terminal(self, mover_id: str) -> bool:
        """Whether the game is over after the mover's turn"""
        result, _ = self.check_game_result(mover_id)
        return result != GameResult.IN_PROGRESS

    @abstractmethod
    def board_snapshot(self) -> BoardSnapshot:
        """Plain-data view of the board"""
        pass

    def engine_state(self) -> Dict[str, Any]:
        """Game-specific state beyond the board, as plain data"""
        return {"rules": dict(self.rules)}

    @staticmethod
    def _piece_snapshot(piece: Piece) -> PieceSnapshot:
        return PieceSnapshot(
            id=piece.id,
            side=piece.side.value,
            x=piece.x,
            y=piece.y,
            promoted=piece.promoted,
        )

    @classmethod
    @abstractmethod
    def get_game_name(cls) -> str:
        """
        Get the unique name identifier for this game type.

        Returns:
            String name of the game
        """
        pass

    @classmethod
    @abstractmethod
    def get_game_info(cls) -> GameInfo:
        """
        Get static game information without requiring an instance.
        This should return game metadata like rules, player requirements,
        supported options, etc.

        Returns:
            GameInfo DTO with static game information
        """
        pass

    def calculate_score_adjustments(self, result: GameResult, winner_id: Optional[str]) -> Dict[str, int]:
        """
        Calculate score adjustments for all players once the game has ended.
        Can be overridden by subclasses for custom scoring.

        Args:
            result: The final game result
            winner_id: Account reference of the winner, if any

        Returns:
            Dictionary mapping account reference to score adjustment
        """
        adjustments = {}

        if result == GameResult.DRAW:
            for player_id in self.player_ids:
                adjustments[player_id] = settings.POINTS_FOR_DRAW
        elif winner_id:
            # Base case: winner gains, everyone else loses
            for player_id in self.player_ids:
                if player_id == winner_id:
                    adjustments[player_id] = settings.POINTS_FOR_WIN
                else:
                    adjustments[player_id] = settings.POINTS_FOR_LOSS

        return adjustments
