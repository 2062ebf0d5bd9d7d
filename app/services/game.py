# app/services/game.py

from enum import Enum
from typing import Dict, Any, Optional, List, Type, Union
from models.piece import Piece, Square
from models.player import Player
from services.rules_engine_interface import (
    RulesEngineInterface,
    MoveValidationResult,
    DestinationQuery,
    MoveError,
    GameResult,
)
from services.games import GAME_ENGINES
from schemas.game_schema import GameSnapshot, PlayerSnapshot, MoveRecord
from config.settings import settings
import logging

logger = logging.getLogger(__name__)


class GamePhase(Enum):
    """Lifecycle states of a game session"""
    AWAITING_FIRST_MOVE = "awaiting_first_move"
    IN_PROGRESS = "in_progress"
    WON = "won"
    DRAWN = "drawn"
    FORFEITED = "forfeited"


TERMINAL_PHASES = {GamePhase.WON, GamePhase.DRAWN, GamePhase.FORFEITED}


class MoveOutcome(MoveValidationResult):
    """Result of submitting a move to a game"""
    def __init__(
        self,
        valid: bool,
        error_message: Optional[str] = None,
        error_code: Optional[MoveError] = None,
        continuation: Optional[List[Square]] = None,
        captured: Optional[List[Piece]] = None,
        promoted: bool = False,
        result: GameResult = GameResult.IN_PROGRESS,
        winner_id: Optional[str] = None,
        turn_holder_id: Optional[str] = None,
    ):
        super().__init__(valid, error_message, error_code)
        self.continuation = list(continuation or [])
        self.captured = list(captured or [])
        self.promoted = promoted
        self.result = result
        self.winner_id = winner_id
        self.turn_holder_id = turn_holder_id

    @property
    def turn_continues(self) -> bool:
        """The same player must move the same piece again"""
        return bool(self.continuation)


class Game:
    """
    Turn, player and winner state machine wrapped around one rules engine.

    The engine is picked once, from the game name, when the game is created.
    The turn passes strictly in player order after every move, except when
    the engine reports a forced continuation; then the mover keeps the turn.
    Once a win, draw or forfeit is reached the winner is fixed and scores
    are awarded.
    """

    def __init__(
        self,
        game_name: Union[str, Type[RulesEngineInterface]],
        players: List[Player],
        rules: Optional[Dict[str, Any]] = None,
    ):
        if isinstance(game_name, str):
            if game_name not in GAME_ENGINES:
                raise ValueError(f"Unknown game type: {game_name}")
            engine_class = GAME_ENGINES[game_name]
        else:
            engine_class = game_name

        if len(players) < 2:
            raise ValueError("A game requires at least two players")

        account_refs = [player.account_ref for player in players]
        if len(set(account_refs)) != len(account_refs):
            raise ValueError(f"Players must be distinct, got {account_refs}")

        self.players: List[Player] = list(players)
        self.engine: RulesEngineInterface = engine_class(self.players, rules)
        self.kind = engine_class.get_game_name()

        self._turn_order: List[Player] = list(self.players)
        self.turn_holder: Optional[Player] = self._turn_order[0]
        self.winner: Optional[Player] = None
        self.result = GameResult.IN_PROGRESS
        self.phase = GamePhase.AWAITING_FIRST_MOVE
        self.history: List[MoveRecord] = []
        self.move_count = 0
        self.pending_continuation: List[Square] = []
        self.score_adjustments: Optional[Dict[str, int]] = None

    @property
    def is_terminal(self) -> bool:
        return self.phase in TERMINAL_PHASES

    @property
    def current_player_id(self) -> Optional[str]:
        """Get the account reference of the player whose turn it is"""
        return self.turn_holder.account_ref if self.turn_holder else None

    def get_player(self, player_id: str) -> Player:
        for player in self.players:
            if player.account_ref == player_id:
                return player
        raise KeyError(f"Unknown player: {player_id}")

    def legal_destinations(self, x: int, y: int) -> DestinationQuery:
        """
        Get the squares the piece at (x, y) may legally move to.

        Square errors are reported even after the game has ended; a finished
        game only empties the destination set.
        """
        query = self.engine.legal_destinations(x, y)
        if self.is_terminal and query.valid:
            return DestinationQuery(True, set())
        return query

    def legal_moves(self) -> List[Dict[str, Any]]:
        """Get every legal move for the turn holder"""
        if self.is_terminal:
            return []
        return self.engine.legal_moves(self.current_player_id)

    def validate_move(self, player_id: str, move_data: Dict[str, Any]) -> MoveValidationResult:
        """
        Validate if a move is legal according to turn order and game rules.

        Args:
            player_id: Account reference of the player making the move
            move_data: Data describing the move

        Returns:
            MoveValidationResult indicating if the move is valid
        """
        # Check if game is still in progress
        if self.is_terminal:
            return MoveValidationResult.reject(MoveError.GAME_OVER, "Game has already ended")

        # Check if it's the player's turn
        if player_id != self.current_player_id:
            return MoveValidationResult.reject(MoveError.NOT_YOUR_TURN, "It's not your turn")

        # Delegate to game-specific validation
        return self.engine.validate_move(player_id, move_data)

    def apply_move(self, player_id: str, move_data: Dict[str, Any]) -> MoveOutcome:
        """
        Validate and commit a move, then resolve the turn.

        A rejected move changes nothing and carries the reason in the outcome.

        Args:
            player_id: Account reference of the player making the move
            move_data: Data describing the move

        Returns:
            MoveOutcome with continuation, captures, result and next turn holder
        """
        validation = self.validate_move(player_id, move_data)
        if not validation.valid:
            logger.debug(f"Rejected move by {player_id} in {self.kind}: {validation.error_message}")
            return MoveOutcome(
                False,
                validation.error_message,
                validation.error_code,
                continuation=self.pending_continuation,
                turn_holder_id=self.current_player_id,
            )

        application = self.engine.apply_move(player_id, move_data)
        mover = self.get_player(player_id)
        mover.add_play()

        self.phase = GamePhase.IN_PROGRESS
        self.move_count += 1
        self.pending_continuation = application.continuation
        self._record_move(player_id, move_data, application)

        if not application.turn_ends:
            # Forced continuation: the mover keeps the turn
            return MoveOutcome(
                True,
                continuation=application.continuation,
                captured=application.captured,
                promoted=application.promoted,
                turn_holder_id=self.current_player_id,
            )

        result, winner_id = self.engine.check_game_result(player_id)
        if result == GameResult.IN_PROGRESS:
            self._advance_turn()
        else:
            self._finish(result, winner_id)

        return MoveOutcome(
            True,
            captured=application.captured,
            promoted=application.promoted,
            result=result,
            winner_id=winner_id,
            turn_holder_id=self.current_player_id,
        )

    def _record_move(self, player_id: str, move_data: Dict[str, Any], application) -> None:
        self.history.append(MoveRecord(
            move_number=self.move_count,
            player=player_id,
            move_data=dict(move_data),
            captured=[piece.id for piece in application.captured],
            promoted=application.promoted,
            continuation=[list(square) for square in application.continuation],
        ))
        if settings.MOVE_HISTORY_LIMIT and len(self.history) > settings.MOVE_HISTORY_LIMIT:
            del self.history[:len(self.history) - settings.MOVE_HISTORY_LIMIT]

    def _advance_turn(self) -> None:
        """Advance to the next player's turn"""
        index = self._turn_order.index(self.turn_holder)
        self.turn_holder = self._turn_order[(index + 1) % len(self._turn_order)]

    def _finish(self, result: GameResult, winner_id: Optional[str]) -> None:
        self.result = result
        self.winner = self.get_player(winner_id) if winner_id else None
        self.turn_holder = None
        self.pending_continuation = []

        if result == GameResult.DRAW:
            self.phase = GamePhase.DRAWN
        elif result == GameResult.FORFEIT:
            self.phase = GamePhase.FORFEITED
        else:
            self.phase = GamePhase.WON

        logger.info(f"Game of {self.kind} ended after {self.move_count} moves. Result: {result.value}, winner: {winner_id}")
        self.end_game()

    def game_won(self, player_id: str) -> bool:
        """Check whether a player has won the game"""
        if self.is_terminal:
            return self.winner is not None and self.winner.account_ref == player_id
        if self.pending_continuation:
            return False
        result, winner_id = self.engine.check_game_result(player_id)
        return result == GameResult.PLAYER_WIN and winner_id == player_id

    def is_draw(self) -> bool:
        return self.phase == GamePhase.DRAWN

    def quit_game(self, player_id: str) -> MoveOutcome:
        """
        Remove a player from the turn rotation.

        When only one player is left, they win by forfeit.

        Args:
            player_id: Account reference of the quitting player

        Returns:
            MoveOutcome with the resulting game result
        """
        if self.is_terminal:
            return MoveOutcome(False, "Game has already ended", MoveError.GAME_OVER)

        quitter = self.get_player(player_id)
        if quitter not in self._turn_order:
            return MoveOutcome(False, "Player has already left the game", MoveError.PLAYER_LEFT)

        if self.turn_holder is quitter:
            self._advance_turn()
            self.pending_continuation = []
        self._turn_order.remove(quitter)
        logger.info(f"Player {player_id} quit the game of {self.kind}")

        if len(self._turn_order) == 1:
            winner_id = self._turn_order[0].account_ref
            self._finish(GameResult.FORFEIT, winner_id)
            return MoveOutcome(True, result=GameResult.FORFEIT, winner_id=winner_id)

        return MoveOutcome(True, turn_holder_id=self.current_player_id)

    def end_game(self) -> Dict[str, int]:
        """
        Award points to players based on the final result.

        Points are awarded once; later calls return the same adjustments.
        """
        if not self.is_terminal:
            raise RuntimeError("Cannot end a game that is still in progress")
        if self.score_adjustments is not None:
            return self.score_adjustments

        winner_id = self.winner.account_ref if self.winner else None
        scoring_result = GameResult.PLAYER_WIN if self.result == GameResult.FORFEIT else self.result
        adjustments = self.engine.calculate_score_adjustments(scoring_result, winner_id)
        for player_id, points in adjustments.items():
            self.get_player(player_id).add_points(points)

        self.score_adjustments = adjustments
        return adjustments

    def to_snapshot(self) -> GameSnapshot:
        """Complete game state as plain data"""
        return GameSnapshot(
            game_name=self.kind,
            phase=self.phase.value,
            result=self.result.value,
            turn_holder=self.current_player_id,
            winner=self.winner.account_ref if self.winner else None,
            players=[
                PlayerSnapshot(
                    account_ref=player.account_ref,
                    username=player.username,
                    plays=player.plays,
                    score=player.score,
                    hand=sorted(piece.id for piece in player.hand),
                    spoils=[piece.id for piece in player.spoils],
                )
                for player in self.players
            ],
            board=self.engine.board_snapshot(),
            pending_continuation=[list(square) for square in self.pending_continuation],
            engine_state=self.engine.engine_state(),
            history=list(self.history),
        )
