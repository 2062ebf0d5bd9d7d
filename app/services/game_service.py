# app/services/game_service.py

import threading
from typing import Dict, Any, Optional, List
from datetime import datetime, UTC
from models.player import Player
from schemas.player_schema import AccountRef
from services.game import Game
from services.rules_engine_interface import DestinationQuery
from services.games import GAME_ENGINES
from exceptions.domain_exceptions import (
    NotFoundException,
    GameNotFoundException,
    UnknownGameException,
    InvalidMoveException,
    ConflictException,
    ValidationException,
)
import logging

logger = logging.getLogger(__name__)


class GameSession:
    """A game bound to a lobby, with the lock serializing access to it"""

    def __init__(self, lobby_code: str, game: Game):
        self.lobby_code = lobby_code
        self.game = game
        self.lock = threading.Lock()
        self.created_at = datetime.now(UTC)


class GameService:
    """Service for managing in-memory game sessions keyed by lobby code"""

    # Registry of available game engines
    GAME_ENGINES = GAME_ENGINES

    def __init__(self):
        self._sessions: Dict[str, GameSession] = {}
        self._registry_lock = threading.Lock()

    @staticmethod
    def get_available_games() -> List[str]:
        """Get list of available game types"""
        return list(GameService.GAME_ENGINES.keys())

    def _get_session(self, lobby_code: str) -> GameSession:
        with self._registry_lock:
            session = self._sessions.get(lobby_code)
        if session is None:
            logger.warning(f"No game found for lobby {lobby_code}")
            raise GameNotFoundException(lobby_code)
        return session

    def create_game(
        self,
        lobby_code: str,
        game_name: str,
        accounts: List[AccountRef],
        rules: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Create a new game instance bound to a lobby.

        Args:
            lobby_code: The lobby code this game is bound to
            game_name: Name of the game type (e.g., 'checkers')
            accounts: Accounts of the participating players, in turn order
            rules: Optional custom rules for the game

        Returns:
            Dictionary with game initialization details

        Raises:
            ConflictException: If a game is already in progress for the lobby
            UnknownGameException: If the game name is unknown
            ValidationException: If the players or rules are rejected by the game
        """
        # Validate game name
        if game_name not in GameService.GAME_ENGINES:
            logger.warning(f"Rejected unknown game type '{game_name}' for lobby {lobby_code}")
            raise UnknownGameException(game_name, GameService.get_available_games())

        players = [Player.from_account(account) for account in accounts]
        try:
            game = Game(game_name, players, rules)
        except ValueError as e:
            logger.warning(f"Failed to create '{game_name}' for lobby {lobby_code}: {e}")
            raise ValidationException(
                message=f"Failed to create game: {str(e)}",
                details={"game_name": game_name, "identifiers": [p.account_ref for p in players]}
            )

        with self._registry_lock:
            existing = self._sessions.get(lobby_code)
            if existing is not None:
                # If game is still in progress, don't allow creating a new one
                if not existing.game.is_terminal:
                    logger.warning(f"Game already in progress for lobby {lobby_code}")
                    raise ConflictException(
                        message="A game is already in progress for this lobby",
                        details={"lobby_code": lobby_code}
                    )
                # If game is finished, replace it
                logger.info(f"Replacing finished game (result: {existing.game.result.value}) for lobby {lobby_code}")

            session = GameSession(lobby_code, game)
            self._sessions[lobby_code] = session

        logger.info(f"Game '{game_name}' created for lobby {lobby_code} with identifiers {[p.account_ref for p in players]}")

        return {
            "lobby_code": lobby_code,
            "game_name": game_name,
            "game_state": game.to_snapshot(),
            "game_info": GameService.GAME_ENGINES[game_name].get_game_info(),
            "current_turn_identifier": game.current_player_id,
            "created_at": session.created_at,
        }

    def get_game(self, lobby_code: str) -> Game:
        """
        Get the game bound to a lobby.

        Raises:
            GameNotFoundException: If game not found
        """
        return self._get_session(lobby_code).game

    def get_game_state(self, lobby_code: str) -> Dict[str, Any]:
        """Get the current snapshot of a lobby's game"""
        session = self._get_session(lobby_code)
        with session.lock:
            return {
                "lobby_code": lobby_code,
                "game_state": session.game.to_snapshot(),
                "created_at": session.created_at,
            }

    def legal_destinations(self, lobby_code: str, x: int, y: int) -> DestinationQuery:
        """Get the legal destinations of the piece at (x, y) in a lobby's game"""
        session = self._get_session(lobby_code)
        with session.lock:
            return session.game.legal_destinations(x, y)

    def make_move(
        self,
        lobby_code: str,
        identifier: str,
        move_data: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Process a player's move.

        Args:
            lobby_code: The lobby code
            identifier: Account reference of the player making the move
            move_data: Move data specific to the game

        Returns:
            Dictionary with updated game state and result

        Raises:
            GameNotFoundException: If game not found
            InvalidMoveException: If move is invalid
        """
        session = self._get_session(lobby_code)

        with session.lock:
            game = session.game
            outcome = game.apply_move(identifier, move_data)
            if not outcome.valid:
                logger.warning(f"Invalid move by {identifier} in lobby {lobby_code}: {outcome.error_message}")
                raise InvalidMoveException(
                    outcome.error_message or "Invalid move",
                    outcome.error_code.value if outcome.error_code else None,
                    details={"move_data": move_data}
                )
            snapshot = game.to_snapshot()

        logger.debug(f"Move processed for lobby {lobby_code} by identifier {identifier}. Result: {outcome.result.value}")

        return {
            "game_state": snapshot,
            "result": outcome.result.value,
            "winner_identifier": outcome.winner_id,
            "current_turn_identifier": outcome.turn_holder_id,
            "continuation": [list(square) for square in outcome.continuation],
            "captured": [piece.id for piece in outcome.captured],
            "promoted": outcome.promoted,
        }

    def forfeit_game(self, lobby_code: str, identifier: str) -> Dict[str, Any]:
        """
        Handle a player forfeiting the game.

        Args:
            lobby_code: The lobby code
            identifier: Account reference of the player forfeiting

        Returns:
            Dictionary with updated game state

        Raises:
            NotFoundException: If game or player not found
            InvalidMoveException: If the game has already ended
        """
        session = self._get_session(lobby_code)

        with session.lock:
            game = session.game
            try:
                outcome = game.quit_game(identifier)
            except KeyError:
                logger.warning(f"Forfeit by unknown player {identifier} in lobby {lobby_code}")
                raise NotFoundException(
                    message="Player not found in game",
                    details={"lobby_code": lobby_code, "identifier": identifier}
                )
            if not outcome.valid:
                logger.warning(f"Rejected forfeit by {identifier} in lobby {lobby_code}: {outcome.error_message}")
                raise InvalidMoveException(outcome.error_message, outcome.error_code.value)
            snapshot = game.to_snapshot()

        logger.info(f"Player {identifier} forfeited game in lobby {lobby_code}")

        return {
            "game_state": snapshot,
            "result": outcome.result.value,
            "winner_identifier": outcome.winner_id,
            "forfeited_by": identifier,
        }

    def delete_game(self, lobby_code: str) -> bool:
        """
        Delete a game bound to a lobby.

        Returns:
            True if a game was deleted, False if none existed
        """
        with self._registry_lock:
            session = self._sessions.pop(lobby_code, None)
        if session is None:
            return False
        logger.info(f"Deleted game for lobby {lobby_code}")
        return True
