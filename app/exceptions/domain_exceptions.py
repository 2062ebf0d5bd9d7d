# app/exceptions/domain_exceptions.py

from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base class for errors raised by the game session layer"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data form for whatever surface reports the error"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class NotFoundException(DomainException):
    """Exception raised when a game session or participant is not found"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=404,
            details=details
        )


class BadRequestException(DomainException):
    """Exception raised for requests the session cannot act on"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=400,
            details=details
        )


class ConflictException(DomainException):
    """Exception raised when a lobby already has a game in progress"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=409,
            details=details
        )


class ValidationException(DomainException):
    """Exception raised when a game cannot be built from the given players or rules"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=422,
            details=details
        )


class GameNotFoundException(NotFoundException):
    """No game is bound to the lobby"""

    def __init__(self, lobby_code: str):
        super().__init__(
            message="Game not found",
            details={"lobby_code": lobby_code}
        )
        self.lobby_code = lobby_code


class UnknownGameException(BadRequestException):
    """The requested game type has no registered engine"""

    def __init__(self, game_name: str, available_games):
        super().__init__(
            message=f"Unknown game type: {game_name}",
            details={
                "available_games": list(available_games),
                "requested_game": game_name
            }
        )


class InvalidMoveException(BadRequestException):
    """
    A move or forfeit was rejected by the game.

    error_code carries the MoveError value reported by the game,
    e.g. 'not_your_turn' or 'forced_continuation'.
    """

    def __init__(self, message: str, error_code: Optional[str], details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        details["error_code"] = error_code
        super().__init__(message=message, details=details)
        self.error_code = error_code
