"""
Pytest configuration and fixtures for testing
"""
import pytest
from models.player import Player
from schemas.player_schema import AccountRef
from services.games.checkers_engine import CheckersEngine
from services.games.tictactoe_engine import TicTacToeEngine
from services.games.connect_four_engine import ConnectFourEngine
from services.game_service import GameService


@pytest.fixture
def white_player() -> Player:
    """First player, plays white in checkers"""
    return Player("user:1", "TestUser1")


@pytest.fixture
def black_player() -> Player:
    """Second player, plays black in checkers"""
    return Player("user:2", "TestUser2")


@pytest.fixture
def players(white_player, black_player):
    return [white_player, black_player]


@pytest.fixture
def checkers_engine(players) -> CheckersEngine:
    """Checkers engine with the default 8x8 layout"""
    return CheckersEngine(players)


@pytest.fixture
def tictactoe_engine(players) -> TicTacToeEngine:
    return TicTacToeEngine(players)


@pytest.fixture
def connect_four_engine(players) -> ConnectFourEngine:
    return ConnectFourEngine(players)


@pytest.fixture
def accounts():
    return [
        AccountRef(identifier="user:1", username="TestUser1"),
        AccountRef(identifier="guest:abc", username="Guest"),
    ]


@pytest.fixture
def game_service() -> GameService:
    """Fresh in-memory game service"""
    return GameService()
