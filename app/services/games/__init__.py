# app/services/games/__init__.py

import inspect
from typing import Dict, Type
from services.rules_engine_interface import RulesEngineInterface

# Import all game engines here (they will be auto-discovered)
from services.games.checkers_engine import CheckersEngine
from services.games.tictactoe_engine import TicTacToeEngine
from services.games.connect_four_engine import ConnectFourEngine

# Automatically discover all RulesEngineInterface subclasses in this module
def _discover_game_engines() -> Dict[str, Type[RulesEngineInterface]]:
    """Auto-discover all game engine classes in this module"""
    engines = {}
    
    # Get all classes in the current module
    current_module = inspect.getmodule(inspect.currentframe())
    
    for name, obj in inspect.getmembers(current_module, inspect.isclass):
        # Check if it's a subclass of RulesEngineInterface (but not the interface itself)
        if (issubclass(obj, RulesEngineInterface) and 
            obj is not RulesEngineInterface and
            not inspect.isabstract(obj)):
            try:
                game_name = obj.get_game_name()
                engines[game_name] = obj
            except Exception:
                # Skip classes that can't provide a game name
                pass
    
    return engines

# Build the registry automatically
GAME_ENGINES: Dict[str, Type[RulesEngineInterface]] = _discover_game_engines()

__all__ = ["CheckersEngine", "TicTacToeEngine", "ConnectFourEngine", "GAME_ENGINES"]
