# app/config/settings.py

from pydantic_settings import BaseSettings
from pydantic import ConfigDict


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        case_sensitive=True
    )
    
    # Application Configuration
    APP_NAME: str = "L2P Rules Engine"
    DEBUG: bool = False
    
    # Checkers Configuration
    CHECKERS_BOARD_SIZE: int = 8
    CHECKERS_PIECE_ROWS: int = 3  # Rows of pieces each side starts with
    
    # Grid Games Configuration
    TICTACTOE_BOARD_SIZE: int = 3
    CONNECT_FOUR_ROWS: int = 6
    CONNECT_FOUR_COLUMNS: int = 7
    
    # Scoring Configuration (applied once when a game ends)
    POINTS_FOR_WIN: int = 1
    POINTS_FOR_LOSS: int = -1
    POINTS_FOR_DRAW: int = 0
    
    # Move history kept per game, 0 keeps everything
    MOVE_HISTORY_LIMIT: int = 0


settings = Settings()
