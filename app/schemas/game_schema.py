# app/schemas/game_schema.py

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List, Union


# Game Info DTOs
class GameRuleOption(BaseModel):
    """Schema for a configurable game rule option"""
    type: str = Field(..., description="Data type of the rule (e.g., 'integer', 'boolean', 'string')")
    min: Optional[Union[int, float]] = Field(None, description="Minimum value for numeric rules")
    max: Optional[Union[int, float]] = Field(None, description="Maximum value for numeric rules")
    allowed_values: Optional[List[Any]] = Field(None, description="Exhaustive list of accepted values")
    default: Any = Field(..., description="Default value for the rule")
    description: str = Field(..., description="Human-readable description of the rule")


class GameInfo(BaseModel):
    """Static information about a game type"""
    game_name: str = Field(..., description="Unique identifier for the game type")
    display_name: str = Field(..., description="Human-readable display name")
    description: str = Field(..., description="Description of the game")
    min_players: int = Field(..., description="Minimum number of players required")
    max_players: int = Field(..., description="Maximum number of players allowed")
    supported_rules: Dict[str, GameRuleOption] = Field(default_factory=dict, description="Configurable rules for the game")
    turn_based: bool = Field(..., description="Whether the game is turn-based")
    category: str = Field(..., description="Game category (e.g., 'strategy', 'puzzle')")


# Snapshot DTOs (plain-data view of a game in progress)
class PieceSnapshot(BaseModel):
    """A piece on the board"""
    id: int
    side: str
    x: int
    y: int
    promoted: bool = False


class BoardSnapshot(BaseModel):
    """Board dimensions and the pieces currently on it"""
    width: int
    height: int
    pieces: List[PieceSnapshot] = Field(default_factory=list)


class PlayerSnapshot(BaseModel):
    """A player's counters and owned pieces, by piece id"""
    account_ref: str
    username: str
    plays: int
    score: int
    hand: List[int] = Field(default_factory=list)
    spoils: List[int] = Field(default_factory=list)


class MoveRecord(BaseModel):
    """One committed move"""
    move_number: int
    player: str
    move_data: Dict[str, Any]
    captured: List[int] = Field(default_factory=list, description="Ids of pieces captured by this move")
    promoted: bool = False
    continuation: List[List[int]] = Field(default_factory=list, description="Squares the same piece must continue to")


class GameSnapshot(BaseModel):
    """Complete state of a game session as plain data"""
    game_name: str
    phase: str
    result: str
    turn_holder: Optional[str]
    winner: Optional[str]
    players: List[PlayerSnapshot]
    board: BoardSnapshot
    pending_continuation: List[List[int]] = Field(default_factory=list)
    engine_state: Dict[str, Any] = Field(default_factory=dict)
    history: List[MoveRecord] = Field(default_factory=list)
