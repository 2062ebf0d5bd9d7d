# app/schemas/player_schema.py

from pydantic import BaseModel, Field, field_validator
from typing import Optional


class AccountRef(BaseModel):
    """Reference to the account a player joins a game with"""
    identifier: str = Field(..., description="Account identifier (e.g., 'user:123' or 'guest:uuid')")
    username: Optional[str] = Field(None, description="Display name, defaults to the identifier")
    
    @field_validator('identifier')
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Identifier cannot be empty or only whitespace")
        return v
