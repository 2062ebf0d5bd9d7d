# app/exceptions/__init__.py

from exceptions.domain_exceptions import (
    DomainException,
    NotFoundException,
    BadRequestException,
    ConflictException,
    ValidationException,
    GameNotFoundException,
    UnknownGameException,
    InvalidMoveException,
)

__all__ = [
    'DomainException',
    'NotFoundException',
    'BadRequestException',
    'ConflictException',
    'ValidationException',
    'GameNotFoundException',
    'UnknownGameException',
    'InvalidMoveException',
]
