"""Claim mappers."""

from .base import ClaimMapper, ClaimMappers, MapperError
from .builtin import BUILTIN_MAPPERS, default_mappers

__all__ = [
    "BUILTIN_MAPPERS",
    "ClaimMapper",
    "ClaimMappers",
    "MapperError",
    "default_mappers",
]
