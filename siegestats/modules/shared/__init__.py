from siegestats.modules.shared.base_repository import BaseRepository
from siegestats.modules.shared.exceptions import (
    NotFoundError,
    PlayerNotFoundError,
    ProviderError,
    SiegeStatsDomainException,
    ValidationError,
)

__all__ = [
    "BaseRepository",
    "NotFoundError",
    "PlayerNotFoundError",
    "ProviderError",
    "SiegeStatsDomainException",
    "ValidationError",
]
