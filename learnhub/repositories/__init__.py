"""Repository layer: typed data access over the async SQLAlchemy session."""

from learnhub.repositories.base import (
    MAX_QUERY_LIMIT,
    BaseRepository,
    parse_uuid,
    validate_pagination,
)
from learnhub.repositories.resilience import is_transient_error, translate_storage_errors

__all__ = [
    "BaseRepository",
    "MAX_QUERY_LIMIT",
    "is_transient_error",
    "parse_uuid",
    "translate_storage_errors",
    "validate_pagination",
]
