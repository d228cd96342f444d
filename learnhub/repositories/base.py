"""Base repository abstract class.

Provides the generic lookups shared by the engine's repositories.
"""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import ColumnElement, select
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.exceptions import InvalidArgumentError

T = TypeVar("T")

# Maximum allowed limit for pagination
MAX_QUERY_LIMIT = 1000


def validate_pagination(limit: int, offset: int) -> tuple[int, int]:
    """Validate pagination parameters.

    Args:
        limit: Requested limit
        offset: Requested offset

    Returns:
        Validated (limit, offset) tuple, with limit capped at MAX_QUERY_LIMIT

    Raises:
        InvalidArgumentError: If parameters are negative
    """
    if limit < 0:
        raise InvalidArgumentError("Limit must be non-negative", field="limit")
    if offset < 0:
        raise InvalidArgumentError("Offset must be non-negative", field="offset")
    return min(limit, MAX_QUERY_LIMIT), offset


def parse_uuid(value: str | UUID) -> UUID | None:
    """Parse a string to UUID safely, returning None for malformed input."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(value)
    except (ValueError, AttributeError, TypeError):
        return None


class BaseRepository(ABC, Generic[T]):
    """Abstract base repository providing common read/write helpers.

    Type Parameters:
        T: The entity type this repository manages
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @property
    @abstractmethod
    def model_class(self) -> type[T]:
        """Return the SQLAlchemy model class for this repository."""

    async def get_by_id(self, entity_id: str | UUID, for_update: bool = False) -> T | None:
        """Get an entity by its ID, optionally taking a row lock.

        Args:
            entity_id: The unique identifier of the entity
            for_update: Lock the row until the transaction ends

        Returns:
            The entity if found, None otherwise
        """
        parsed_id = parse_uuid(entity_id)
        if parsed_id is None:
            return None

        query = select(self.model_class).where(self.model_class.id == parsed_id)
        if for_update:
            query = query.with_for_update()
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_with_filters(
        self,
        filters: list[ColumnElement[bool]],
        order_by: list[ColumnElement] | None = None,
        limit: int | None = 100,
        offset: int = 0,
    ) -> list[T]:
        """List entities matching every filter condition.

        ``limit=None`` returns every match.
        """
        if limit is not None:
            limit, offset = validate_pagination(limit, offset)
        elif offset < 0:
            raise InvalidArgumentError("Offset must be non-negative", field="offset")

        query = select(self.model_class)
        for f in filters:
            query = query.where(f)
        if order_by:
            query = query.order_by(*order_by)
        if limit is not None:
            query = query.limit(limit)
        query = query.offset(offset)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create(self, entity: T) -> T:
        """Add a new entity and flush so its ID and defaults are populated."""
        self.session.add(entity)
        await self.session.flush()
        return entity


__all__ = [
    "BaseRepository",
    "MAX_QUERY_LIMIT",
    "parse_uuid",
    "validate_pagination",
]
