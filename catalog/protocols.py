"""
Protocol classes for structural subtyping (duck typing with type safety).

Protocols define interfaces without requiring explicit inheritance. Any class
that implements the required methods is considered compatible, which lets
commands accept real repositories and test doubles alike.

Example:
    ```python
    from catalog.protocols import Repository
    from catalog.models.author import Author


    async def total(repo: Repository[Author]) -> int:
        return await repo.count()
    ```
"""

from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")


@runtime_checkable
class Repository(Protocol[T]):
    """
    Protocol for the entity store adapter.

    Defines the collection interface every entity kind supports: filtered
    find, find by id, insert, update by id and count.

    Type Parameters:
        T: The entity type this repository manages.
    """

    async def get_by_id(self, id: int) -> T | None:
        """Get entity by primary key ID, None when absent."""
        ...

    async def get_all(self, **filters: Any) -> list[T]:
        """Get all entities matching the provided equality filters."""
        ...

    async def create(self, entity: T) -> T:
        """Insert a new entity and return it with its identity assigned."""
        ...

    async def update_by_id(self, id: int, **values: Any) -> T | None:
        """Update fields of the entity with ``id``; None when absent."""
        ...

    async def count(self, **filters: Any) -> int:
        """Count entities matching the provided equality filters."""
        ...
