"""A single named resource that one owner at a time may hold."""

from __future__ import annotations

MAX_RES_NAME_LEN = 32


class ResourceError(Exception):
    """Base class for resource allocation failures."""


class ResourceNotFound(ResourceError):
    """No resource goes by the requested name."""


class InvalidOwner(ResourceError):
    """The owner id is negative."""


class ResourceOccupied(ResourceError):
    """The resource is held, or held by someone else."""


class ResourceAllocator:
    """Grants and releases one named resource."""

    def __init__(self, name: str = "resource") -> None:
        if len(name) >= MAX_RES_NAME_LEN:
            raise ValueError(f"resource name longer than {MAX_RES_NAME_LEN - 1} characters")
        self.name = name
        self.owner_id = -1
        self.is_allocated = False

    def _check(self, name: str, owner_id: int) -> None:
        if owner_id < 0:
            raise InvalidOwner(f"invalid owner id {owner_id}")
        if name != self.name:
            raise ResourceNotFound(name)

    def alloc(self, name: str, owner_id: int) -> None:
        """Give the resource to ``owner_id``."""
        self._check(name, owner_id)
        if self.is_allocated:
            raise ResourceOccupied(f"{name} is held by {self.owner_id}")
        self.owner_id = owner_id
        self.is_allocated = True

    def free(self, name: str, owner_id: int) -> None:
        """Release the resource; only its owner may do so."""
        self._check(name, owner_id)
        if self.owner_id != owner_id:
            raise ResourceOccupied(f"{name} is not held by {owner_id}")
        self.owner_id = -1
        self.is_allocated = False