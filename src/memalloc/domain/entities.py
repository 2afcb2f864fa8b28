"""Domain entities for first-fit memory allocation.

Entities represent objects with identity and lifecycle in the domain.
Unlike value objects, entities are mutable and can change over time:
a MemoryBlock is split, shrunk, released and merged in place as the
ledger evolves.

All entities in this module have NO external dependencies - only Python
stdlib and typing imports.
"""

from dataclasses import dataclass

from memalloc.domain.errors import BlockValidationError


@dataclass(frozen=True)
class Free:
    """Block state: not owned by any process."""


@dataclass(frozen=True)
class Owned:
    """Block state: held by exactly one process."""

    owner: str


BlockState = Free | Owned

FREE = Free()


@dataclass
class MemoryBlock:
    """Maximal contiguous range of address space with uniform ownership.

    Attributes:
        start: Offset of the first unit covered by this block (>= 0).
        size: Length in capacity units, e.g. KB (>= 1).
        state: Free or Owned(owner).

    Example:
        >>> block = MemoryBlock(start=0, size=30, state=Owned("A"))
        >>> block.end
        29
        >>> block.is_free
        False
        >>> block.owner
        'A'
    """

    start: int
    size: int
    state: BlockState = FREE

    def __post_init__(self) -> None:
        """Validate block invariants after construction."""
        if self.start < 0:
            raise BlockValidationError(f"start must be >= 0, got {self.start}")
        if self.size < 1:
            raise BlockValidationError(f"size must be >= 1, got {self.size}")
        if isinstance(self.state, Owned) and not self.state.owner:
            raise BlockValidationError("owner cannot be empty")

    @property
    def end(self) -> int:
        """Last unit covered by this block (inclusive)."""
        return self.start + self.size - 1

    @property
    def is_free(self) -> bool:
        return isinstance(self.state, Free)

    @property
    def owner(self) -> str | None:
        """Owning process name, or None for a free block."""
        if isinstance(self.state, Owned):
            return self.state.owner
        return None

    def is_owned_by(self, owner: str) -> bool:
        return isinstance(self.state, Owned) and self.state.owner == owner
