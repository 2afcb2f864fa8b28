# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Domain value objects (immutable data structures).

Value objects are immutable data structures that represent concepts
from the domain model. They have no identity - two instances with
the same values are considered equal.
"""

from dataclasses import dataclass
from enum import Enum

from memalloc.domain.errors import InvalidRequestError

# Requests


@dataclass(frozen=True)
class AllocateRequest:
    """Ask for `size` contiguous units on behalf of `owner`."""

    owner: str
    size: int

    def __post_init__(self) -> None:
        if not self.owner:
            raise InvalidRequestError("owner cannot be empty")
        if self.size < 1:
            raise InvalidRequestError(f"size must be >= 1, got {self.size}")


@dataclass(frozen=True)
class ReleaseRequest:
    """Return the block held by `owner` to the free pool."""

    owner: str

    def __post_init__(self) -> None:
        if not self.owner:
            raise InvalidRequestError("owner cannot be empty")


Request = AllocateRequest | ReleaseRequest


@dataclass(frozen=True)
class RequestScript:
    """Address-space size plus the ordered request stream to replay against it."""

    total_memory: int
    requests: tuple[Request, ...]


# Outcome events


class FailureReason(str, Enum):
    """Why a request was rejected. Rejections never mutate the ledger."""

    INSUFFICIENT_MEMORY = "insufficient_memory"
    PROCESS_NOT_FOUND = "process_not_found"
    DUPLICATE_OWNER = "duplicate_owner"


@dataclass(frozen=True)
class AllocationSucceeded:
    owner: str
    size: int
    start: int

    @property
    def end(self) -> int:
        return self.start + self.size - 1


@dataclass(frozen=True)
class AllocationFailed:
    owner: str
    size: int
    reason: FailureReason


@dataclass(frozen=True)
class ReleaseSucceeded:
    """Release outcome; start/size describe the block before coalescing."""

    owner: str
    start: int
    size: int


@dataclass(frozen=True)
class ReleaseFailed:
    owner: str
    reason: FailureReason = FailureReason.PROCESS_NOT_FOUND


AllocationOutcome = AllocationSucceeded | AllocationFailed
ReleaseOutcome = ReleaseSucceeded | ReleaseFailed
Outcome = AllocationOutcome | ReleaseOutcome


# Reporting


@dataclass(frozen=True)
class BlockReport:
    """One row of the final memory map (index is 1-based)."""

    index: int
    start: int
    end: int
    size: int
    owner: str | None = None

    @property
    def is_free(self) -> bool:
        return self.owner is None


@dataclass(frozen=True)
class MemoryStatistics:
    """Aggregate view of a ledger, folded over its blocks.

    Invariant: allocated + free == total_memory.

    Example:
        >>> stats = MemoryStatistics(
        ...     total_memory=100, allocated=40, free=60,
        ...     num_processes=1, num_free_blocks=2, largest_free=30,
        ... )
        >>> stats.external_fragmentation_pct
        50.0
    """

    total_memory: int
    allocated: int
    free: int
    num_processes: int
    num_free_blocks: int
    largest_free: int
    successful_allocations: int = 0
    failed_allocations: int = 0

    @property
    def allocated_pct(self) -> float:
        return self.allocated * 100.0 / self.total_memory

    @property
    def free_pct(self) -> float:
        return self.free * 100.0 / self.total_memory

    @property
    def external_fragmentation_pct(self) -> float:
        """Share of free memory outside the largest free block (0 when nothing is free)."""
        if self.free == 0:
            return 0.0
        return (self.free - self.largest_free) * 100.0 / self.free


@dataclass(frozen=True)
class SimulationReport:
    """Everything an external reporter needs once the request stream ends."""

    total_memory: int
    events: tuple[Outcome, ...]
    memory_map: tuple[BlockReport, ...]
    statistics: MemoryStatistics
