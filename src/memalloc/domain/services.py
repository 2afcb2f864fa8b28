"""Domain services for business logic that doesn't belong to entities.

BlockLedger owns the ordered block sequence and its structural edits
(split, free, coalesce). FirstFitAllocator is the allocation engine: it
applies the first-fit policy to a ledger, tallies allocation outcomes and
folds the ledger into statistics.

Both maintain state but have no identity - there is one ledger and one
allocator per simulation run.
"""

import threading
from collections.abc import Iterable, Iterator

from memalloc.domain.entities import FREE, MemoryBlock, Owned
from memalloc.domain.errors import (
    InvalidRequestError,
    LedgerConfigurationError,
    LedgerInvariantError,
)
from memalloc.domain.value_objects import (
    AllocateRequest,
    AllocationFailed,
    AllocationOutcome,
    AllocationSucceeded,
    BlockReport,
    FailureReason,
    MemoryStatistics,
    Outcome,
    ReleaseFailed,
    ReleaseOutcome,
    ReleaseRequest,
    ReleaseSucceeded,
    Request,
)


class BlockLedger:
    """Ordered, gapless sequence of blocks covering [0, total_memory).

    Blocks are kept in a plain list sorted by construction: a split inserts
    the leftover right after the matched block, a merge deletes the absorbed
    neighbour. Indices are only valid until the next structural edit.

    Invariants (checked by check_invariants()):
    - coverage: each block starts where the previous one ends
    - bounds: first block starts at 0, last block ends at total_memory - 1
    - no two consecutive free blocks
    - at most one block per owner
    - every block has size >= 1 (enforced by MemoryBlock itself)

    Example:
        >>> ledger = BlockLedger(total_memory=100)
        >>> ledger.split(0, size=30, owner="A")
        MemoryBlock(start=0, size=30, state=Owned(owner='A'))
        >>> [(b.start, b.size, b.owner) for b in ledger]
        [(0, 30, 'A'), (30, 70, None)]
    """

    def __init__(self, total_memory: int) -> None:
        """Initialize the ledger as a single free block.

        Raises:
            LedgerConfigurationError: If total_memory <= 0.
        """
        if total_memory <= 0:
            raise LedgerConfigurationError(f"total_memory must be > 0, got {total_memory}")

        self.total_memory = total_memory
        self._blocks: list[MemoryBlock] = [MemoryBlock(start=0, size=total_memory)]

    @classmethod
    def from_blocks(cls, blocks: Iterable[MemoryBlock]) -> "BlockLedger":
        """Build a ledger from an explicit block layout.

        Raises:
            LedgerConfigurationError: If no blocks are given.
            LedgerInvariantError: If the layout breaks a ledger invariant.
        """
        layout = list(blocks)
        if not layout:
            raise LedgerConfigurationError("a ledger needs at least one block")

        ledger = cls(total_memory=sum(block.size for block in layout))
        ledger._blocks = layout
        ledger.check_invariants()
        return ledger

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[MemoryBlock]:
        return iter(tuple(self._blocks))

    def __getitem__(self, index: int) -> MemoryBlock:
        return self._blocks[index]

    def find_first_fit(self, size: int) -> int | None:
        """Index of the lowest-addressed free block holding at least `size` units."""
        for index, block in enumerate(self._blocks):
            if block.is_free and block.size >= size:
                return index
        return None

    def find_owner(self, owner: str) -> int | None:
        """Index of the block held by `owner`, if any."""
        for index, block in enumerate(self._blocks):
            if block.is_owned_by(owner):
                return index
        return None

    def split(self, index: int, size: int, owner: str) -> MemoryBlock:
        """Hand the first `size` units of the free block at `index` to `owner`.

        The remainder (if any) becomes a new free block inserted right after.
        An exact fit leaves the block count unchanged.

        Raises:
            LedgerInvariantError: If the block is not free or is too small.
        """
        block = self._blocks[index]
        if not block.is_free:
            raise LedgerInvariantError(f"block at {block.start} is owned by {block.owner}")
        if block.size < size:
            raise LedgerInvariantError(
                f"block at {block.start} has {block.size} units, cannot hold {size}"
            )

        remaining = block.size - size
        block.state = Owned(owner)
        block.size = size

        if remaining > 0:
            leftover = MemoryBlock(start=block.start + size, size=remaining)
            self._blocks.insert(index + 1, leftover)

        return block

    def free(self, index: int) -> MemoryBlock:
        """Mark the block at `index` free and coalesce; returns the block as it was released."""
        block = self._blocks[index]
        released = MemoryBlock(start=block.start, size=block.size, state=block.state)
        block.state = FREE
        self.coalesce()
        return released

    def coalesce(self) -> int:
        """Merge every run of adjacent free blocks into one block.

        Returns:
            Number of blocks absorbed.
        """
        merged = 0
        index = 0
        while index < len(self._blocks) - 1:
            current = self._blocks[index]
            following = self._blocks[index + 1]
            if current.is_free and following.is_free:
                current.size += following.size
                del self._blocks[index + 1]
                merged += 1
            else:
                index += 1
        return merged

    def check_invariants(self) -> None:
        """Verify ledger structure.

        Raises:
            LedgerInvariantError: Naming the first violated property.
        """
        if not self._blocks:
            raise LedgerInvariantError("ledger is empty")

        first, last = self._blocks[0], self._blocks[-1]
        if first.start != 0:
            raise LedgerInvariantError(f"first block starts at {first.start}, expected 0")

        for previous, current in zip(self._blocks, self._blocks[1:]):
            if current.start != previous.start + previous.size:
                raise LedgerInvariantError(
                    f"block at {current.start} does not follow block at "
                    f"{previous.start} (size {previous.size})"
                )
            if previous.is_free and current.is_free:
                raise LedgerInvariantError(
                    f"adjacent free blocks at {previous.start} and {current.start}"
                )

        if last.end != self.total_memory - 1:
            raise LedgerInvariantError(
                f"last block ends at {last.end}, expected {self.total_memory - 1}"
            )

        owners: set[str] = set()
        for block in self._blocks:
            if block.size < 1:
                raise LedgerInvariantError(f"block at {block.start} has size {block.size}")
            owner = block.owner
            if owner is None:
                continue
            if owner in owners:
                raise LedgerInvariantError(f"owner {owner} holds more than one block")
            owners.add(owner)


class FirstFitAllocator:
    """Allocation engine over a BlockLedger.

    Allocation scans the ledger in ascending address order and takes the
    first free block large enough, splitting off any remainder. Release
    frees the owner's block and coalesces adjacent free blocks.

    Rejections are returned as outcome events, never raised. Only
    allocation attempts are counted.

    Thread safety:
    - THREAD-SAFE: All operations protected by internal lock.
    - An allocate or a release (including its coalescing) completes
      before the next operation starts.

    Example:
        >>> allocator = FirstFitAllocator(total_memory=100)
        >>> allocator.allocate("A", 30)
        AllocationSucceeded(owner='A', size=30, start=0)
        >>> allocator.allocate("B", 80)
        AllocationFailed(owner='B', size=80, reason=<FailureReason.INSUFFICIENT_MEMORY: ...>)
        >>> allocator.release("A")
        ReleaseSucceeded(owner='A', start=0, size=30)
        >>> allocator.statistics().free
        100
    """

    def __init__(self, total_memory: int) -> None:
        """Initialize the allocator with a single free block.

        Raises:
            LedgerConfigurationError: If total_memory <= 0.
        """
        self.ledger = BlockLedger(total_memory)
        self.successful_allocations = 0
        self.failed_allocations = 0
        self._lock = threading.Lock()

    @classmethod
    def from_ledger(cls, ledger: BlockLedger) -> "FirstFitAllocator":
        """Wrap an existing ledger (counters start at zero)."""
        allocator = cls(ledger.total_memory)
        allocator.ledger = ledger
        return allocator

    @property
    def total_memory(self) -> int:
        return self.ledger.total_memory

    def allocate(self, owner: str, size: int) -> AllocationOutcome:
        """Allocate `size` contiguous units to `owner` (first-fit).

        Args:
            owner: Process name; must not already hold a block.
            size: Requested units (>= 1).

        Returns:
            AllocationSucceeded with the block placement, or AllocationFailed
            with INSUFFICIENT_MEMORY / DUPLICATE_OWNER.

        Raises:
            InvalidRequestError: If owner is empty or size < 1.
        """
        if not owner:
            raise InvalidRequestError("owner cannot be empty")
        if size < 1:
            raise InvalidRequestError(f"size must be >= 1, got {size}")

        with self._lock:
            if self.ledger.find_owner(owner) is not None:
                self.failed_allocations += 1
                return AllocationFailed(owner, size, FailureReason.DUPLICATE_OWNER)

            index = self.ledger.find_first_fit(size)
            if index is None:
                self.failed_allocations += 1
                return AllocationFailed(owner, size, FailureReason.INSUFFICIENT_MEMORY)

            block = self.ledger.split(index, size, owner)
            self.successful_allocations += 1
            return AllocationSucceeded(owner=owner, size=block.size, start=block.start)

    def release(self, owner: str) -> ReleaseOutcome:
        """Free the block held by `owner` and merge adjacent free blocks.

        Raises:
            InvalidRequestError: If owner is empty.
        """
        if not owner:
            raise InvalidRequestError("owner cannot be empty")

        with self._lock:
            index = self.ledger.find_owner(owner)
            if index is None:
                return ReleaseFailed(owner, FailureReason.PROCESS_NOT_FOUND)

            released = self.ledger.free(index)
            return ReleaseSucceeded(owner=owner, start=released.start, size=released.size)

    def process(self, request: Request) -> Outcome:
        """Dispatch a single request to allocate() or release()."""
        if isinstance(request, AllocateRequest):
            return self.allocate(request.owner, request.size)
        if isinstance(request, ReleaseRequest):
            return self.release(request.owner)
        raise InvalidRequestError(f"unsupported request type: {type(request).__name__}")

    def check_invariants(self) -> None:
        with self._lock:
            self.ledger.check_invariants()

    def statistics(self) -> MemoryStatistics:
        """Fold the ledger into aggregate statistics."""
        with self._lock:
            allocated = free = largest_free = 0
            num_processes = num_free_blocks = 0
            for block in self.ledger:
                if block.is_free:
                    free += block.size
                    num_free_blocks += 1
                    largest_free = max(largest_free, block.size)
                else:
                    allocated += block.size
                    num_processes += 1

            return MemoryStatistics(
                total_memory=self.ledger.total_memory,
                allocated=allocated,
                free=free,
                num_processes=num_processes,
                num_free_blocks=num_free_blocks,
                largest_free=largest_free,
                successful_allocations=self.successful_allocations,
                failed_allocations=self.failed_allocations,
            )

    def memory_map(self) -> tuple[BlockReport, ...]:
        """Snapshot of the ledger as report rows, in address order."""
        with self._lock:
            return tuple(
                BlockReport(
                    index=index,
                    start=block.start,
                    end=block.end,
                    size=block.size,
                    owner=block.owner,
                )
                for index, block in enumerate(self.ledger, start=1)
            )
