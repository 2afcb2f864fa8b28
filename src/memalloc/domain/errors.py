"""Domain exception hierarchy.

All domain-level errors inherit from MemallocError.
This allows clean exception handling at adapter boundaries.

Recoverable per-request outcomes (insufficient memory, unknown process,
duplicate owner) are NOT exceptions: the allocator returns them as events.
"""


class MemallocError(Exception):
    """Base exception for all domain errors."""


class BlockValidationError(MemallocError):
    """MemoryBlock validation failed (negative start, non-positive size, empty owner)."""


class LedgerConfigurationError(MemallocError):
    """BlockLedger configuration error (non-positive total memory)."""


class LedgerInvariantError(MemallocError):
    """Ledger structure violated an invariant (gap, overlap, adjacent free blocks, duplicate owner)."""


class InvalidRequestError(MemallocError):
    """Request validation failed (empty owner, non-positive size, malformed line)."""


class ScenarioLoadError(MemallocError):
    """Scenario file could not be parsed or failed schema validation."""
