"""Domain layer for first-fit contiguous memory allocation.

This package contains pure business logic with zero external dependencies.
All domain code uses only Python stdlib (typing, dataclasses, enum, threading)
and internal memalloc.domain imports.

Modules:
    entities: Domain entities (MemoryBlock, Free, Owned)
    value_objects: Immutable value objects (requests, outcome events, MemoryStatistics)
    services: Domain services (BlockLedger, FirstFitAllocator)
    errors: Domain exception hierarchy
"""
