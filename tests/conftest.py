"""Pytest configuration and shared fixtures.

This module defines:
- Test markers (unit, property, integration)
- Shared fixtures for allocators, ledgers and request files
"""

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from memalloc.adapters.config.settings import reload_settings
from memalloc.domain.entities import MemoryBlock, Owned
from memalloc.domain.services import BlockLedger, FirstFitAllocator


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "unit: Fast unit tests with no file or terminal I/O",
    )
    config.addinivalue_line(
        "markers",
        "property: Hypothesis property-based tests",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests that read request files or drive the CLI",
    )


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep MEMALLOC_* variables from the host out of every test."""
    for name in list(os.environ):
        if name.startswith("MEMALLOC_"):
            monkeypatch.delenv(name)
    reload_settings()
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    monkeypatch.undo()
    reload_settings()


@pytest.fixture
def allocator() -> FirstFitAllocator:
    """Allocator over a 100 KB address space."""
    return FirstFitAllocator(total_memory=100)


@pytest.fixture
def fragmented_ledger() -> BlockLedger:
    """Free holes of 10, 5 and 20 units separated by owned blocks.

    Layout: [0-9] free, [10-14] X, [15-19] free, [20-24] Y, [25-44] free
    """
    return BlockLedger.from_blocks(
        [
            MemoryBlock(start=0, size=10),
            MemoryBlock(start=10, size=5, state=Owned("X")),
            MemoryBlock(start=15, size=5),
            MemoryBlock(start=20, size=5, state=Owned("Y")),
            MemoryBlock(start=25, size=20),
        ]
    )


@pytest.fixture
def write_request_file(tmp_path: Path):
    """Write request-file lines to a temp file and return its path."""

    def _write(*lines: str, name: str = "requests.txt") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
