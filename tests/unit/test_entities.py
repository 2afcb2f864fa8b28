"""Unit tests for domain entities (MemoryBlock, Free, Owned)."""

import pytest

from memalloc.domain.entities import FREE, Free, MemoryBlock, Owned
from memalloc.domain.errors import BlockValidationError

pytestmark = pytest.mark.unit


class TestBlockState:
    def test_free_states_are_equal(self) -> None:
        assert Free() == FREE

    def test_owned_compares_by_owner(self) -> None:
        assert Owned("A") == Owned("A")
        assert Owned("A") != Owned("B")
        assert Owned("A") != FREE


class TestMemoryBlock:
    def test_defaults_to_free(self) -> None:
        block = MemoryBlock(start=0, size=100)

        assert block.is_free
        assert block.owner is None
        assert block.state == FREE

    def test_end_is_inclusive(self) -> None:
        assert MemoryBlock(start=30, size=70).end == 99
        assert MemoryBlock(start=5, size=1).end == 5

    def test_owned_block(self) -> None:
        block = MemoryBlock(start=0, size=30, state=Owned("A"))

        assert not block.is_free
        assert block.owner == "A"
        assert block.is_owned_by("A")
        assert not block.is_owned_by("B")

    def test_free_block_is_owned_by_nobody(self) -> None:
        assert not MemoryBlock(start=0, size=10).is_owned_by("A")

    def test_rejects_negative_start(self) -> None:
        with pytest.raises(BlockValidationError, match="start must be >= 0"):
            MemoryBlock(start=-1, size=10)

    @pytest.mark.parametrize("size", [0, -5])
    def test_rejects_non_positive_size(self, size: int) -> None:
        with pytest.raises(BlockValidationError, match="size must be >= 1"):
            MemoryBlock(start=0, size=size)

    def test_rejects_empty_owner(self) -> None:
        with pytest.raises(BlockValidationError, match="owner cannot be empty"):
            MemoryBlock(start=0, size=10, state=Owned(""))
