# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Pydantic validation models for scenario YAML files.

Validates YAML input and converts to frozen domain dataclasses.
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from memalloc.domain.value_objects import (
    AllocateRequest,
    ReleaseRequest,
    Request,
    RequestScript,
)


class RequestModel(BaseModel):
    """Validated request entry: either `allocate` + `size`, or `release`."""

    model_config = ConfigDict(extra="forbid")

    allocate: str | None = Field(default=None, min_length=1)
    release: str | None = Field(default=None, min_length=1)
    size: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def validate_shape(self) -> Self:
        if (self.allocate is None) == (self.release is None):
            raise ValueError("request must set exactly one of 'allocate' or 'release'")
        if self.allocate is not None and self.size is None:
            raise ValueError(f"allocate request for '{self.allocate}' requires 'size'")
        if self.release is not None and self.size is not None:
            raise ValueError(f"release request for '{self.release}' does not take 'size'")
        return self

    def to_domain(self) -> Request:
        """Convert to a frozen domain request."""
        if self.allocate is not None:
            assert self.size is not None
            return AllocateRequest(owner=self.allocate, size=self.size)
        assert self.release is not None
        return ReleaseRequest(owner=self.release)


class ScenarioModel(BaseModel):
    """Validated scenario: address-space size plus ordered requests."""

    model_config = ConfigDict(extra="forbid")

    total_memory: int = Field(..., ge=1)
    description: str = Field(default="", max_length=500)
    requests: list[RequestModel] = Field(default_factory=list)

    def to_domain(self) -> RequestScript:
        """Convert to a frozen domain RequestScript."""
        return RequestScript(
            total_memory=self.total_memory,
            requests=tuple(request.to_domain() for request in self.requests),
        )
