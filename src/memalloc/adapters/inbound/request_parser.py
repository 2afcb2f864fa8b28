# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Line-oriented request file parser.

File format::

    <total memory>
    REQUEST <process> <size>
    RELEASE <process>

Blank lines are ignored. The first non-blank line is always the address
space size; a bad header is fatal. Malformed request lines are either
skipped with a warning (lenient, the default) or rejected (strict).
"""

from collections.abc import Iterable
from pathlib import Path

import structlog

from memalloc.domain.errors import InvalidRequestError
from memalloc.domain.value_objects import (
    AllocateRequest,
    ReleaseRequest,
    Request,
    RequestScript,
)

logger = structlog.get_logger(__name__)

ALLOCATE_KEYWORD = "REQUEST"
RELEASE_KEYWORD = "RELEASE"


def parse_request_line(line: str, line_number: int = 0) -> Request:
    """Parse a single REQUEST/RELEASE line.

    Raises:
        InvalidRequestError: If the keyword, arity or size is invalid.
    """
    parts = line.split()
    where = f"line {line_number}: " if line_number else ""
    if not parts:
        raise InvalidRequestError(f"{where}empty request line")

    keyword, args = parts[0], parts[1:]
    if keyword == ALLOCATE_KEYWORD:
        if len(args) != 2:
            raise InvalidRequestError(f"{where}expected 'REQUEST <process> <size>', got {line!r}")
        owner, raw_size = args
        try:
            size = int(raw_size)
        except ValueError:
            raise InvalidRequestError(f"{where}size must be an integer, got {raw_size!r}") from None
        if size < 1:
            raise InvalidRequestError(f"{where}size must be >= 1, got {size}")
        return AllocateRequest(owner=owner, size=size)

    if keyword == RELEASE_KEYWORD:
        if len(args) != 1:
            raise InvalidRequestError(f"{where}expected 'RELEASE <process>', got {line!r}")
        return ReleaseRequest(owner=args[0])

    raise InvalidRequestError(f"{where}unknown command {keyword!r}")


def parse_requests(lines: Iterable[str], strict: bool = False) -> RequestScript:
    """Parse the header and request lines of a request file.

    Args:
        lines: Raw lines (with or without trailing newlines).
        strict: Raise on the first malformed request line instead of
            skipping it.

    Returns:
        RequestScript with the total memory and the parsed requests.

    Raises:
        InvalidRequestError: If the header is missing or not a positive
            integer, or (strict only) a request line is malformed.
    """
    total_memory: int | None = None
    requests: list[Request] = []

    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue

        if total_memory is None:
            try:
                total_memory = int(line)
            except ValueError:
                raise InvalidRequestError(
                    f"line {line_number}: total memory must be an integer, got {line!r}"
                ) from None
            if total_memory < 1:
                raise InvalidRequestError(
                    f"line {line_number}: total memory must be >= 1, got {total_memory}"
                )
            continue

        try:
            requests.append(parse_request_line(line, line_number))
        except InvalidRequestError as e:
            if strict:
                raise
            logger.warning("request_line_skipped", line=line_number, error=str(e))

    if total_memory is None:
        raise InvalidRequestError("request file is empty: missing total memory header")

    return RequestScript(total_memory=total_memory, requests=tuple(requests))


def load_requests(path: Path, strict: bool = False) -> RequestScript:
    """Read and parse a request file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        InvalidRequestError: If the file is not UTF-8 text, or see
            parse_requests().
    """
    try:
        with open(path, encoding="utf-8") as f:
            return parse_requests(f, strict=strict)
    except UnicodeDecodeError as e:
        raise InvalidRequestError(f"{path}: not a UTF-8 text file: {e}") from e
