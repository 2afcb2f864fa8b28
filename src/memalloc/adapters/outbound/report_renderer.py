# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""Render a SimulationReport as a text report or a JSON document."""

import json
from typing import Any

from memalloc.domain.value_objects import (
    AllocationFailed,
    AllocationSucceeded,
    FailureReason,
    Outcome,
    ReleaseFailed,
    ReleaseSucceeded,
    SimulationReport,
)

RULE = "=" * 40
THIN_RULE = "-" * 40

_REASON_LABELS = {
    FailureReason.INSUFFICIENT_MEMORY: "Insufficient Memory",
    FailureReason.PROCESS_NOT_FOUND: "Process not found",
    FailureReason.DUPLICATE_OWNER: "Duplicate Owner",
}


def format_event(event: Outcome, unit: str = "KB") -> str:
    """One-line summary of a request outcome, e.g. 'REQUEST A 30 KB → SUCCESS'."""
    if isinstance(event, AllocationSucceeded):
        return f"REQUEST {event.owner} {event.size} {unit} → SUCCESS"
    if isinstance(event, AllocationFailed):
        return f"REQUEST {event.owner} {event.size} {unit} → FAILED ({_REASON_LABELS[event.reason]})"
    if isinstance(event, ReleaseSucceeded):
        return f"RELEASE {event.owner} → SUCCESS"
    if isinstance(event, ReleaseFailed):
        return f"RELEASE {event.owner} → FAILED ({_REASON_LABELS[event.reason]})"
    raise TypeError(f"unsupported event type: {type(event).__name__}")


def render_text(report: SimulationReport, unit: str = "KB", source: str | None = None) -> str:
    """Full text report: header, per-request outcomes, memory map, statistics."""
    stats = report.statistics
    lines = [
        RULE,
        "Memory Allocation Simulator (First-Fit)",
        RULE,
        "",
    ]
    if source is not None:
        lines.append(f"Reading from: {source}")
    lines += [
        f"Total Memory: {report.total_memory} {unit}",
        THIN_RULE,
        "",
        "Processing requests...",
        "",
    ]
    lines += [format_event(event, unit) for event in report.events]

    lines += ["", RULE, "Final Memory State", RULE]
    for block in report.memory_map:
        if block.is_free:
            lines.append(
                f"Block {block.index}: [{block.start}-{block.end}]  FREE ({block.size} {unit})"
            )
        else:
            lines.append(
                f"Block {block.index}: [{block.start}-{block.end}]  "
                f"{block.owner} ({block.size} {unit}) - ALLOCATED"
            )

    lines += [
        "",
        RULE,
        "Memory Statistics",
        RULE,
        f"Total Memory:           {stats.total_memory} {unit}",
        f"Allocated Memory:       {stats.allocated} {unit} ({stats.allocated_pct:.2f}%)",
        f"Free Memory:            {stats.free} {unit} ({stats.free_pct:.2f}%)",
        f"Number of Processes:    {stats.num_processes}",
        f"Number of Free Blocks:  {stats.num_free_blocks}",
        f"Largest Free Block:     {stats.largest_free} {unit}",
        f"External Fragmentation: {stats.external_fragmentation_pct:.2f}%",
        "",
        f"Successful Allocations: {stats.successful_allocations}",
        f"Failed Allocations:     {stats.failed_allocations}",
        RULE,
    ]
    return "\n".join(lines) + "\n"


def _event_to_dict(event: Outcome) -> dict[str, Any]:
    if isinstance(event, AllocationSucceeded):
        return {
            "type": "allocation_succeeded",
            "owner": event.owner,
            "size": event.size,
            "start": event.start,
            "end": event.end,
        }
    if isinstance(event, AllocationFailed):
        return {
            "type": "allocation_failed",
            "owner": event.owner,
            "size": event.size,
            "reason": event.reason.value,
        }
    if isinstance(event, ReleaseSucceeded):
        return {
            "type": "release_succeeded",
            "owner": event.owner,
            "start": event.start,
            "size": event.size,
        }
    if isinstance(event, ReleaseFailed):
        return {"type": "release_failed", "owner": event.owner, "reason": event.reason.value}
    raise TypeError(f"unsupported event type: {type(event).__name__}")


def report_to_dict(report: SimulationReport, unit: str = "KB") -> dict[str, Any]:
    stats = report.statistics
    return {
        "unit": unit,
        "total_memory": report.total_memory,
        "events": [_event_to_dict(event) for event in report.events],
        "memory_map": [
            {
                "index": block.index,
                "start": block.start,
                "end": block.end,
                "size": block.size,
                "state": "free" if block.is_free else "allocated",
                "owner": block.owner,
            }
            for block in report.memory_map
        ],
        "statistics": {
            "total_memory": stats.total_memory,
            "allocated": stats.allocated,
            "free": stats.free,
            "allocated_pct": round(stats.allocated_pct, 2),
            "free_pct": round(stats.free_pct, 2),
            "num_processes": stats.num_processes,
            "num_free_blocks": stats.num_free_blocks,
            "largest_free": stats.largest_free,
            "external_fragmentation_pct": round(stats.external_fragmentation_pct, 2),
            "successful_allocations": stats.successful_allocations,
            "failed_allocations": stats.failed_allocations,
        },
    }


def render_json(report: SimulationReport, unit: str = "KB") -> str:
    return json.dumps(report_to_dict(report, unit), indent=2, ensure_ascii=False) + "\n"
