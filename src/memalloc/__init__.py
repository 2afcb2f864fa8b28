# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""memalloc: First-fit contiguous memory allocation simulator.

Block-list allocation over a fixed address space with hexagonal architecture.

Architecture: Hexagonal (Ports & Adapters)
- Domain core: Pure business logic (no external dependencies)
- Application: Simulation service driving the allocator
- Adapters: Request file / YAML readers, report rendering, settings, logging
- Entrypoints: Typer CLI
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
