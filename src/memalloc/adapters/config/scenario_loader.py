# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Yakov Shkolnikov and contributors
"""YAML scenario loader.

Loads scenario YAML files, validates via Pydantic, and returns
frozen domain dataclasses.
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from memalloc.adapters.config.scenario_models import ScenarioModel
from memalloc.domain.errors import ScenarioLoadError
from memalloc.domain.value_objects import RequestScript

SCENARIO_SUFFIXES = (".yaml", ".yml")


def load_scenario(path: Path) -> RequestScript:
    """Load and validate a YAML scenario file.

    Args:
        path: Path to the YAML file.

    Returns:
        Validated RequestScript domain object.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ScenarioLoadError: If the file is not UTF-8 text, contains invalid
            YAML or fails schema validation.
    """
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as e:
        raise ScenarioLoadError(f"{path}: not a UTF-8 text file: {e}") from e
    except yaml.YAMLError as e:
        raise ScenarioLoadError(f"{path}: invalid YAML: {e}") from e

    try:
        model = ScenarioModel.model_validate(raw)
    except ValidationError as e:
        raise ScenarioLoadError(f"{path}: {e}") from e
    return model.to_domain()


def is_scenario_file(path: Path) -> bool:
    return path.suffix.lower() in SCENARIO_SUFFIXES


def discover_scenarios(directory: Path) -> dict[str, Path]:
    """Find all *.yaml / *.yml scenario files in a directory.

    Returns:
        Dict mapping scenario ID (from filename stem) to file path.
    """
    scenarios: dict[str, Path] = {}
    if not directory.is_dir():
        return scenarios
    for path in sorted(directory.iterdir()):
        if path.is_file() and is_scenario_file(path):
            scenarios[path.stem] = path
    return scenarios
