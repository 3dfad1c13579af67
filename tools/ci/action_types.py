#!/usr/bin/env python3
"""Action descriptor loading and action-kind classification."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

ACTION_METADATA_FILENAMES = ("action.yml", "action.yaml")
DOCKER_USING_VALUES = frozenset({"docker", "container"})


class ActionKind(str, Enum):
    DIRECT_COMMAND = "direct-command"
    JAVASCRIPT = "javascript"
    COMPOSITE = "composite"
    DOCKER = "docker"
    UNKNOWN = "unknown"


class ActionRunError(ValueError):
    """Action execution failure with deterministic failure class.

    `output` holds whatever was captured before the failure.
    """

    def __init__(self, failure_class: str, message: str, *, output: str = "") -> None:
        self.failure_class = failure_class
        self.reason = message
        self.output = output
        super().__init__(f"{failure_class}: {message}")


def using_value(descriptor: Optional[Mapping[str, Any]]) -> str:
    if not isinstance(descriptor, Mapping):
        return ""
    runs = descriptor.get("runs")
    if not isinstance(runs, Mapping):
        return ""
    using = runs.get("using")
    if not isinstance(using, str):
        return ""
    return using.strip().lower()


def detect_action_type(descriptor: Optional[Mapping[str, Any]]) -> ActionKind:
    """Classify from `runs.using`; never raises."""
    using = using_value(descriptor)
    if using.startswith("node"):
        return ActionKind.JAVASCRIPT
    if using == "composite":
        return ActionKind.COMPOSITE
    if using in DOCKER_USING_VALUES:
        return ActionKind.DOCKER
    return ActionKind.UNKNOWN


def describe_using(descriptor: Optional[Mapping[str, Any]]) -> str:
    """Label used in unsupported-type errors: the raw using value, or `unknown`."""
    return using_value(descriptor) or ActionKind.UNKNOWN.value


def get_action_yaml_path(action_dir: Union[str, Path]) -> Path:
    if not isinstance(action_dir, (str, Path)) or not str(action_dir):
        raise ActionRunError("action_metadata_missing", f"invalid action directory: {action_dir!r}")
    root = Path(action_dir)
    for filename in ACTION_METADATA_FILENAMES:
        candidate = root / filename
        if candidate.is_file():
            return candidate
    raise ActionRunError(
        "action_metadata_missing",
        f"could not find action.yml or action.yaml in {root}",
    )


def load_action_descriptor(path: Path) -> Mapping[str, Any]:
    """Read and parse an action descriptor; read and YAML errors propagate unchanged."""
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ActionRunError("action_metadata_invalid", f"action metadata root must be a mapping: {path}")
    return data
