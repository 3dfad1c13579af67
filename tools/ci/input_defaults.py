#!/usr/bin/env python3
"""Apply action.yml input defaults and check required inputs."""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, MutableMapping, Optional

import actions_core
from provider_env import has_input_value, set_input_value


class RequiredInputError(ValueError):
    def __init__(self, input_name: str) -> None:
        self.failure_class = "required_input_missing"
        self.input_name = input_name
        self.reason = f"Required input '{input_name}' was not provided"
        super().__init__(self.reason)


def stringify_default(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _input_config(raw: Any) -> Mapping[str, Any]:
    return raw if isinstance(raw, Mapping) else {}


def apply_defaults_from_action_yml(
    env: MutableMapping[str, str],
    declared_inputs: Optional[Mapping[str, Any]],
    ignored_names: Optional[Iterable[str]] = None,
) -> List[str]:
    """Write defaults for undeclared inputs into `env`; returns the names applied."""
    if not declared_inputs:
        return []
    ignored = set(ignored_names or ())

    applied: List[str] = []
    for input_name, raw_config in declared_inputs.items():
        if input_name in ignored:
            continue
        config = _input_config(raw_config)
        if has_input_value(env, input_name):
            continue
        if "default" in config and config["default"] is not None:
            set_input_value(env, input_name, stringify_default(config["default"]))
            applied.append(input_name)
        elif config.get("required") is True:
            actions_core.warning(f"Required input '{input_name}' was not provided")
    return applied


def check_required_input(
    env: Mapping[str, str],
    input_name: str,
    *,
    error_on_missing: bool = False,
) -> bool:
    if has_input_value(env, input_name):
        return True
    if error_on_missing:
        raise RequiredInputError(input_name)
    actions_core.warning(f"Required input '{input_name}' was not provided")
    return False
