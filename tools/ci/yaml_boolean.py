#!/usr/bin/env python3
"""YAML 1.2 core-schema boolean helpers for action inputs."""

from __future__ import annotations

from typing import Optional

YAML_TRUE_VALUES = frozenset(
    {"true", "True", "TRUE", "y", "Y", "yes", "Yes", "YES", "on", "On", "ON"}
)
YAML_FALSE_VALUES = frozenset(
    {"false", "False", "FALSE", "n", "N", "no", "No", "NO", "off", "Off", "OFF"}
)
TRUTHY_INPUT_VALUES = frozenset({"true", "yes", "on"})

SUPPORTED_BOOLEAN_LIST = (
    "true | True | TRUE | false | False | FALSE | y | Y | yes | Yes | YES | "
    "n | N | no | No | NO | on | On | ON | off | Off | OFF"
)


def is_truthy_input(value: Optional[str]) -> bool:
    """Option flags: case-insensitive true/yes/on; everything else is false."""
    if not isinstance(value, str):
        return False
    return value.strip().lower() in TRUTHY_INPUT_VALUES


def is_valid_yaml_boolean(value: object, *, trim: bool = True) -> bool:
    if not isinstance(value, str):
        return False
    text = value.strip() if trim else value
    return text in YAML_TRUE_VALUES or text in YAML_FALSE_VALUES


def parse_yaml_boolean(value: object, *, trim: bool = True) -> Optional[bool]:
    if not isinstance(value, str):
        return None
    text = value.strip() if trim else value
    if text in YAML_TRUE_VALUES:
        return True
    if text in YAML_FALSE_VALUES:
        return False
    return None


def validate_boolean_input(
    value: object,
    *,
    required: bool = False,
    trim: bool = True,
) -> Optional[str]:
    """Return the boolean spelling as given (trimmed), or None when not a YAML boolean."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None or value == "":
        if required:
            raise ValueError("Required boolean input is empty or not provided")
        return None
    if isinstance(value, str):
        text = value.strip() if trim else value
        if is_valid_yaml_boolean(text, trim=False):
            return text
    if required:
        raise ValueError(
            "Input does not meet YAML 1.2 'Core Schema' specification: "
            f"{value}\nSupport boolean input list: {SUPPORTED_BOOLEAN_LIST}"
        )
    return None
