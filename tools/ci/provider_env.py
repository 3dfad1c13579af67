#!/usr/bin/env python3
"""Provider input mapping: GitHub `INPUT_<NAME>` environment conventions."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, MutableMapping, Optional

INPUT_PREFIX = "INPUT_"
FORWARDED_INPUT_PREFIX = "input-"


def input_env_key(name: str) -> str:
    """GitHub upper-cases input names and replaces spaces; hyphens are kept."""
    return f"{INPUT_PREFIX}{name.replace(' ', '_').upper()}"


def has_input_value(env: Mapping[str, str], name: str) -> bool:
    return input_env_key(name) in env


def get_input_value(env: Mapping[str, str], name: str, *, trim: bool = True) -> Optional[str]:
    value = env.get(input_env_key(name))
    if value is None:
        return None
    return value.strip() if trim else value


def set_input_value(
    env: MutableMapping[str, str],
    name: str,
    value: object,
    *,
    trim: bool = True,
) -> None:
    text = value if isinstance(value, str) else str(value)
    env[input_env_key(name)] = text.strip() if trim else text


def input_name_from_key(key: str) -> Optional[str]:
    if not key.startswith(INPUT_PREFIX):
        return None
    return key[len(INPUT_PREFIX):].lower()


def inputs_from_env(env: Mapping[str, str], names: Iterable[str]) -> Dict[str, str]:
    """Build the flat name -> value lookup; missing inputs map to ""."""
    out: Dict[str, str] = {}
    for name in names:
        value = get_input_value(env, name)
        out[name] = value if value is not None else ""
    return out


def unwrap_forwarded_inputs(env: MutableMapping[str, str]) -> Dict[str, str]:
    """Rename `INPUT_INPUT-<X>` to `INPUT_<X>` in place; returns {original: stripped}."""
    renamed: Dict[str, str] = {}
    for key in sorted(env):
        name = input_name_from_key(key)
        if name is None or not name.startswith(FORWARDED_INPUT_PREFIX):
            continue
        stripped = name[len(FORWARDED_INPUT_PREFIX):]
        if not stripped:
            continue
        value = env.pop(key)
        env[input_env_key(stripped)] = value
        renamed[name] = stripped
    return renamed
