#!/usr/bin/env python3
"""Dispatcher: load a wrapped action, classify it, and run it under witness."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

import actions_core
from action_runners import dispatch_action, run_direct_command
from action_types import detect_action_type, get_action_yaml_path, load_action_descriptor
from input_defaults import apply_defaults_from_action_yml
from witness_options import WitnessOptions

# Inputs consumed by this step itself; never treated as wrapped-action inputs.
WITNESS_INPUT_NAMES = frozenset(
    {
        "step",
        "witness_version",
        "version",
        "action-ref",
        "action-inputs",
        "archivista-server",
        "attestations",
        "command",
    }
)


def run_action_with_witness(
    action_dir: Path,
    witness_options: WitnessOptions,
    witness_exe_path: str,
    action_env: Mapping[str, str],
    action_config: Optional[Mapping[str, Any]] = None,
) -> str:
    """Run the action in `action_dir` (or the given descriptor) and return its captured output.

    `action_env` is never mutated; defaults are applied to a per-call copy.
    """
    env = dict(action_env) if action_env is not None else None
    if action_config is None:
        metadata_path = get_action_yaml_path(action_dir)
        action_config = load_action_descriptor(metadata_path)
        declared = action_config.get("inputs")
        actions_core.info(
            f"Loaded action: {action_config.get('name') or 'Unnamed Action'} "
            f"with {len(declared) if isinstance(declared, Mapping) else 0} inputs"
        )
        if env is not None:
            applied = apply_defaults_from_action_yml(env, declared, WITNESS_INPUT_NAMES)
            if applied:
                actions_core.info(f"Applied {len(applied)} default values from action metadata")
    else:
        actions_core.info("Using provided action config")

    kind = detect_action_type(action_config)
    actions_core.info(f"Detected action type: {kind.value}")
    return dispatch_action(kind, action_dir, action_config, witness_options, witness_exe_path, env)


def run_direct_command_with_witness(
    command: str,
    witness_options: WitnessOptions,
    witness_exe_path: str,
    env: Optional[Mapping[str, str]] = None,
) -> str:
    return run_direct_command(command, witness_options, witness_exe_path, env)
