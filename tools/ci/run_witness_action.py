#!/usr/bin/env python3
"""Witness run step entrypoint: run a command or wrapped action under witness."""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

import actions_core
from action_runners import tokenize_command
from action_setup import (
    clean_up_directory,
    download_and_setup_action,
    is_docker_action_ref,
    is_local_action_ref,
    resolve_local_action_path,
)
from action_types import get_action_yaml_path, load_action_descriptor
from command_runners import (
    WITNESS_INPUT_NAMES,
    run_action_with_witness,
    run_direct_command_with_witness,
)
from git_oid import handle_git_oids
from input_defaults import apply_defaults_from_action_yml, check_required_input, stringify_default
from provider_env import (
    get_input_value,
    input_name_from_key,
    inputs_from_env,
    set_input_value,
    unwrap_forwarded_inputs,
)
from witness_args import assemble_witness_args
from witness_downloader import DEFAULT_WITNESS_VERSION, download_and_setup_witness
from witness_options import OPTION_INPUT_NAMES, WitnessOptions, get_witness_options

ACTION_INPUTS_INPUT = "action-inputs"


class InvalidInputError(ValueError):
    pass


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run a command or a wrapped GitHub Action under witness and record an attestation."
    )
    parser.add_argument(
        "--print-args",
        action="store_true",
        help="Print the assembled witness argument vector as JSON and exit without running anything.",
    )
    return parser.parse_args(argv)


def expand_action_inputs(env: Dict[str, str]) -> List[str]:
    """Expand the `action-inputs` YAML/JSON mapping into `INPUT_<NAME>` entries; returns the names set."""
    raw = get_input_value(env, ACTION_INPUTS_INPUT, trim=False)
    if raw is None or not raw.strip():
        return []
    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise InvalidInputError(f"'{ACTION_INPUTS_INPUT}' is not valid YAML or JSON: {exc}") from exc
    if parsed is None:
        return []
    if not isinstance(parsed, Mapping):
        raise InvalidInputError(f"'{ACTION_INPUTS_INPUT}' must be a mapping of input names to values")
    names: List[str] = []
    for name, value in parsed.items():
        text = "" if value is None else stringify_default(value)
        set_input_value(env, str(name), text, trim=False)
        names.append(str(name))
    return names


def wrapped_action_env(
    action_dir: Optional[Path],
    env: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Environment for a wrapped action: forwarded and `action-inputs` inputs mapped, defaults applied."""
    new_env = dict(os.environ if env is None else env)
    for original, stripped in sorted(unwrap_forwarded_inputs(new_env).items()):
        actions_core.info(f"Mapped input-prefixed parameter: {original} -> {stripped}")
    expanded = expand_action_inputs(new_env)
    if expanded:
        actions_core.info(f"Mapped {ACTION_INPUTS_INPUT} entries: {', '.join(expanded)}")

    if action_dir is not None:
        try:
            descriptor = load_action_descriptor(get_action_yaml_path(action_dir))
        except (OSError, ValueError) as exc:
            actions_core.warning(f"Error processing action metadata: {exc}")
            descriptor = {}
        declared = descriptor.get("inputs")
        if isinstance(declared, Mapping):
            applied = apply_defaults_from_action_yml(new_env, declared, WITNESS_INPUT_NAMES)
            if applied:
                actions_core.info(f"Applied default values for inputs: {', '.join(applied)}")
            for input_name, config in declared.items():
                if input_name in WITNESS_INPUT_NAMES:
                    continue
                if isinstance(config, Mapping) and config.get("required") is True:
                    check_required_input(new_env, input_name)

    passed = sorted(
        {
            name
            for name in (input_name_from_key(key) for key in new_env)
            if name is not None and name not in WITNESS_INPUT_NAMES
        }
    )
    actions_core.info(f"Passing direct input to wrapped action: {len(passed)} inputs")
    return new_env


def docker_image_descriptor(action_ref: str, command: str) -> Dict[str, Any]:
    return {
        "name": "Docker Image Action",
        "description": "Docker container action",
        "runs": {
            "using": "docker",
            "image": action_ref,
            "args": ["/bin/sh", "-c", command] if command else [],
        },
    }


class WitnessActionRunner:
    """Install witness, run the command or wrapped action, and report GitOIDs."""

    def __init__(self, env: Optional[Mapping[str, str]] = None) -> None:
        self.env: Mapping[str, str] = os.environ if env is None else env
        self.witness_exe_path: Optional[str] = None
        self.witness_options: Optional[WitnessOptions] = None
        self.action_dir: Optional[Path] = None

    def workspace(self) -> Path:
        workspace = (self.env.get("GITHUB_WORKSPACE") or "").strip()
        return Path(workspace) if workspace else Path.cwd()

    def input(self, name: str) -> str:
        return actions_core.get_input(name, self.env)

    def setup(self) -> None:
        version = self.input("version") or DEFAULT_WITNESS_VERSION
        install_dir = self.input("witness-install-dir")
        self.witness_exe_path = str(
            download_and_setup_witness(
                version,
                install_dir=Path(install_dir) if install_dir else None,
                env=self.env,
            )
        )
        actions_core.info(f"Witness executable path: {self.witness_exe_path}")
        self.witness_options = get_witness_options(inputs_from_env(self.env, OPTION_INPUT_NAMES))

    def validate_inputs(self) -> None:
        command = self.input("command")
        action_ref = self.input("action-ref")
        if not command and not action_ref:
            raise InvalidInputError("Either 'command' or 'action-ref' input is required")
        if command and action_ref and not is_docker_action_ref(action_ref):
            raise InvalidInputError(
                "Either 'command' or 'action-ref' input is required, "
                "but not both unless using a Docker image reference"
            )

    def witness(self) -> Tuple[WitnessOptions, str]:
        if self.witness_options is None or self.witness_exe_path is None:
            raise InvalidInputError("witness is not set up; call setup() before running")
        return self.witness_options, self.witness_exe_path

    def execute_action(self, action_ref: str) -> str:
        actions_core.info(f"Wrapping GitHub Action: {action_ref}")
        witness_options, witness_exe_path = self.witness()
        if is_docker_action_ref(action_ref):
            workspace = self.workspace()
            return run_action_with_witness(
                workspace,
                witness_options,
                witness_exe_path,
                wrapped_action_env(None, self.env),
                docker_image_descriptor(action_ref, self.input("command")),
            )

        downloaded = not is_local_action_ref(action_ref)
        if downloaded:
            self.action_dir = download_and_setup_action(action_ref)
        else:
            self.action_dir = resolve_local_action_path(action_ref, self.workspace())
        try:
            return run_action_with_witness(
                self.action_dir,
                witness_options,
                witness_exe_path,
                wrapped_action_env(self.action_dir, self.env),
            )
        finally:
            if downloaded:
                clean_up_directory(self.action_dir)

    def execute_command(self, command: str) -> str:
        witness_options, witness_exe_path = self.witness()
        actions_core.info("Running command with witness")
        return run_direct_command_with_witness(
            command,
            witness_options,
            witness_exe_path,
            self.env,
        )

    def run(self) -> int:
        try:
            self.validate_inputs()
            self.setup()
            witness_options, _ = self.witness()
            action_ref = self.input("action-ref")
            if action_ref:
                output = self.execute_action(action_ref)
            else:
                output = self.execute_command(self.input("command"))
            handle_git_oids(
                output,
                witness_options.archivista_server,
                witness_options.step,
                witness_options.attestations,
            )
        except Exception as exc:
            actions_core.set_failed(f"Witness run action failed: {exc}")
            return 1
        actions_core.info("Witness run completed successfully")
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    if args.print_args:
        options = get_witness_options(inputs_from_env(os.environ, OPTION_INPUT_NAMES))
        command = actions_core.get_input("command")
        trailing = tokenize_command(command) if command else []
        json.dump(assemble_witness_args(options, trailing), sys.stdout, indent=2, ensure_ascii=False)
        sys.stdout.write("\n")
        return 0
    return WitnessActionRunner().run()


if __name__ == "__main__":
    raise SystemExit(main())
