#!/usr/bin/env python3
"""Execution strategies for direct commands and wrapped JavaScript/composite actions."""

from __future__ import annotations

import os
import re
import subprocess
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, Optional, Sequence, Tuple

import yaml

import actions_core
from action_setup import (
    clean_up_directory,
    download_and_setup_action,
    is_docker_action_ref,
    is_local_action_ref,
    resolve_local_action_path,
)
from action_types import (
    ActionKind,
    ActionRunError,
    describe_using,
    detect_action_type,
    get_action_yaml_path,
    load_action_descriptor,
)
from input_defaults import (
    RequiredInputError,
    apply_defaults_from_action_yml,
    check_required_input,
    stringify_default,
)
from provider_env import (
    get_input_value,
    has_input_value,
    input_env_key,
    input_name_from_key,
    set_input_value,
)
from witness_args import assemble_witness_args
from witness_options import WitnessOptions
from yaml_boolean import is_valid_yaml_boolean, validate_boolean_input

COMMAND_TOKEN_RE = re.compile(r'(?:[^\s"]+|"[^"]*")+')
INPUT_EXPR_RE = re.compile(r"\$\{\{\s*inputs\.([A-Za-z0-9_-]+)\s*\}\}")
STEP_OUTPUT_EXPR_RE = re.compile(r"\$\{\{\s*steps\.([A-Za-z0-9_-]+)\.outputs\.([A-Za-z0-9_-]+)\s*\}\}")
ACTION_PATH_EXPR_RE = re.compile(r"\$\{\{\s*github\.action_path\s*\}\}")
LEGACY_SET_OUTPUT_RE = re.compile(r"::set-output name=([^:]+)::([^\n]*)")

DOCKER_UNSUPPORTED_MESSAGE = "Docker-based actions are not yet supported"
MISSING_STEPS_MESSAGE = "Invalid composite action configuration: missing steps"
SUPPORTED_RUN_SHELLS = frozenset({"bash"})

WITNESS_PROBLEM_MARKERS = ("level=error", "level=fatal", "level=warning")
EXPECTED_WITNESS_NOISE = (
    "failed to create kms signer: no kms provider found for key reference",
    "failed to create vault signer: url is a required option",
    "Unexpected input(s)",
)

StepOutputs = Dict[str, Dict[str, str]]


def require_arguments(**arguments: Any) -> None:
    for name, value in arguments.items():
        if value is None:
            raise ActionRunError("argument_required", f"{name} argument is required")


def tokenize_command(command: str) -> List[str]:
    """Split on whitespace; double-quoted substrings stay in one token, quotes included."""
    tokens = COMMAND_TOKEN_RE.findall(command)
    return tokens or [command]


def workspace_dir(env: Optional[Mapping[str, str]] = None) -> Path:
    source = os.environ if env is None else env
    workspace = (source.get("GITHUB_WORKSPACE") or "").strip()
    return Path(workspace) if workspace else Path.cwd()


def is_witness_problem_line(line: str) -> bool:
    if not any(marker in line for marker in WITNESS_PROBLEM_MARKERS):
        return False
    return not any(pattern in line for pattern in EXPECTED_WITNESS_NOISE)


def report_witness_lines(output: str) -> None:
    for raw in output.splitlines():
        line = raw.strip()
        if not line:
            continue
        if is_witness_problem_line(line):
            actions_core.warning(f"Witness output: {line}")
        else:
            actions_core.debug(f"Witness output: {line}")


def execute_witness(
    witness_exe_path: str,
    args: Sequence[str],
    *,
    cwd: Path,
    env: Mapping[str, str],
    run_process: Optional[Callable[..., subprocess.CompletedProcess[str]]] = None,
) -> str:
    """Run witness once; stdout and stderr are captured interleaved into one string."""
    runner = run_process or subprocess.run
    try:
        completed = runner(
            [witness_exe_path, *args],
            cwd=str(cwd),
            env=dict(env),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except OSError as exc:
        raise ActionRunError("witness_execution_failed", f"failed to start witness: {exc}") from exc

    output = completed.stdout or ""
    if output:
        print(output, end="" if output.endswith("\n") else "\n")
    report_witness_lines(output)
    if completed.returncode != 0:
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        detail = lines[-1] if lines else "no output"
        raise ActionRunError(
            "witness_execution_failed",
            f"witness exited with code {completed.returncode}: {detail}",
            output=output,
        )
    return output


def run_direct_command(
    command: str,
    witness_options: WitnessOptions,
    witness_exe_path: str,
    env: Optional[Mapping[str, str]] = None,
) -> str:
    require_arguments(
        command=command,
        witness_options=witness_options,
        witness_exe_path=witness_exe_path,
    )
    command_env = dict(os.environ if env is None else env)
    args = assemble_witness_args(witness_options, tokenize_command(command))
    return execute_witness(
        witness_exe_path,
        args,
        cwd=workspace_dir(command_env),
        env=command_env,
    )


def normalize_boolean_inputs(env: MutableMapping[str, str]) -> List[str]:
    """Trim YAML-boolean `INPUT_*` values in place; returns the keys that changed."""
    changed: List[str] = []
    for key in sorted(env):
        if input_name_from_key(key) is None:
            continue
        value = env[key]
        if not is_valid_yaml_boolean(value):
            continue
        validated = validate_boolean_input(value)
        if validated is not None and validated != value:
            env[key] = validated
            changed.append(key)
    return changed


def _runs_section(action_config: Mapping[str, Any]) -> Mapping[str, Any]:
    runs = action_config.get("runs")
    return runs if isinstance(runs, Mapping) else {}


def run_js_action(
    action_dir: Path,
    action_config: Mapping[str, Any],
    witness_options: WitnessOptions,
    witness_exe_path: str,
    action_env: Mapping[str, str],
) -> str:
    require_arguments(
        action_dir=action_dir,
        action_config=action_config,
        witness_options=witness_options,
        witness_exe_path=witness_exe_path,
        action_env=action_env,
    )
    entry_point = _runs_section(action_config).get("main")
    if not isinstance(entry_point, str) or not entry_point.strip():
        raise ActionRunError("js_entry_missing", "entry point (runs.main) not defined in action metadata")
    entry_file = Path(action_dir) / entry_point.strip()
    if not entry_file.is_file():
        raise ActionRunError("js_entry_missing", f"entry file {entry_file} does not exist")
    actions_core.info(f"Action entry point: {entry_point}")

    node_env = dict(action_env)
    node_path = node_env.get("NODE_PATH", "")
    node_env["NODE_PATH"] = f"{action_dir}{os.pathsep}{node_path}" if node_path else str(action_dir)
    for key in normalize_boolean_inputs(node_env):
        actions_core.debug(f"Normalized boolean input {key}")

    args = assemble_witness_args(witness_options, ["node", str(entry_file)])
    return execute_witness(
        witness_exe_path,
        args,
        cwd=workspace_dir(action_env),
        env=node_env,
    )


def run_docker_action(
    action_dir: Path,
    action_config: Mapping[str, Any],
    witness_options: WitnessOptions,
    witness_exe_path: str,
    action_env: Mapping[str, str],
) -> str:
    require_arguments(
        action_dir=action_dir,
        action_config=action_config,
        witness_options=witness_options,
        witness_exe_path=witness_exe_path,
        action_env=action_env,
    )
    raise ActionRunError("docker_unsupported", DOCKER_UNSUPPORTED_MESSAGE)


def _lookup_input(
    name: str,
    env: Mapping[str, str],
    declared_inputs: Mapping[str, Any],
) -> str:
    value = get_input_value(env, name)
    if value is None:
        value = env.get(input_env_key(name.replace("-", "_")))
    if value is not None:
        return value
    config = declared_inputs.get(name)
    if isinstance(config, Mapping) and config.get("default") is not None:
        return stringify_default(config["default"])
    return ""


def substitute_expressions(
    text: str,
    *,
    action_dir: Path,
    env: Mapping[str, str],
    declared_inputs: Mapping[str, Any],
    step_outputs: StepOutputs,
) -> str:
    text = ACTION_PATH_EXPR_RE.sub(lambda _: str(action_dir), text)
    text = INPUT_EXPR_RE.sub(lambda m: _lookup_input(m.group(1), env, declared_inputs), text)
    return STEP_OUTPUT_EXPR_RE.sub(
        lambda m: step_outputs.get(m.group(1), {}).get(m.group(2), ""),
        text,
    )


def parse_github_output_file(text: str) -> Dict[str, str]:
    """Parse `name=value` and `name<<DELIM ... DELIM` records."""
    outputs: Dict[str, str] = {}
    lines = text.splitlines()
    index = 0
    while index < len(lines):
        line = lines[index]
        index += 1
        if "<<" in line and ("=" not in line or line.index("<<") < line.index("=")):
            name, delimiter = line.split("<<", 1)
            body: List[str] = []
            while index < len(lines) and lines[index] != delimiter:
                body.append(lines[index])
                index += 1
            index += 1
            outputs[name.strip()] = "\n".join(body)
        elif "=" in line:
            name, value = line.split("=", 1)
            if name.strip():
                outputs[name.strip()] = value
    return outputs


def parse_legacy_set_output(output: str) -> Dict[str, str]:
    return {match.group(1).strip(): match.group(2) for match in LEGACY_SET_OUTPUT_RE.finditer(output)}


def step_output_env_key(step_id: str, output_name: str) -> str:
    return f"STEPS_{step_id.replace('-', '_').upper()}_OUTPUTS_{output_name.replace('-', '_').upper()}"


def _prepare_composite_env(
    action_config: Mapping[str, Any],
    action_env: Mapping[str, str],
) -> Dict[str, str]:
    run_env = dict(action_env)
    declared_inputs = action_config.get("inputs")
    if not isinstance(declared_inputs, Mapping):
        return run_env
    for input_name, raw_config in declared_inputs.items():
        config = raw_config if isinstance(raw_config, Mapping) else {}
        if has_input_value(run_env, input_name):
            current = get_input_value(run_env, input_name) or ""
            if config.get("type") == "boolean" or is_valid_yaml_boolean(current):
                validated = validate_boolean_input(current)
                if validated is not None:
                    run_env[input_env_key(input_name)] = validated
        elif config.get("default") is not None:
            continue
        elif config.get("required") is True:
            check_required_input(run_env, input_name, error_on_missing=True)
    return run_env


def _run_shell_step(
    step: Mapping[str, Any],
    *,
    action_dir: Path,
    witness_options: WitnessOptions,
    witness_exe_path: str,
    run_env: Mapping[str, str],
    declared_inputs: Mapping[str, Any],
    step_outputs: StepOutputs,
) -> Tuple[str, Dict[str, str]]:
    def substitute(text: str) -> str:
        return substitute_expressions(
            text,
            action_dir=action_dir,
            env=run_env,
            declared_inputs=declared_inputs,
            step_outputs=step_outputs,
        )

    script = substitute(str(step["run"]))
    step_env = dict(run_env)
    extra_env = step.get("env")
    if isinstance(extra_env, Mapping):
        for key, value in extra_env.items():
            step_env[str(key)] = substitute(stringify_default(value))
    path_value = step_env.get("PATH", os.environ.get("PATH", ""))
    if str(action_dir) not in path_value.split(os.pathsep):
        step_env["PATH"] = f"{action_dir}{os.pathsep}{path_value}" if path_value else str(action_dir)
    step_env["GITHUB_ACTION_PATH"] = str(action_dir)

    cwd = workspace_dir(run_env)
    working_directory = step.get("working-directory")
    if isinstance(working_directory, str) and working_directory.strip():
        cwd = cwd / substitute(working_directory.strip())

    with tempfile.TemporaryDirectory(prefix="witness-step-") as tmp:
        script_path = Path(tmp) / "step.sh"
        script_path.write_text(script, encoding="utf-8")
        script_path.chmod(0o755)
        output_path = Path(tmp) / "github_output"
        output_path.touch()
        step_env["GITHUB_OUTPUT"] = str(output_path)

        args = assemble_witness_args(witness_options, ["bash", "-e", str(script_path)])
        output = execute_witness(witness_exe_path, args, cwd=cwd, env=step_env)
        outputs = parse_legacy_set_output(output)
        outputs.update(parse_github_output_file(output_path.read_text(encoding="utf-8")))
    return output, outputs


def _resolve_nested_action(ref: str, parent_action_dir: Path, env: Mapping[str, str]) -> Tuple[Path, bool]:
    if is_docker_action_ref(ref):
        raise ActionRunError("docker_unsupported", DOCKER_UNSUPPORTED_MESSAGE)
    if is_local_action_ref(ref):
        return resolve_local_action_path(ref, workspace_dir(env), parent_action_dir), False
    if "/" in ref:
        return download_and_setup_action(ref), True
    raise ActionRunError("action_reference_invalid", f"unsupported action reference format: {ref}")


def _run_uses_step(
    step: Mapping[str, Any],
    *,
    action_dir: Path,
    witness_options: WitnessOptions,
    witness_exe_path: str,
    run_env: Mapping[str, str],
    declared_inputs: Mapping[str, Any],
    step_outputs: StepOutputs,
) -> Tuple[str, Dict[str, str]]:
    ref = str(step["uses"]).strip()
    nested_env = dict(run_env)
    with_inputs = step.get("with")
    if isinstance(with_inputs, Mapping):
        for name, value in with_inputs.items():
            text = substitute_expressions(
                stringify_default(value),
                action_dir=action_dir,
                env=run_env,
                declared_inputs=declared_inputs,
                step_outputs=step_outputs,
            )
            set_input_value(nested_env, str(name), text, trim=False)

    nested_dir, downloaded = _resolve_nested_action(ref, action_dir, run_env)
    try:
        nested_config = load_action_descriptor(get_action_yaml_path(nested_dir))
        apply_defaults_from_action_yml(nested_env, nested_config.get("inputs"))
        kind = detect_action_type(nested_config)
        actions_core.info(f"Nested action type: {kind.value}")
        nested_outputs: StepOutputs = {}
        if kind is ActionKind.COMPOSITE:
            output, nested_outputs = run_composite_steps(
                nested_dir, nested_config, witness_options, witness_exe_path, nested_env
            )
        else:
            output = dispatch_action(
                kind, nested_dir, nested_config, witness_options, witness_exe_path, nested_env
            )

        outputs: Dict[str, str] = {}
        declared_outputs = nested_config.get("outputs")
        if isinstance(declared_outputs, Mapping):
            for name, config in declared_outputs.items():
                value = config.get("value") if isinstance(config, Mapping) else None
                if isinstance(value, str):
                    outputs[str(name)] = STEP_OUTPUT_EXPR_RE.sub(
                        lambda m: nested_outputs.get(m.group(1), {}).get(m.group(2), ""),
                        value,
                    )
        return output, outputs
    finally:
        if downloaded:
            clean_up_directory(nested_dir)


def _step_failure_class(exc: Exception) -> str:
    if isinstance(exc, RequiredInputError):
        return exc.failure_class
    if isinstance(exc, yaml.YAMLError):
        return "action_metadata_invalid"
    return "step_io_failed"


def run_composite_steps(
    action_dir: Path,
    action_config: Mapping[str, Any],
    witness_options: WitnessOptions,
    witness_exe_path: str,
    action_env: Mapping[str, str],
) -> Tuple[str, StepOutputs]:
    """Run declared steps in order; the first failing step aborts the rest."""
    steps = _runs_section(action_config).get("steps")
    if not isinstance(steps, list) or not steps:
        raise ActionRunError("composite_missing_steps", MISSING_STEPS_MESSAGE)

    run_env = _prepare_composite_env(action_config, action_env)
    raw_inputs = action_config.get("inputs")
    declared_inputs: Mapping[str, Any] = raw_inputs if isinstance(raw_inputs, Mapping) else {}
    step_outputs: StepOutputs = {}
    chunks: List[str] = []
    total = len(steps)
    actions_core.info(f"Executing composite action with {total} steps")

    for index, step in enumerate(steps, start=1):
        if not isinstance(step, Mapping):
            actions_core.warning(f"Skipping malformed step at index {index}")
            continue
        label = str(step.get("name") or step.get("id") or "unnamed step")
        shell = step.get("shell")
        if step.get("run") and (shell is None or shell in SUPPORTED_RUN_SHELLS):
            step_runner = _run_shell_step
        elif step.get("uses"):
            step_runner = _run_uses_step
        else:
            actions_core.warning(
                f"Skipping unsupported step type at index {index}: only 'run' steps "
                "with 'bash' shell and 'uses' steps are supported"
            )
            continue

        actions_core.info(f"Executing step {index}/{total}: {label}")
        try:
            output, outputs = step_runner(
                step,
                action_dir=Path(action_dir),
                witness_options=witness_options,
                witness_exe_path=witness_exe_path,
                run_env=run_env,
                declared_inputs=declared_inputs,
                step_outputs=step_outputs,
            )
        except ActionRunError as exc:
            raise ActionRunError(
                exc.failure_class,
                f"error executing step {index} ({label}): {exc.reason}",
                output="".join(chunks),
            ) from exc
        except (RequiredInputError, yaml.YAMLError, OSError) as exc:
            raise ActionRunError(
                _step_failure_class(exc),
                f"error executing step {index} ({label}): {exc}",
                output="".join(chunks),
            ) from exc
        chunks.append(output)

        step_id = step.get("id")
        if isinstance(step_id, str) and step_id:
            step_outputs[step_id] = outputs
            for name, value in outputs.items():
                run_env[step_output_env_key(step_id, name)] = value

    return "".join(chunks), step_outputs


def run_composite_action(
    action_dir: Path,
    action_config: Mapping[str, Any],
    witness_options: WitnessOptions,
    witness_exe_path: str,
    action_env: Mapping[str, str],
) -> str:
    require_arguments(
        action_dir=action_dir,
        action_config=action_config,
        witness_options=witness_options,
        witness_exe_path=witness_exe_path,
        action_env=action_env,
    )
    output, _ = run_composite_steps(action_dir, action_config, witness_options, witness_exe_path, action_env)
    return output


def dispatch_action(
    kind: ActionKind,
    action_dir: Path,
    action_config: Mapping[str, Any],
    witness_options: WitnessOptions,
    witness_exe_path: str,
    action_env: Mapping[str, str],
) -> str:
    if kind is ActionKind.JAVASCRIPT:
        return run_js_action(action_dir, action_config, witness_options, witness_exe_path, action_env)
    if kind is ActionKind.COMPOSITE:
        return run_composite_action(action_dir, action_config, witness_options, witness_exe_path, action_env)
    if kind is ActionKind.DOCKER:
        return run_docker_action(action_dir, action_config, witness_options, witness_exe_path, action_env)
    if kind is ActionKind.DIRECT_COMMAND or kind is ActionKind.UNKNOWN:
        raise ActionRunError(
            "action_type_unsupported",
            f"Unsupported action type: {describe_using(action_config)}",
        )
    raise AssertionError(f"unhandled action kind: {kind!r}")
