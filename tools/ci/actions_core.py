#!/usr/bin/env python3
"""GitHub workflow-command helpers for logging, outputs and step summaries."""

from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Mapping, Optional

from provider_env import get_input_value


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _command(name: str, message: str) -> None:
    print(f"::{name}::{_escape_data(message)}", flush=True)


def info(message: str) -> None:
    print(message, flush=True)


def debug(message: str) -> None:
    _command("debug", message)


def warning(message: str) -> None:
    _command("warning", message)


def error(message: str) -> None:
    _command("error", message)


def set_failed(message: str) -> None:
    """Report a fatal failure. Callers return a non-zero exit code afterwards."""
    error(message)


def get_input(name: str, env: Optional[Mapping[str, str]] = None) -> str:
    value = get_input_value(os.environ if env is None else env, name)
    return value if value is not None else ""


def _append_file_command(path: Path, line: str) -> None:
    with path.open("a", encoding="utf-8") as handle:
        handle.write(line)


def set_output(name: str, value: str) -> None:
    output_file = os.environ.get("GITHUB_OUTPUT", "").strip()
    if not output_file:
        print(f"::set-output name={name}::{_escape_data(value)}", flush=True)
        return
    if "\n" in value:
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        _append_file_command(Path(output_file), f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
    else:
        _append_file_command(Path(output_file), f"{name}={value}\n")


def add_path(directory: str) -> None:
    current = os.environ.get("PATH", "")
    os.environ["PATH"] = f"{directory}{os.pathsep}{current}" if current else directory
    path_file = os.environ.get("GITHUB_PATH", "").strip()
    if path_file:
        _append_file_command(Path(path_file), f"{directory}\n")


def step_summary_path() -> Optional[Path]:
    summary = os.environ.get("GITHUB_STEP_SUMMARY", "").strip()
    return Path(summary) if summary else None


def append_step_summary(text: str) -> bool:
    target = step_summary_path()
    if target is None:
        return False
    target.parent.mkdir(parents=True, exist_ok=True)
    _append_file_command(target, text)
    return True
