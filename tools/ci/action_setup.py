#!/usr/bin/env python3
"""Locate wrapped actions: local path resolution and remote checkout."""

from __future__ import annotations

import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, Optional, Sequence, Tuple

import actions_core
from action_types import ACTION_METADATA_FILENAMES, ActionRunError

GITHUB_CLONE_BASE = "https://github.com"
DEFAULT_REMOTE_REF = "main"


def is_local_action_ref(action_ref: str) -> bool:
    return action_ref.startswith("./") or action_ref.startswith("../")


def is_docker_action_ref(action_ref: str) -> bool:
    return action_ref.startswith("docker://")


def parse_action_ref(action_ref: str) -> Tuple[str, str, str]:
    """Split `owner/repo@ref` into (owner, repo, ref)."""
    owner_repo, sep, ref = action_ref.partition("@")
    owner, _, repo = owner_repo.partition("/")
    if not sep or not owner or not repo or not ref:
        raise ActionRunError(
            "action_reference_invalid",
            f"invalid action reference: {action_ref}. Format should be owner/repo@ref",
        )
    return owner, repo, ref


def _has_action_metadata(directory: Path) -> bool:
    return any((directory / name).is_file() for name in ACTION_METADATA_FILENAMES)


def _is_within(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True


def resolve_local_action_path(
    action_ref: str,
    workspace: Path,
    parent_action_dir: Optional[Path] = None,
) -> Path:
    """Resolve `./x` relative to the parent action first, then the workspace root."""
    if "\\" in action_ref or "//" in action_ref:
        raise ActionRunError(
            "action_reference_invalid",
            f"invalid action reference path: {action_ref} contains unsafe path components",
        )
    workspace = workspace.resolve()
    candidates = []
    if parent_action_dir is not None:
        parent = parent_action_dir.resolve()
        from_parent = (parent / action_ref).resolve()
        if _is_within(from_parent, workspace) or _is_within(from_parent, parent):
            candidates.append(from_parent)
    relative = action_ref[2:] if action_ref.startswith("./") else action_ref
    from_workspace = (workspace / relative).resolve()
    if _is_within(from_workspace, workspace):
        candidates.append(from_workspace)
    elif not candidates:
        raise ActionRunError(
            "action_reference_invalid",
            f"action path would resolve outside the repository: {from_workspace}",
        )

    for candidate in candidates:
        if _has_action_metadata(candidate):
            return candidate
    checked = ", ".join(str(item) for item in candidates)
    raise ActionRunError(
        "action_metadata_missing",
        f"could not find action at {action_ref} (checked: {checked})",
    )


def _run_git(
    args: Sequence[str],
    *,
    cwd: Optional[Path] = None,
    run_process: Optional[Callable[..., subprocess.CompletedProcess[str]]] = None,
) -> None:
    runner = run_process or subprocess.run
    try:
        completed = runner(["git", *args], cwd=cwd, capture_output=True, text=True)
    except OSError as exc:
        raise ActionRunError("action_checkout_failed", f"git {args[0]} failed: {exc}") from exc
    if completed.returncode != 0:
        detail = (completed.stderr or completed.stdout or "").strip().splitlines()
        message = detail[-1] if detail else f"exit code {completed.returncode}"
        raise ActionRunError("action_checkout_failed", f"git {args[0]} failed: {message}")


def download_and_setup_action(
    action_ref: str,
    *,
    run_process: Optional[Callable[..., subprocess.CompletedProcess[str]]] = None,
) -> Path:
    """Clone `owner/repo` into a fresh temp dir and check out `ref`."""
    if "@" not in action_ref and "/" in action_ref:
        action_ref = f"{action_ref}@{DEFAULT_REMOTE_REF}"
    owner, repo, ref = parse_action_ref(action_ref)
    target = Path(tempfile.mkdtemp(prefix="action-"))
    actions_core.info(f"Cloning {owner}/{repo} into {target}")
    try:
        _run_git(["clone", f"{GITHUB_CLONE_BASE}/{owner}/{repo}.git", str(target)], run_process=run_process)
        _run_git(["checkout", ref], cwd=target, run_process=run_process)
    except ActionRunError:
        clean_up_directory(target)
        raise
    actions_core.info(f"Checked out ref: {ref}")
    return target


def clean_up_directory(directory: Path) -> None:
    try:
        shutil.rmtree(directory)
    except FileNotFoundError:
        return
    except OSError as exc:
        actions_core.warning(f"Failed to clean up action directory: {exc}")
