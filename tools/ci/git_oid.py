#!/usr/bin/env python3
"""Extract archivista GitOIDs from witness output and report them."""

from __future__ import annotations

import re
from typing import List, Sequence

import actions_core

STORED_MARKER = "Stored in archivista as "
GIT_OID_RE = re.compile(r"[0-9a-fA-F]{64}")
SUMMARY_HEADER = (
    "\n## Attestations Created\n"
    "| Step | Attestors Run | Attestation GitOID\n"
    "| --- | --- | --- |\n"
)


def extract_git_oids(output: str) -> List[str]:
    oids: List[str] = []
    for line in output.splitlines():
        if STORED_MARKER not in line:
            continue
        match = GIT_OID_RE.search(line)
        if match:
            oids.append(match.group(0))
    return oids


def render_summary_row(git_oid: str, archivista_server: str, step: str, attestations: Sequence[str]) -> str:
    artifact_url = f"{archivista_server.rstrip('/')}/download/{git_oid}"
    return f"| {step} | {', '.join(attestations)} | [{git_oid}]({artifact_url}) |\n"


def write_summary_rows(rows: Sequence[str]) -> bool:
    target = actions_core.step_summary_path()
    if target is None:
        actions_core.info("GITHUB_STEP_SUMMARY not set, skipping step summary update")
        return False
    try:
        existing = target.read_text(encoding="utf-8") if target.exists() else ""
        text = "" if SUMMARY_HEADER.strip() in existing else SUMMARY_HEADER
        actions_core.append_step_summary(text + "".join(rows))
    except OSError as exc:
        actions_core.warning(f"Failed to update step summary: {exc}")
        return False
    return True


def handle_git_oids(
    output: str,
    archivista_server: str,
    step: str,
    attestations: Sequence[str],
) -> List[str]:
    oids = extract_git_oids(output)
    if not oids:
        return oids
    for oid in oids:
        actions_core.info(f"Extracted GitOID: {oid}")
        actions_core.set_output("git_oid", oid)
    write_summary_rows([render_summary_row(oid, archivista_server, step, attestations) for oid in oids])
    return oids
