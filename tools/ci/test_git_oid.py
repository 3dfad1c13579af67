#!/usr/bin/env python3
"""Unit tests for archivista GitOID extraction and reporting."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from git_oid import extract_git_oids, handle_git_oids, render_summary_row

OID_A = "a" * 64
OID_B = "0123456789abcdef" * 4


class GitOidTests(unittest.TestCase):
    def test_extracts_only_marked_lines(self) -> None:
        output = "\n".join(
            [
                f"Stored in archivista as {OID_A}",
                f"unrelated {OID_B}",
                f'level=info msg="Stored in archivista as {OID_B}"',
                "Stored in archivista as tooshort",
            ]
        )
        self.assertEqual(extract_git_oids(output), [OID_A, OID_B])

    def test_render_summary_row(self) -> None:
        self.assertEqual(
            render_summary_row(OID_A, "https://archivista.example/", "build", ["git", "github"]),
            f"| build | git, github | [{OID_A}](https://archivista.example/download/{OID_A}) |\n",
        )

    def test_handle_git_oids_sets_outputs_and_summary(self) -> None:
        with tempfile.TemporaryDirectory(prefix="witness-git-oid-") as tmp:
            output_file = Path(tmp) / "output"
            summary_file = Path(tmp) / "summary.md"
            env = {"GITHUB_OUTPUT": str(output_file), "GITHUB_STEP_SUMMARY": str(summary_file)}
            with patch.dict(os.environ, env):
                oids = handle_git_oids(
                    f"Stored in archivista as {OID_A}\n", "https://archivista.example", "build", ["git"]
                )
                handle_git_oids(
                    f"Stored in archivista as {OID_B}\n", "https://archivista.example", "build", ["git"]
                )
            self.assertEqual(oids, [OID_A])
            self.assertEqual(
                output_file.read_text(encoding="utf-8"),
                f"git_oid={OID_A}\ngit_oid={OID_B}\n",
            )
            summary = summary_file.read_text(encoding="utf-8")
            self.assertEqual(summary.count("## Attestations Created"), 1)
            self.assertIn(f"[{OID_B}](https://archivista.example/download/{OID_B})", summary)

    def test_no_oids_writes_nothing(self) -> None:
        with patch("git_oid.actions_core.set_output") as set_output:
            self.assertEqual(handle_git_oids("nothing stored\n", "", "build", []), [])
        set_output.assert_not_called()


if __name__ == "__main__":
    unittest.main()
