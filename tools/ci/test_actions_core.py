#!/usr/bin/env python3
"""Unit tests for workflow-command helpers."""

from __future__ import annotations

import contextlib
import io
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import actions_core


class ActionsCoreTests(unittest.TestCase):
    def test_commands_escape_newlines_and_percent(self) -> None:
        buffer = io.StringIO()
        with contextlib.redirect_stdout(buffer):
            actions_core.warning("50% done\nnext")
        self.assertEqual(buffer.getvalue(), "::warning::50%25 done%0Anext\n")

    def test_get_input_reads_input_env(self) -> None:
        env = {"INPUT_ACTION-REF": " actions/hello@v1 "}
        self.assertEqual(actions_core.get_input("action-ref", env), "actions/hello@v1")
        self.assertEqual(actions_core.get_input("command", env), "")

    def test_set_output_appends_to_output_file(self) -> None:
        with tempfile.TemporaryDirectory(prefix="witness-core-") as tmp:
            output_file = Path(tmp) / "output"
            with patch.dict(os.environ, {"GITHUB_OUTPUT": str(output_file)}):
                actions_core.set_output("git_oid", "abc")
                actions_core.set_output("notes", "one\ntwo")
            lines = output_file.read_text(encoding="utf-8").splitlines()
        self.assertEqual(lines[0], "git_oid=abc")
        self.assertTrue(lines[1].startswith("notes<<ghadelimiter_"))
        self.assertEqual(lines[2:4], ["one", "two"])
        self.assertEqual(lines[4], lines[1].split("<<", 1)[1])

    def test_set_output_without_file_uses_command(self) -> None:
        buffer = io.StringIO()
        with patch.dict(os.environ, {"GITHUB_OUTPUT": ""}), contextlib.redirect_stdout(buffer):
            actions_core.set_output("git_oid", "abc")
        self.assertEqual(buffer.getvalue(), "::set-output name=git_oid::abc\n")

    def test_add_path_prepends_and_records(self) -> None:
        with tempfile.TemporaryDirectory(prefix="witness-core-") as tmp:
            path_file = Path(tmp) / "path"
            with patch.dict(os.environ, {"PATH": "/usr/bin", "GITHUB_PATH": str(path_file)}):
                actions_core.add_path("/opt/witness")
                self.assertEqual(os.environ["PATH"], f"/opt/witness{os.pathsep}/usr/bin")
            self.assertEqual(path_file.read_text(encoding="utf-8"), "/opt/witness\n")

    def test_step_summary_skipped_without_env(self) -> None:
        with patch.dict(os.environ, {"GITHUB_STEP_SUMMARY": ""}):
            self.assertFalse(actions_core.append_step_summary("text"))


if __name__ == "__main__":
    unittest.main()
