#!/usr/bin/env python3
"""Unit tests for action descriptor loading and kind detection."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

import yaml

from action_types import (
    ActionKind,
    ActionRunError,
    detect_action_type,
    get_action_yaml_path,
    load_action_descriptor,
)


class DetectActionTypeTests(unittest.TestCase):
    def test_node_runtimes_are_javascript(self) -> None:
        for using in ("node12", "node16", "node20", "node24"):
            self.assertIs(detect_action_type({"runs": {"using": using}}), ActionKind.JAVASCRIPT)

    def test_composite_and_docker(self) -> None:
        self.assertIs(detect_action_type({"runs": {"using": "composite"}}), ActionKind.COMPOSITE)
        self.assertIs(detect_action_type({"runs": {"using": "docker"}}), ActionKind.DOCKER)
        self.assertIs(detect_action_type({"runs": {"using": "container"}}), ActionKind.DOCKER)

    def test_unrecognized_or_missing_is_unknown(self) -> None:
        for descriptor in (
            {"runs": {"using": "weird"}},
            {"runs": {}},
            {"name": "no runs"},
            {"runs": "composite"},
            None,
        ):
            self.assertIs(detect_action_type(descriptor), ActionKind.UNKNOWN)


class ActionMetadataTests(unittest.TestCase):
    def test_prefers_action_yml_over_action_yaml(self) -> None:
        with tempfile.TemporaryDirectory(prefix="witness-action-types-") as tmp:
            root = Path(tmp)
            (root / "action.yaml").write_text("name: b\n", encoding="utf-8")
            self.assertEqual(get_action_yaml_path(root), root / "action.yaml")
            (root / "action.yml").write_text("name: a\n", encoding="utf-8")
            self.assertEqual(get_action_yaml_path(root), root / "action.yml")

    def test_missing_metadata_is_reported(self) -> None:
        with tempfile.TemporaryDirectory(prefix="witness-action-types-") as tmp:
            with self.assertRaises(ActionRunError) as ctx:
                get_action_yaml_path(Path(tmp))
            self.assertEqual(ctx.exception.failure_class, "action_metadata_missing")

    def test_load_descriptor_parses_yaml(self) -> None:
        with tempfile.TemporaryDirectory(prefix="witness-action-types-") as tmp:
            path = Path(tmp) / "action.yml"
            path.write_text(
                "name: demo\nruns:\n  using: composite\n  steps:\n    - run: echo hi\n      shell: bash\n",
                encoding="utf-8",
            )
            descriptor = load_action_descriptor(path)
            self.assertEqual(descriptor["name"], "demo")
            self.assertIs(detect_action_type(descriptor), ActionKind.COMPOSITE)

    def test_load_descriptor_propagates_parse_errors(self) -> None:
        with tempfile.TemporaryDirectory(prefix="witness-action-types-") as tmp:
            path = Path(tmp) / "action.yml"
            path.write_text("runs: [unterminated\n", encoding="utf-8")
            with self.assertRaises(yaml.YAMLError):
                load_action_descriptor(path)


if __name__ == "__main__":
    unittest.main()
