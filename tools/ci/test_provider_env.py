#!/usr/bin/env python3
"""Unit tests for GitHub input environment mapping."""

from __future__ import annotations

import unittest

from provider_env import (
    get_input_value,
    input_env_key,
    input_name_from_key,
    inputs_from_env,
    set_input_value,
    unwrap_forwarded_inputs,
)


class ProviderEnvTests(unittest.TestCase):
    def test_input_env_key_uppercases_and_keeps_hyphens(self) -> None:
        self.assertEqual(input_env_key("who-to-greet"), "INPUT_WHO-TO-GREET")
        self.assertEqual(input_env_key("my input"), "INPUT_MY_INPUT")

    def test_get_input_value_trims_by_default(self) -> None:
        env = {"INPUT_STEP": "  build \n"}
        self.assertEqual(get_input_value(env, "step"), "build")
        self.assertEqual(get_input_value(env, "step", trim=False), "  build \n")
        self.assertIsNone(get_input_value(env, "missing"))

    def test_set_input_value_stringifies(self) -> None:
        env = {}
        set_input_value(env, "retries", 3)
        set_input_value(env, "body", " keep ", trim=False)
        self.assertEqual(env, {"INPUT_RETRIES": "3", "INPUT_BODY": " keep "})

    def test_input_name_from_key(self) -> None:
        self.assertEqual(input_name_from_key("INPUT_ACTION-REF"), "action-ref")
        self.assertIsNone(input_name_from_key("GITHUB_WORKSPACE"))

    def test_inputs_from_env_maps_missing_to_empty(self) -> None:
        env = {"INPUT_STEP": "build", "INPUT_ATTESTATIONS": " git github "}
        self.assertEqual(
            inputs_from_env(env, ("step", "attestations", "outfile")),
            {"step": "build", "attestations": "git github", "outfile": ""},
        )

    def test_unwrap_forwarded_inputs_renames_in_place(self) -> None:
        env = {
            "INPUT_INPUT-WHO-TO-GREET": "octocat",
            "INPUT_STEP": "build",
            "INPUT_INPUT-": "dropped",
            "PATH": "/usr/bin",
        }
        renamed = unwrap_forwarded_inputs(env)
        self.assertEqual(renamed, {"input-who-to-greet": "who-to-greet"})
        self.assertEqual(env["INPUT_WHO-TO-GREET"], "octocat")
        self.assertNotIn("INPUT_INPUT-WHO-TO-GREET", env)
        self.assertEqual(env["INPUT_STEP"], "build")
        self.assertEqual(env["INPUT_INPUT-"], "dropped")


if __name__ == "__main__":
    unittest.main()
