#!/usr/bin/env python3
"""Unit tests for action.yml defaults and required-input checks."""

from __future__ import annotations

import unittest
from unittest.mock import patch

from input_defaults import RequiredInputError, apply_defaults_from_action_yml, check_required_input


class ApplyDefaultsTests(unittest.TestCase):
    def test_applies_string_boolean_and_number_defaults(self) -> None:
        env = {}
        inputs = {
            "greeting": {"default": "hello"},
            "debug": {"default": False},
            "retries": {"default": 3},
        }
        with patch("input_defaults.actions_core.warning") as warning:
            applied = apply_defaults_from_action_yml(env, inputs)
        self.assertEqual(applied, ["greeting", "debug", "retries"])
        self.assertEqual(env["INPUT_GREETING"], "hello")
        self.assertEqual(env["INPUT_DEBUG"], "false")
        self.assertEqual(env["INPUT_RETRIES"], "3")
        warning.assert_not_called()

    def test_existing_and_ignored_inputs_are_untouched(self) -> None:
        env = {"INPUT_GREETING": "hi"}
        inputs = {"greeting": {"default": "hello"}, "step": {"default": "x"}}
        applied = apply_defaults_from_action_yml(env, inputs, {"step"})
        self.assertEqual(applied, [])
        self.assertEqual(env, {"INPUT_GREETING": "hi"})

    def test_hyphenated_names_keep_hyphens(self) -> None:
        env = {}
        apply_defaults_from_action_yml(env, {"who-to-greet": {"default": "World"}})
        self.assertEqual(env, {"INPUT_WHO-TO-GREET": "World"})

    def test_missing_required_without_default_warns(self) -> None:
        env = {}
        with patch("input_defaults.actions_core.warning") as warning:
            applied = apply_defaults_from_action_yml(env, {"token": {"required": True}})
        self.assertEqual(applied, [])
        warning.assert_called_once()
        self.assertIn("token", warning.call_args[0][0])

    def test_absent_declared_inputs_are_a_no_op(self) -> None:
        env = {"A": "1"}
        with patch("input_defaults.actions_core.warning") as warning:
            self.assertEqual(apply_defaults_from_action_yml(env, None), [])
        self.assertEqual(env, {"A": "1"})
        warning.assert_not_called()


class CheckRequiredInputTests(unittest.TestCase):
    def test_present_input(self) -> None:
        self.assertTrue(check_required_input({"INPUT_TOKEN": "x"}, "token"))

    def test_missing_input_warns_and_returns_false(self) -> None:
        with patch("input_defaults.actions_core.warning") as warning:
            self.assertFalse(check_required_input({}, "token"))
        warning.assert_called_once_with("Required input 'token' was not provided")

    def test_missing_input_raises_when_requested(self) -> None:
        with self.assertRaises(RequiredInputError) as ctx:
            check_required_input({}, "token", error_on_missing=True)
        self.assertIn("Required input", str(ctx.exception))
        self.assertEqual(ctx.exception.input_name, "token")


if __name__ == "__main__":
    unittest.main()
