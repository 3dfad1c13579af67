#!/usr/bin/env python3
"""Unit tests for YAML boolean input helpers."""

from __future__ import annotations

import unittest

from yaml_boolean import (
    is_truthy_input,
    is_valid_yaml_boolean,
    parse_yaml_boolean,
    validate_boolean_input,
)


class YamlBooleanTests(unittest.TestCase):
    def test_core_schema_spellings(self) -> None:
        for value in ("true", "True", "TRUE", "y", "Yes", "ON", "false", "N", "no", "Off"):
            self.assertTrue(is_valid_yaml_boolean(value), value)
        for value in ("tRUE", "1", "0", "", "enabled"):
            self.assertFalse(is_valid_yaml_boolean(value), value)
        self.assertFalse(is_valid_yaml_boolean(True))

    def test_parse_yaml_boolean(self) -> None:
        self.assertTrue(parse_yaml_boolean(" yes "))
        self.assertFalse(parse_yaml_boolean("OFF"))
        self.assertIsNone(parse_yaml_boolean(" yes ", trim=False))
        self.assertIsNone(parse_yaml_boolean("nope"))

    def test_truthy_input_is_case_insensitive_true_yes_on(self) -> None:
        for value in ("true", "tRuE", "YES", "on"):
            self.assertTrue(is_truthy_input(value), value)
        for value in ("y", "1", "false", "", None):
            self.assertFalse(is_truthy_input(value), value)

    def test_validate_boolean_input(self) -> None:
        self.assertEqual(validate_boolean_input(True), "true")
        self.assertEqual(validate_boolean_input(" On "), "On")
        self.assertIsNone(validate_boolean_input("maybe"))
        self.assertIsNone(validate_boolean_input(""))

    def test_validate_boolean_input_required(self) -> None:
        with self.assertRaisesRegex(ValueError, "Required boolean input is empty"):
            validate_boolean_input(None, required=True)
        with self.assertRaisesRegex(ValueError, "YAML 1.2 'Core Schema'"):
            validate_boolean_input("maybe", required=True)


if __name__ == "__main__":
    unittest.main()
