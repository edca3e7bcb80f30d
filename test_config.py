#!/usr/bin/env python3
"""
Environment override parsing for the entry points.
"""

import logging
import os
import unittest
from unittest import mock

import config


class EnvOverrideTests(unittest.TestCase):
    def test_unset_and_blank_fall_back(self) -> None:
        with mock.patch.dict(os.environ, {config.ENV_CARS: "  "}, clear=False):
            os.environ.pop(config.ENV_SEED, None)
            self.assertEqual(config.env_int(config.ENV_CARS, 160), 160)
            self.assertIsNone(config.env_int(config.ENV_SEED, None))

    def test_valid_values_are_parsed(self) -> None:
        env = {config.ENV_CARS: "42", config.ENV_TICK_HZ: "12.5"}
        with mock.patch.dict(os.environ, env):
            self.assertEqual(config.env_int(config.ENV_CARS, 160), 42)
            self.assertEqual(config.env_float(config.ENV_TICK_HZ, 60.0), 12.5)

    def test_garbage_is_ignored_with_a_warning(self) -> None:
        with mock.patch.dict(os.environ, {config.ENV_CARS: "lots"}):
            with self.assertLogs("config", level="WARNING"):
                self.assertEqual(config.env_int(config.ENV_CARS, 160), 160)

    def test_log_level(self) -> None:
        with mock.patch.dict(os.environ, {config.ENV_LOG_LEVEL: "debug"}):
            self.assertEqual(config.env_log_level(), logging.DEBUG)
        with mock.patch.dict(os.environ, {config.ENV_LOG_LEVEL: "chatty"}):
            self.assertEqual(config.env_log_level(), logging.INFO)


if __name__ == "__main__":
    unittest.main()
