import logging
import unittest

from schema_check.config import ConfigError, Settings


class SettingsTest(unittest.TestCase):
    def test_defaults(self):
        settings = Settings.from_env({})
        self.assertEqual(settings, Settings(default_draft="draft4", format_check=False, log_level=logging.WARNING))

    def test_values_are_normalized(self):
        settings = Settings.from_env(
            {
                "SCHEMA_CHECK_DEFAULT_DRAFT": " Draft7 ",
                "SCHEMA_CHECK_FORMAT": "Yes",
                "SCHEMA_CHECK_LOG_LEVEL": "debug",
            }
        )
        self.assertEqual(settings.default_draft, "draft7")
        self.assertTrue(settings.format_check)
        self.assertEqual(settings.log_level, logging.DEBUG)

    def test_invalid_values(self):
        for env in (
            {"SCHEMA_CHECK_DEFAULT_DRAFT": "draft5"},
            {"SCHEMA_CHECK_FORMAT": "maybe"},
            {"SCHEMA_CHECK_LOG_LEVEL": "chatty"},
        ):
            with self.subTest(env=env):
                with self.assertRaises(ConfigError):
                    Settings.from_env(env)


if __name__ == "__main__":
    unittest.main()
