import tempfile
import unittest
from pathlib import Path

from coinscope.infra.config import AppConfig, load_config, parse_config


class ConfigTest(unittest.TestCase):
    def test_missing_file_falls_back_to_defaults(self) -> None:
        with self.assertLogs("coinscope.infra.config", level="WARNING"):
            config = load_config("/nonexistent/coinscope.yaml")

        self.assertEqual(AppConfig(), config)
        self.assertEqual(["bitcoin", "ethereum"], config.view.favourites)
        self.assertEqual(0, config.polling.retry_policy().max_retries)

    def test_yaml_sections_override_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "settings.yaml"
            path.write_text(
                "api:\n"
                "  coincap_ws_url: wss://example.test/prices\n"
                "polling:\n"
                "  history_seconds: 5\n"
                "  max_retries: 3\n"
                "view:\n"
                "  favourites: [solana]\n"
                "  history_interval: 1 hour\n"
                "logging:\n"
                "  file: null\n",
                encoding="utf-8",
            )
            config = load_config(path)

        self.assertEqual("wss://example.test/prices", config.api.endpoints().coincap_ws_url)
        self.assertEqual("https://api.coincap.io/v2", config.api.coincap_rest_url)
        self.assertEqual(5.0, config.polling.history_seconds)
        self.assertEqual(3, config.polling.retry_policy().max_retries)
        self.assertEqual(["solana"], config.view.favourites)
        self.assertEqual("1 hour", config.view.history_interval)
        self.assertIsNone(config.logging.file)

    def test_section_must_be_mapping(self) -> None:
        with self.assertRaises(ValueError):
            parse_config({"polling": [1, 2]})


if __name__ == "__main__":
    unittest.main()
