import tempfile
import unittest
from pathlib import Path

from app_config_schema import UIServerSettings
from server.config import ServerConfigurationError, UIServerConfig


class UIServerConfigTests(unittest.TestCase):
    def test_from_settings_without_index_file(self) -> None:
        config = UIServerConfig.from_settings(UIServerSettings())

        self.assertTrue(config.enabled)
        self.assertEqual("", config.index_file)
        self.assertEqual("/ws", config.websocket_path)

    def test_from_settings_keeps_existing_index_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            custom = Path(temp_dir) / "index.html"
            custom.write_text("<html></html>", encoding="utf-8")

            config = UIServerConfig.from_settings(UIServerSettings(index_file=str(custom)))
            self.assertEqual(str(custom), config.index_file)

    def test_from_settings_rejects_missing_index_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            settings = UIServerSettings(index_file=str(Path(temp_dir) / "missing.html"))
            with self.assertRaises(ServerConfigurationError):
                UIServerConfig.from_settings(settings)

    def test_rejects_out_of_range_port_and_blank_host(self) -> None:
        with self.assertRaises(ServerConfigurationError):
            UIServerConfig(port=0)
        with self.assertRaises(ServerConfigurationError):
            UIServerConfig(host="  ")


if __name__ == "__main__":
    unittest.main()
