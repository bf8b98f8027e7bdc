"""
Tests for configuration management.
"""

import os
import tempfile
import unittest
from pathlib import Path

from outline_sync.config import ConfigManager


class TestConfigManager(unittest.TestCase):
    """Test configuration management functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = Path(self.temp_dir) / "test_config.yaml"

    def tearDown(self):
        """Clean up test fixtures."""
        if self.config_path.exists():
            self.config_path.unlink()
        os.rmdir(self.temp_dir)

    def test_config_creation_with_defaults(self):
        """Test config manager falls back to defaults when file missing."""
        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.workspace, "default")
        self.assertEqual(config.default_view_type, "bullet")
        self.assertEqual(config.store_filename, "outline_sync.db")
        self.assertEqual(config.log_filename, "outline_sync.log")

    def test_config_loading_from_file(self):
        """Test loading configuration from YAML file."""
        test_config = """
sync:
  workspace: "my-graph"
  default_view_type: "numbered"

store:
  filename: "test.db"
"""
        with open(self.config_path, 'w') as f:
            f.write(test_config)

        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.workspace, "my-graph")
        self.assertEqual(config.default_view_type, "numbered")
        self.assertEqual(config.store_filename, "test.db")
        # Missing keys fall back to property defaults
        self.assertEqual(config.log_filename, "outline_sync.log")

    def test_dot_notation_access(self):
        """Test accessing config values with dot notation."""
        config = ConfigManager(str(self.config_path))

        self.assertEqual(config.get("sync.workspace"), "default")
        self.assertEqual(config.get("logging.level"), "INFO")
        self.assertEqual(config.get("nonexistent.key", "default"), "default")
        self.assertEqual(config.get_section("store"), {"filename": "outline_sync.db"})

    def test_partial_file_keeps_other_defaults(self):
        with open(self.config_path, 'w') as f:
            f.write("sync:\n  workspace: 'notes'\nlogging:\n  level: DEBUG")

        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.workspace, "notes")
        self.assertEqual(config.default_view_type, "bullet")
        self.assertEqual(config.get("logging.level"), "DEBUG")
        self.assertIn("%(message)s", config.get("logging.format"))

    def test_unknown_view_type_falls_back(self):
        with open(self.config_path, 'w') as f:
            f.write("sync:\n  default_view_type: 'kanban'")

        with self.assertLogs(level="ERROR"):
            config = ConfigManager(str(self.config_path))
        self.assertEqual(config.default_view_type, "bullet")

    def test_workspace_cannot_contain_key_separator(self):
        with open(self.config_path, 'w') as f:
            f.write("sync:\n  workspace: 'a/b'")

        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.workspace, "default")

    def test_non_mapping_file_falls_back_to_defaults(self):
        with open(self.config_path, 'w') as f:
            f.write("- just\n- a list\n")

        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.store_filename, "outline_sync.db")

    def test_invalid_yaml_falls_back_to_defaults(self):
        with open(self.config_path, 'w') as f:
            f.write("sync: [unclosed")

        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.workspace, "default")

    def test_config_reload(self):
        """Test configuration reloading."""
        with open(self.config_path, 'w') as f:
            f.write("sync:\n  workspace: 'one'")

        config = ConfigManager(str(self.config_path))
        self.assertEqual(config.workspace, "one")

        with open(self.config_path, 'w') as f:
            f.write("sync:\n  workspace: 'two'")

        config.reload()
        self.assertEqual(config.workspace, "two")


if __name__ == '__main__':
    unittest.main()
