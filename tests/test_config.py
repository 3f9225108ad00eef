from __future__ import annotations

import os
import unittest
from pathlib import Path
from unittest.mock import patch

from pam_u2f_mapping.config import get_editor_config


class EditorConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = get_editor_config()
        self.assertEqual(config.mapping_file.parts[-3:], (".config", "Yubico", "u2f_keys"))
        self.assertEqual(config.log_level, "WARNING")

    def test_environment_overrides(self) -> None:
        env = {"PAM_U2F_MAPPING_FILE": "/etc/u2f_mappings", "PAM_U2F_LOG_LEVEL": "debug"}
        with patch.dict(os.environ, env, clear=True):
            config = get_editor_config()
        self.assertEqual(config.mapping_file, Path("/etc/u2f_mappings"))
        self.assertEqual(config.log_level, "DEBUG")


if __name__ == "__main__":
    unittest.main()
