import sys
import unittest
from importlib import metadata
from pathlib import Path
from unittest.mock import patch

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))

from ghrelgrab_core.version import BuildInfo, resolve_version


class VersionTests(unittest.TestCase):
    def test_injected_version_wins(self):
        with patch("ghrelgrab_core.version.metadata.version", return_value="9.9.9"):
            self.assertEqual(resolve_version("v1.4.0"), "v1.4.0")

    def test_dev_falls_back_to_installed_metadata(self):
        with patch("ghrelgrab_core.version.metadata.version", return_value="0.3.1"):
            self.assertEqual(resolve_version("dev"), "0.3.1")
            self.assertEqual(resolve_version(""), "0.3.1")

    def test_dev_when_not_installed(self):
        with patch(
            "ghrelgrab_core.version.metadata.version",
            side_effect=metadata.PackageNotFoundError("ghrelgrab"),
        ):
            self.assertEqual(resolve_version("dev"), "dev")

    def test_build_info_is_immutable(self):
        info = BuildInfo(version="1.0.0")
        self.assertEqual(info.user_agent, "ghrelgrab/1.0.0")
        with self.assertRaises(AttributeError):
            info.version = "2.0.0"  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
