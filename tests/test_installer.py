from __future__ import annotations

import io
import tempfile
import unittest
from pathlib import Path

from ils import config
from ils.installer import install


class InstallerTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.home = Path(self._tmp.name)
        self.config_dir = self.home / ".config" / "ils"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_writes_defaults_and_appends_shell_function_once(self) -> None:
        bashrc = self.home / ".bashrc"
        bashrc.write_text("export FOO=1\n", encoding="utf-8")

        self.assertEqual(install(self.home, self.config_dir, out=io.StringIO()), 0)
        self.assertEqual(install(self.home, self.config_dir, out=io.StringIO()), 0)

        for name in (
            config.KEYBINDINGS_FILENAME,
            config.COLORS_FILENAME,
            config.SETTINGS_FILENAME,
            config.PREVIEW_RATIO_FILENAME,
        ):
            self.assertTrue((self.config_dir / name).exists(), name)
        self.assertEqual((self.config_dir / config.PREVIEW_RATIO_FILENAME).read_text(encoding="utf-8"), "0.5")

        text = bashrc.read_text(encoding="utf-8")
        self.assertTrue(text.startswith("export FOO=1\n"))
        self.assertEqual(text.count("ils() {"), 1)
        self.assertIn("# Interactive ls (ils)", text)

        loaded = config.load_app_config(self.config_dir)
        self.assertEqual(dict(loaded.keybindings), dict(config.DEFAULT_KEYBINDINGS))

    def test_zshrc_is_preferred_over_bashrc(self) -> None:
        (self.home / ".zshrc").write_text("", encoding="utf-8")
        (self.home / ".bashrc").write_text("", encoding="utf-8")

        install(self.home, self.config_dir, out=io.StringIO())

        self.assertIn("ils-bin", (self.home / ".zshrc").read_text(encoding="utf-8"))
        self.assertEqual((self.home / ".bashrc").read_text(encoding="utf-8"), "")

    def test_existing_config_files_are_kept(self) -> None:
        self.config_dir.mkdir(parents=True)
        (self.config_dir / config.SETTINGS_FILENAME).write_text("exit_after_edit = true\n", encoding="utf-8")
        (self.config_dir / config.PREVIEW_RATIO_FILENAME).write_text("0.7", encoding="utf-8")

        install(self.home, self.config_dir, out=io.StringIO())

        self.assertTrue(config.load_settings(self.config_dir).exit_after_edit)
        self.assertEqual(config.load_preview_ratio(self.config_dir), 0.7)

    def test_without_shell_rc_prints_function_for_manual_setup(self) -> None:
        out = io.StringIO()

        self.assertEqual(install(self.home, self.config_dir, out=out), 0)

        self.assertIn("Could not detect shell config file", out.getvalue())
        self.assertIn('ils-bin "$@"', out.getvalue())


if __name__ == "__main__":
    unittest.main()
