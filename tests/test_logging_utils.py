import logging
import os
import tempfile
import unittest
from pathlib import Path

from nethunter_builder import logging_utils
from nethunter_builder.lib.command import logger as command_logger


class ConfigureLoggingTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tempdir = tempfile.TemporaryDirectory()
        self.dir = Path(self._tempdir.name).resolve()
        self.root = logging.getLogger()
        self._saved_level = self.root.level
        self._saved_cwd = os.getcwd()

    def tearDown(self) -> None:
        for h in list(self.root.handlers):
            if getattr(h, logging_utils._HANDLER_TAG, False):
                self.root.removeHandler(h)
                h.close()
        self.root.setLevel(self._saved_level)
        os.chdir(self._saved_cwd)
        self._tempdir.cleanup()

    def _owned(self):
        return [h for h in self.root.handlers if getattr(h, logging_utils._HANDLER_TAG, False)]

    def _console(self):
        return [h for h in self._owned() if not isinstance(h, logging.FileHandler)][0]

    def test_command_output_always_reaches_the_log_file(self) -> None:
        log_path = self.dir / "logs" / "build.log"

        actual = logging_utils.configure_logging(str(log_path))
        command_logger.debug("STDOUT make[1]: Nothing to be done")

        self.assertEqual(str(log_path), actual)
        self.assertIn("STDOUT make[1]: Nothing to be done", log_path.read_text(encoding="utf-8"))
        self.assertEqual(logging.INFO, self._console().level)

    def test_verbose_lowers_console_level(self) -> None:
        logging_utils.configure_logging(str(self.dir / "build.log"), verbose=True)

        self.assertEqual(logging.DEBUG, self._console().level)

    def test_second_call_reuses_handlers_and_updates_verbosity(self) -> None:
        first = logging_utils.configure_logging(str(self.dir / "build.log"))
        second = logging_utils.configure_logging(str(self.dir / "other.log"), verbose=True)

        self.assertEqual(first, second)
        self.assertEqual(2, len(self._owned()))
        self.assertEqual(logging.DEBUG, self._console().level)
        self.assertFalse((self.dir / "other.log").exists())

    def test_unwritable_path_falls_back_to_cwd(self) -> None:
        blocker = self.dir / "not_a_dir"
        blocker.write_text("", encoding="utf-8")
        os.chdir(self.dir)

        actual = logging_utils.configure_logging(str(blocker / "build.log"), also_console=False)

        self.assertEqual(str(self.dir / logging_utils.LOG_FILE_NAME), actual)
        self.assertTrue((self.dir / logging_utils.LOG_FILE_NAME).is_file())
        self.assertEqual(1, len(self._owned()))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
