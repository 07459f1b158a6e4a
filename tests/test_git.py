import shutil
import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from nethunter_builder.lib import git
from nethunter_builder.lib.command import CmdResult, CommandError


class EnsureRepoTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tempdir = tempfile.TemporaryDirectory()
        self.workdir = Path(self._tempdir.name)

    def tearDown(self) -> None:
        self._tempdir.cleanup()

    def test_missing_directory_is_cloned_shallow(self) -> None:
        dest = self.workdir / "AnyKernel3"
        with mock.patch("nethunter_builder.lib.git.run_cmd") as run_mock:
            cloned = git.ensure_repo("https://example.com/ak3", dest, shallow=True)

        self.assertTrue(cloned)
        run_mock.assert_called_once_with(["git", "clone", "--depth=1", "https://example.com/ak3", str(dest)])

    def test_full_clone_omits_depth(self) -> None:
        dest = self.workdir / "installer"
        with mock.patch("nethunter_builder.lib.git.run_cmd") as run_mock:
            git.ensure_repo("https://example.com/installer.git", dest, shallow=False)

        run_mock.assert_called_once_with(["git", "clone", "https://example.com/installer.git", str(dest)])

    def test_existing_directory_is_pulled_not_cloned(self) -> None:
        dest = self.workdir / "kernel_flame"
        dest.mkdir()
        ok = CmdResult(argv=["git", "pull"], returncode=0, stdout="", stderr="")
        with mock.patch("nethunter_builder.lib.git.run_cmd", return_value=ok) as run_mock:
            cloned = git.ensure_repo("https://example.com/kernel", dest)

        self.assertFalse(cloned)
        run_mock.assert_called_once_with(["git", "pull"], cwd=dest, check=False)

    def test_pull_failure_is_tolerated(self) -> None:
        dest = self.workdir / "kernel_flame"
        dest.mkdir()
        failed = CmdResult(argv=["git", "pull"], returncode=1, stdout="", stderr="offline")
        with mock.patch("nethunter_builder.lib.git.run_cmd", return_value=failed):
            with self.assertLogs("nethunter_builder.lib.git", level="WARNING") as logs:
                cloned = git.ensure_repo("https://example.com/kernel", dest)

        self.assertFalse(cloned)
        self.assertIn("git pull failed", "\n".join(logs.output))

    def test_clone_failure_is_fatal(self) -> None:
        failed = subprocess.CompletedProcess(["git"], 128, "", "repository not found")
        with mock.patch("nethunter_builder.lib.command.subprocess.run", return_value=failed):
            with self.assertRaises(CommandError) as ctx:
                git.ensure_repo("https://example.com/missing", self.workdir / "missing")

        self.assertEqual(128, ctx.exception.returncode)
        self.assertIn("repository not found", str(ctx.exception))

    def test_reset_clean_failures_are_tolerated(self) -> None:
        failed = CmdResult(argv=["git"], returncode=1, stdout="", stderr="")
        with mock.patch("nethunter_builder.lib.git.run_cmd", return_value=failed) as run_mock:
            with self.assertLogs("nethunter_builder.lib.git", level="WARNING"):
                git.reset_clean(self.workdir)

        self.assertEqual(
            [
                mock.call(["git", "checkout", "."], cwd=self.workdir, check=False),
                mock.call(["git", "clean", "-fd"], cwd=self.workdir, check=False),
            ],
            run_mock.mock_calls,
        )


@unittest.skipUnless(shutil.which("git"), "git not installed")
class EnsureRepoWithGitTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tempdir = tempfile.TemporaryDirectory()
        self.workdir = Path(self._tempdir.name)
        self.remote = self.workdir / "remote.git"
        self.source = self.workdir / "source"
        self.clone = self.workdir / "clone"
        self._create_remote_repository()

    def tearDown(self) -> None:
        self._tempdir.cleanup()

    def _git(self, *args: str, cwd: Path | None = None) -> None:
        subprocess.run(
            ["git", "-c", "user.email=tests@example.com", "-c", "user.name=Repo Tests", *args],
            cwd=cwd,
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )

    def _create_remote_repository(self) -> None:
        self._git("init", "--bare", str(self.remote))
        self._git("init", str(self.source))
        (self.source / "README.md").write_text("initial\n")
        self._git("add", "README.md", cwd=self.source)
        self._git("commit", "-m", "initial", cwd=self.source)
        self._git("push", str(self.remote), "HEAD:refs/heads/main", cwd=self.source)
        self._git("symbolic-ref", "HEAD", "refs/heads/main", cwd=self.remote)

    def test_second_fetch_keeps_existing_clone(self) -> None:
        url = self.remote.as_uri()

        self.assertTrue(git.ensure_repo(url, self.clone, shallow=True))
        marker = self.clone / "local-marker"
        marker.write_text("from first run\n")

        self.assertFalse(git.ensure_repo(url, self.clone, shallow=True))

        self.assertTrue((self.clone / ".git").is_dir())
        self.assertEqual("from first run\n", marker.read_text())
        self.assertEqual("initial\n", (self.clone / "README.md").read_text())


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
