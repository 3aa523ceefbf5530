"""Tests for the directory mirror primitive."""

import subprocess

import pytest

from appdata_backup.config.settings import MirrorBackend, MirrorOptions
from appdata_backup.sync.mirror import (
    MIRROR_FAILURE_THRESHOLD,
    MirrorError,
    MirrorStats,
    PythonMirror,
    RobocopyMirror,
    create_mirror,
    is_failure,
)


class FakeRunner:
    """Stands in for subprocess.run."""

    def __init__(self, returncode=0, stdout="", error=None):
        self.returncode = returncode
        self.stdout = stdout
        self.error = error
        self.calls = []

    def __call__(self, command, **kwargs):
        self.calls.append(command)
        if self.error:
            raise self.error
        return subprocess.CompletedProcess(command, self.returncode, stdout=self.stdout, stderr="")


class TestExitCodes:
    """Test the exit code threshold policy."""

    @pytest.mark.parametrize("code", range(0, MIRROR_FAILURE_THRESHOLD))
    def test_success_range(self, code):
        assert not is_failure(code)

    @pytest.mark.parametrize("code", [8, 9, 15, 16])
    def test_failure_range(self, code):
        assert is_failure(code)

    def test_warnings(self):
        assert not MirrorStats(exit_code=3).warnings
        assert MirrorStats(exit_code=4).warnings


class TestPythonMirror:
    """Test the in-process mirror."""

    def test_mirror_tree(self, tmp_path, write_file, tree_snapshot):
        source = tmp_path / "src"
        destination = tmp_path / "dst"
        write_file(source / "Links" / "site.url", "[InternetShortcut]")
        write_file(source / "top.url", "top")
        write_file(destination / "stale.url", "old")
        write_file(destination / "Old Folder" / "deep.url", "old")
        write_file(destination / "top.url", "something longer than before")

        stats = PythonMirror().mirror(source, destination)

        assert tree_snapshot(destination) == tree_snapshot(source)
        assert not (destination / "Old Folder").exists()
        assert stats.files_copied == 2
        assert stats.extras_removed == 3
        assert stats.exit_code == 3

    def test_unchanged_tree_copies_nothing(self, tmp_path, write_file):
        source = tmp_path / "src"
        write_file(source / "a.url", "a")
        mirror = PythonMirror()
        mirror.mirror(source, tmp_path / "dst")

        stats = mirror.mirror(source, tmp_path / "dst")

        assert stats.exit_code == 0
        assert stats.files_copied == 0

    def test_empty_directories_are_mirrored(self, tmp_path):
        source = tmp_path / "src"
        (source / "Empty").mkdir(parents=True)

        PythonMirror().mirror(source, tmp_path / "dst")

        assert (tmp_path / "dst" / "Empty").is_dir()

    def test_pattern_only_touches_matching_files(self, tmp_path, write_file):
        source = tmp_path / "src"
        destination = tmp_path / "dst"
        write_file(source / "rules.rwz", "rules")
        write_file(source / "ignored.txt", "x")
        write_file(source / "sub" / "nested.rwz", "nested")
        write_file(destination / "old.rwz", "old")
        write_file(destination / "mailbox.ost", "keep me")

        stats = PythonMirror().mirror(source, destination, pattern="*.rwz")

        assert sorted(p.name for p in destination.iterdir()) == ["mailbox.ost", "rules.rwz"]
        assert stats.files_copied == 1
        assert stats.extras_removed == 1

    def test_directory_replaced_by_file(self, tmp_path, write_file):
        source = tmp_path / "src"
        destination = tmp_path / "dst"
        write_file(source / "entry", "now a file")
        write_file(destination / "entry" / "child.url", "was a folder")

        PythonMirror().mirror(source, destination)

        assert (destination / "entry").read_text() == "now a file"

    def test_unwritable_destination(self, tmp_path, write_file):
        source = tmp_path / "src"
        write_file(source / "a.url")
        blocker = write_file(tmp_path / "blocker", "file")

        with pytest.raises(MirrorError):
            PythonMirror().mirror(source, blocker / "dst")


class TestRobocopyMirror:
    """Test the robocopy command and exit code handling."""

    def test_mirror_command(self, tmp_path):
        runner = FakeRunner(returncode=1)
        stats = RobocopyMirror(retries=3, wait_seconds=1, runner=runner).mirror(tmp_path / "a", tmp_path / "b")

        command = runner.calls[0]
        assert command[:4] == ["robocopy", str(tmp_path / "a"), str(tmp_path / "b"), "/MIR"]
        assert "/R:3" in command
        assert "/W:1" in command
        assert stats.exit_code == 1

    def test_pattern_command(self, tmp_path):
        mirror = RobocopyMirror(runner=FakeRunner())
        command = mirror.build_command(tmp_path / "a", tmp_path / "b", "*.oft")

        assert command[3:5] == ["*.oft", "/PURGE"]
        assert "/MIR" not in command

    def test_failure_exit_code(self, tmp_path):
        runner = FakeRunner(returncode=8, stdout="ERROR 32 (0x00000020) Copying File\nThe process cannot access the file")

        with pytest.raises(MirrorError) as excinfo:
            RobocopyMirror(runner=runner).mirror(tmp_path / "a", tmp_path / "b")

        assert excinfo.value.exit_code == 8
        assert "cannot access the file" in str(excinfo.value)

    def test_warning_exit_code_succeeds(self, tmp_path):
        stats = RobocopyMirror(runner=FakeRunner(returncode=5)).mirror(tmp_path / "a", tmp_path / "b")

        assert stats.warnings

    def test_robocopy_not_installed(self, tmp_path):
        runner = FakeRunner(error=FileNotFoundError("robocopy"))

        with pytest.raises(MirrorError, match="not found"):
            RobocopyMirror(runner=runner).mirror(tmp_path / "a", tmp_path / "b")


class TestCreateMirror:
    """Test backend selection."""

    def test_python_backend(self):
        assert isinstance(create_mirror(MirrorOptions(backend=MirrorBackend.PYTHON)), PythonMirror)

    def test_robocopy_backend(self):
        mirror = create_mirror(MirrorOptions(backend=MirrorBackend.ROBOCOPY, retries=1, wait_seconds=0))

        assert isinstance(mirror, RobocopyMirror)
        assert mirror.retries == 1

    def test_auto_backend(self, monkeypatch):
        monkeypatch.setattr("appdata_backup.sync.mirror.shutil.which", lambda name: None)
        assert isinstance(create_mirror(), PythonMirror)

        monkeypatch.setattr("appdata_backup.sync.mirror.shutil.which", lambda name: "C:/Windows/robocopy.exe")
        assert isinstance(create_mirror(), RobocopyMirror)
