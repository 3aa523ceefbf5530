"""Tests for Firefox profile selection."""

import os

from appdata_backup.sources.firefox_profiles import (
    find_profiles,
    new_profile_name,
    select_backup_profile,
    select_restore_profile,
)
from appdata_backup.sync.decisions import Decisions


class PickProfile(Decisions):
    """Decision provider that always answers with a fixed index."""

    def __init__(self, index):
        self.index = index
        self.asked = []

    def choose_profile(self, candidates):
        self.asked.append(list(candidates))
        return self.index


def make_profiles(profiles_dir, *names):
    for name in names:
        (profiles_dir / name).mkdir(parents=True)


class TestBackupSelection:
    """Test choosing the profile to back up."""

    def test_prefers_default_release(self, tmp_path):
        make_profiles(tmp_path, "xyz.default", "abc.default-release")
        assert select_backup_profile(tmp_path).name == "abc.default-release"

    def test_falls_back_to_default(self, tmp_path):
        make_profiles(tmp_path, "xyz.default")
        assert select_backup_profile(tmp_path).name == "xyz.default"

    def test_falls_back_to_most_recent(self, tmp_path):
        make_profiles(tmp_path, "old.work", "new.play")
        os.utime(tmp_path / "old.work", (1_000_000, 1_000_000))
        os.utime(tmp_path / "new.play", (2_000_000, 2_000_000))

        assert select_backup_profile(tmp_path).name == "new.play"

    def test_no_profiles(self, tmp_path):
        assert select_backup_profile(tmp_path / "missing") is None
        assert select_backup_profile(tmp_path) is None

    def test_ignores_files(self, tmp_path):
        (tmp_path / "profiles.ini.default").write_text("not a profile")
        assert find_profiles(tmp_path) == []


class TestRestoreSelection:
    """Test choosing or creating the profile to restore into."""

    def test_prefers_default_release(self, tmp_path):
        make_profiles(tmp_path, "abc.default-release", "xyz.default")
        assert select_restore_profile(tmp_path).name == "abc.default-release"

    def test_falls_back_to_default(self, tmp_path):
        make_profiles(tmp_path, "xyz.default")
        assert select_restore_profile(tmp_path).name == "xyz.default"

    def test_creates_exactly_one_new_profile(self, tmp_path):
        profiles_dir = tmp_path / "Profiles"

        profile = select_restore_profile(profiles_dir)

        assert profile.is_dir()
        assert profile.parent == profiles_dir
        assert profile.name.endswith(".default-release")
        assert find_profiles(profiles_dir) == [profile]

    def test_new_profile_ignores_other_profiles_without_interaction(self, tmp_path):
        make_profiles(tmp_path, "work.custom")

        profile = select_restore_profile(tmp_path, decisions=PickProfile(0), interactive=False)

        assert profile.name != "work.custom"
        assert len(find_profiles(tmp_path)) == 2

    def test_interactive_choice(self, tmp_path):
        make_profiles(tmp_path, "a.custom", "b.custom")
        decisions = PickProfile(1)

        profile = select_restore_profile(tmp_path, decisions=decisions, interactive=True)

        assert profile.name == "b.custom"
        assert [p.name for p in decisions.asked[0]] == ["a.custom", "b.custom"]
        assert len(find_profiles(tmp_path)) == 2

    def test_interactive_decline_creates_profile(self, tmp_path):
        make_profiles(tmp_path, "a.custom")

        profile = select_restore_profile(tmp_path, decisions=PickProfile(None), interactive=True)

        assert profile.name.endswith(".default-release")
        assert profile.is_dir()

    def test_interactive_not_asked_when_default_exists(self, tmp_path):
        make_profiles(tmp_path, "a.custom", "z.default")
        decisions = PickProfile(0)

        assert select_restore_profile(tmp_path, decisions=decisions, interactive=True).name == "z.default"
        assert decisions.asked == []

    def test_simulate_does_not_create(self, tmp_path):
        profile = select_restore_profile(tmp_path / "Profiles", simulate=True)

        assert not profile.exists()
        assert not (tmp_path / "Profiles").exists()

    def test_new_name_is_unused(self, tmp_path, monkeypatch):
        taken = "aaaaaaaa.default-release"
        (tmp_path / taken).mkdir()
        answers = iter([list("aaaaaaaa"), list("bbbbbbbb")])
        monkeypatch.setattr("appdata_backup.sources.firefox_profiles.random.choices",
                            lambda alphabet, k: next(answers))

        assert new_profile_name(tmp_path) == "bbbbbbbb.default-release"
