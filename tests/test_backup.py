# CCBundle Backup Tests
# Tests for snapshot creation, listing and restore

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from ccbundle.backup import (
    create_backup,
    format_backup_age,
    get_backup_root,
    list_backups,
    load_backup,
    parse_backup_name,
)
from ccbundle.sync.state import STATE_FILE


@pytest.fixture
def populated_target(target_dir: Path) -> Path:
    """Target tree with tracked and untracked content."""
    (target_dir / "commands").mkdir()
    (target_dir / "commands" / "commit.md").write_text("commit", encoding="utf-8")
    (target_dir / "scripts" / "tool" / "node_modules" / "dep").mkdir(parents=True)
    (target_dir / "scripts" / "tool" / "index.ts").write_text("code", encoding="utf-8")
    (target_dir / "scripts" / "tool" / "node_modules" / "dep" / "index.js").write_text("dep", encoding="utf-8")
    (target_dir / "settings.json").write_text("{}\n", encoding="utf-8")
    (target_dir / "projects").mkdir()
    (target_dir / "projects" / "history.jsonl").write_text("{}", encoding="utf-8")
    return target_dir


class TestParseBackupName:
    """Tests for parse_backup_name()."""

    def test_valid(self):
        assert parse_backup_name("2025-01-15-10-30-45") == datetime(2025, 1, 15, 10, 30, 45)

    def test_same_second_suffix(self):
        assert parse_backup_name("2025-01-15-10-30-45-2") == datetime(2025, 1, 15, 10, 30, 45)
        assert parse_backup_name("2025-01-15-10-30-45-12") == datetime(2025, 1, 15, 10, 30, 45)

    @pytest.mark.parametrize(
        "name",
        [
            "2025-01-15",
            "2025-1-15-10-30-45",
            "2025-13-15-10-30-45",
            "2025-01-15-10-30-45-old",
            "2025-01-15-10-30-45-1",
            "2025-01-15-10-30-45-02",
            "notes",
        ],
    )
    def test_invalid(self, name):
        assert parse_backup_name(name) is None


class TestCreateBackup:
    """Tests for create_backup()."""

    def test_copies_tracked_items(self, populated_target, temp_home):
        root = temp_home / "backups"
        path = create_backup(populated_target, root, now=datetime(2025, 1, 15, 10, 30, 45))

        assert path == root / "2025-01-15-10-30-45"
        assert (path / "commands" / "commit.md").read_text(encoding="utf-8") == "commit"
        assert (path / "settings.json").is_file()
        assert (path / "scripts" / "tool" / "node_modules" / "dep" / "index.js").is_file()
        assert not (path / "projects").exists()

    def test_missing_target(self, temp_home):
        assert create_backup(temp_home / "missing", temp_home / "backups") is None

    def test_empty_target(self, target_dir, temp_home):
        assert create_backup(target_dir, temp_home / "backups") is None

    def test_only_ds_store(self, target_dir, temp_home):
        (target_dir / ".DS_Store").write_bytes(b"x")
        assert create_backup(target_dir, temp_home / "backups") is None
        assert not (temp_home / "backups").exists()

    def test_only_sync_state(self, target_dir, temp_home):
        (target_dir / STATE_FILE).write_text("items: {}\n", encoding="utf-8")
        assert create_backup(target_dir, temp_home / "backups") is None

    def test_same_second_keeps_both(self, populated_target, temp_home):
        root = temp_home / "backups"
        now = datetime(2025, 1, 15, 10, 30, 45)

        first = create_backup(populated_target, root, now=now)
        (populated_target / "commands" / "commit.md").write_text("second", encoding="utf-8")
        second = create_backup(populated_target, root, now=now)
        third = create_backup(populated_target, root, now=now)

        assert first == root / "2025-01-15-10-30-45"
        assert second == root / "2025-01-15-10-30-45-2"
        assert third == root / "2025-01-15-10-30-45-3"
        assert (first / "commands" / "commit.md").read_text(encoding="utf-8") == "commit"
        assert (second / "commands" / "commit.md").read_text(encoding="utf-8") == "second"

    def test_default_root(self, populated_target, temp_home):
        path = create_backup(populated_target)
        assert path.parent == temp_home / ".config" / "ccbundle" / "backup"
        assert get_backup_root() == path.parent


class TestListBackups:
    """Tests for list_backups()."""

    def test_newest_first_and_strict_names(self, temp_home):
        root = temp_home / "backups"
        for name in ("2025-01-15-10-30-45", "2025-03-01-08-00-00", "2024-12-31-23-59-59", "manual", "2025-02-30-00-00-00"):
            (root / name).mkdir(parents=True)
        (root / "2025-04-01-00-00-00").write_text("not a dir", encoding="utf-8")

        backups = list_backups(root)

        assert [b.name for b in backups] == ["2025-03-01-08-00-00", "2025-01-15-10-30-45", "2024-12-31-23-59-59"]
        assert backups[0].path == root / "2025-03-01-08-00-00"

    def test_same_second_newest_first(self, temp_home):
        root = temp_home / "backups"
        for name in ("2025-01-15-10-30-45", "2025-01-15-10-30-45-2", "2025-01-15-10-30-45-10", "2025-01-15-10-30-44"):
            (root / name).mkdir(parents=True)

        assert [b.name for b in list_backups(root)] == [
            "2025-01-15-10-30-45-10",
            "2025-01-15-10-30-45-2",
            "2025-01-15-10-30-45",
            "2025-01-15-10-30-44",
        ]

    def test_missing_root(self, temp_home):
        assert list_backups(temp_home / "nothing") == []


class TestLoadBackup:
    """Tests for load_backup()."""

    def test_round_trip_into_empty_directory(self, populated_target, temp_home, temp_dir):
        path = create_backup(populated_target, temp_home / "backups", now=datetime(2025, 1, 1))
        fresh = temp_dir / "fresh"

        load_backup(path, fresh)

        def snapshot(root):
            return {
                p.relative_to(root).as_posix(): p.read_bytes()
                for item in ("commands", "scripts", "settings.json")
                for p in ([root / item] if (root / item).is_file() else (root / item).rglob("*"))
                if p.is_file()
            }

        assert snapshot(fresh) == snapshot(populated_target)

    def test_round_trip(self, populated_target, temp_home):
        path = create_backup(populated_target, temp_home / "backups", now=datetime(2025, 1, 1))

        (populated_target / "commands" / "commit.md").write_text("changed", encoding="utf-8")
        (populated_target / "commands" / "extra.md").write_text("extra", encoding="utf-8")
        (populated_target / "settings.json").write_text('{"x": 1}\n', encoding="utf-8")

        restored = load_backup(path, populated_target)

        assert restored == ["commands", "scripts", "settings.json"]
        assert (populated_target / "commands" / "commit.md").read_text(encoding="utf-8") == "commit"
        assert not (populated_target / "commands" / "extra.md").exists()
        assert (populated_target / "settings.json").read_text(encoding="utf-8") == "{}\n"
        assert (populated_target / "projects" / "history.jsonl").exists()

    def test_items_missing_from_backup_left_alone(self, populated_target, temp_home):
        backup = temp_home / "backups" / "2025-01-01-00-00-00"
        (backup / "agents").mkdir(parents=True)
        (backup / "agents" / "a.md").write_text("a", encoding="utf-8")

        assert load_backup(backup, populated_target) == ["agents"]
        assert (populated_target / "commands" / "commit.md").exists()
        assert (populated_target / "agents" / "a.md").exists()

    def test_missing_backup(self, target_dir, temp_home):
        with pytest.raises(FileNotFoundError):
            load_backup(temp_home / "backups" / "2025-01-01-00-00-00", target_dir)


class TestFormatBackupAge:
    """Tests for format_backup_age()."""

    NOW = datetime(2025, 6, 1, 12, 0, 0)

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (timedelta(seconds=30), "0 minutes ago"),
            (timedelta(minutes=1), "1 minute ago"),
            (timedelta(hours=3, minutes=5), "3 hours ago"),
            (timedelta(days=2), "2 days ago"),
        ],
    )
    def test_relative(self, delta, expected):
        assert format_backup_age(self.NOW - delta, self.NOW) == expected

    def test_older_than_a_week(self):
        assert format_backup_age(datetime(2025, 5, 1, 9, 0), self.NOW) == "2025-05-01"
