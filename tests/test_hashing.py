# Tests for ccbundle.utils.hashing
# Git blob hashing for change detection

import hashlib

from ccbundle.utils.hashing import blob_hash, file_hash, folder_hash


class TestBlobHash:
    """Tests for blob_hash."""

    def test_matches_git_for_known_content(self):
        assert blob_hash(b"hello") == "b6fc4c620b67d95f953a5c1c1230aaab5db5a1b0"
        assert blob_hash(b"hello\n") == "ce013625030ba8dba906f756967f9e9ca394464a"

    def test_empty_blob(self):
        assert blob_hash(b"") == "e69de29bb2d1d6434b8b29ae775ad8c2e48c5391"

    def test_string_input_is_utf8(self):
        assert blob_hash("héllo") == blob_hash("héllo".encode("utf-8"))

    def test_deterministic(self):
        assert blob_hash(b"same bytes") == blob_hash(b"same bytes")

    def test_different_content(self):
        assert blob_hash(b"a") != blob_hash(b"b")

    def test_length_is_part_of_header(self):
        assert blob_hash(b"abc") != hashlib.sha1(b"abc").hexdigest()


class TestFileHash:
    """Tests for file_hash."""

    def test_existing_file(self, temp_dir):
        f = temp_dir / "test.txt"
        f.write_bytes(b"hello")
        assert file_hash(f) == "b6fc4c620b67d95f953a5c1c1230aaab5db5a1b0"

    def test_nonexistent_file(self, temp_dir):
        assert file_hash(temp_dir / "missing.txt") is None

    def test_directory_returns_none(self, temp_dir):
        assert file_hash(temp_dir) is None

    def test_binary_file(self, temp_dir):
        data = bytes(range(256))
        f = temp_dir / "sound.mp3"
        f.write_bytes(data)
        assert file_hash(f) == blob_hash(data)


class TestFolderHash:
    """Tests for folder_hash."""

    def test_missing_directory(self, temp_dir):
        assert folder_hash(temp_dir / "missing") is None

    def test_empty_directory(self, temp_dir):
        d = temp_dir / "empty"
        (d / "nested").mkdir(parents=True)
        assert folder_hash(d) is None

    def test_aggregate_of_sorted_blob_hashes(self, temp_dir):
        d = temp_dir / "skill"
        d.mkdir()
        (d / "a.md").write_bytes(b"alpha")
        (d / "b.md").write_bytes(b"beta")

        expected = hashlib.sha1("".join(sorted([blob_hash(b"alpha"), blob_hash(b"beta")])).encode()).hexdigest()
        assert folder_hash(d) == expected

    def test_independent_of_layout_order(self, temp_dir):
        first = temp_dir / "first"
        second = temp_dir / "second"
        (first / "x").mkdir(parents=True)
        (second / "y").mkdir(parents=True)

        (first / "1.md").write_bytes(b"one")
        (first / "x" / "2.md").write_bytes(b"two")
        (second / "z.md").write_bytes(b"two")
        (second / "y" / "0.md").write_bytes(b"one")

        assert folder_hash(first) == folder_hash(second)

    def test_ignores_noise(self, temp_dir):
        d = temp_dir / "scripts"
        d.mkdir()
        (d / "index.ts").write_bytes(b"code")
        before = folder_hash(d)

        (d / ".DS_Store").write_bytes(b"junk")
        (d / "node_modules").mkdir()
        (d / "node_modules" / "dep.js").write_bytes(b"dep")

        assert folder_hash(d) == before

    def test_content_change_changes_hash(self, temp_dir):
        d = temp_dir / "skill"
        d.mkdir()
        (d / "SKILL.md").write_bytes(b"v1")
        before = folder_hash(d)
        (d / "SKILL.md").write_bytes(b"v2")
        assert folder_hash(d) != before
