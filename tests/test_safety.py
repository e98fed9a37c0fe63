"""Safety tests to ensure the suite doesn't touch local working data.

These tests verify that running the test suite does NOT create or modify:
- ./data (default SQLite database location)
- ./uploads (default upload storage root)

All tests MUST use tmp_path based config via the app_config fixture. The
workspace_snapshot fixture in conftest.py compares both directories at
session teardown; the tests here check the hashing it relies on.
"""

import ast
from pathlib import Path

import pytest


class TestDirectoryHash:
    """The snapshot hash notices every kind of change."""

    def test_missing_directory(self, tmp_path, directory_hash):
        assert directory_hash(tmp_path / "data") is None

    def test_created_file_changes_hash(self, tmp_path, directory_hash):
        (tmp_path / "data").mkdir()
        empty = directory_hash(tmp_path / "data")
        assert empty is not None

        (tmp_path / "data" / "schoolshelf.db").write_bytes(b"x")
        assert directory_hash(tmp_path / "data") != empty

    def test_modified_file_changes_hash(self, tmp_path, directory_hash):
        target = tmp_path / "uploads" / "pdfs" / "a.pdf"
        target.parent.mkdir(parents=True)
        target.write_bytes(b"one")
        before = directory_hash(tmp_path / "uploads")

        target.write_bytes(b"three")
        assert directory_hash(tmp_path / "uploads") != before

    def test_unchanged_directory_is_stable(self, tmp_path, directory_hash):
        (tmp_path / "data").mkdir()
        (tmp_path / "data" / "f.txt").write_text("same", encoding="utf-8")
        assert directory_hash(tmp_path / "data") == directory_hash(tmp_path / "data")

    def test_session_snapshot_covers_watched_dirs(self, workspace_snapshot):
        assert set(workspace_snapshot) == {"data", "uploads"}


class TestTestIsolation:
    """Meta-tests ensuring apps are built from temporary config."""

    def test_create_app_always_receives_config(self):
        """No test calls create_app() without a config (that would use ./data)."""
        violations = []
        for test_file in Path(__file__).parent.rglob("test_*.py"):
            tree = ast.parse(test_file.read_text(encoding="utf-8"))
            for node in ast.walk(tree):
                if (
                    isinstance(node, ast.Call)
                    and isinstance(node.func, ast.Name)
                    and node.func.id == "create_app"
                    and not node.args
                    and not node.keywords
                ):
                    violations.append(f"{test_file.name}:{node.lineno}")

        if violations:
            pytest.fail("create_app() called without config:\n" + "\n".join(violations))
