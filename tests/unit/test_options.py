"""Unit tests for option stores."""

import json

import pytest

from webstats.options import FileOptionStore, MemoryOptionStore


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryOptionStore()
    return FileOptionStore(str(tmp_path / "options.json"))


class TestOptionStore:

    def test_missing_option_is_none(self, store):
        assert store.get("missing") is None

    def test_values_are_stored_as_strings(self, store):
        store.set("count", 42)
        assert store.get("count") == "42"

    def test_set_overwrites(self, store):
        store.set("name", "first")
        store.set("name", "second")
        assert store.get("name") == "second"

    def test_empty_string_is_a_value(self, store):
        store.set("name", "")
        assert store.get("name") == ""

    def test_delete(self, store):
        store.set("name", "value")
        assert store.delete("name")
        assert not store.delete("name")
        assert store.get("name") is None

    def test_autoloaded_options(self, store):
        store.set("loaded", "1", autoload=True)
        store.set("lazy", "2")
        assert store.get_autoloaded() == {"loaded": "1"}


class TestFileOptionStore:

    def test_survives_reopening(self, tmp_path):
        path = str(tmp_path / "options.json")
        FileOptionStore(path).set("UpdateCheck_LatestVersion", "3.1.0", autoload=True)

        reopened = FileOptionStore(path)
        assert reopened.get("UpdateCheck_LatestVersion") == "3.1.0"
        assert reopened.get_autoloaded() == {"UpdateCheck_LatestVersion": "3.1.0"}

    def test_file_format(self, tmp_path):
        path = tmp_path / "options.json"
        FileOptionStore(str(path)).set("name", "value")

        assert json.loads(path.read_text()) == {"name": {"value": "value", "autoload": False}}

    def test_unreadable_file_starts_empty(self, tmp_path):
        path = tmp_path / "options.json"
        path.write_text("[broken")

        assert FileOptionStore(str(path)).get("name") is None

    def test_creates_parent_directory(self, tmp_path):
        store = FileOptionStore(str(tmp_path / "tmp" / "options.json"))
        store.set("name", "value")
        assert (tmp_path / "tmp" / "options.json").exists()

    def test_stores_sharing_a_file_see_each_others_changes(self, tmp_path):
        path = str(tmp_path / "options.json")
        first = FileOptionStore(path)
        second = FileOptionStore(path)

        first.set("UpdateCheck_LastTimeChecked", "1700000000", autoload=True)
        assert second.get("UpdateCheck_LastTimeChecked") == "1700000000"

        second.set("UpdateCheck_LatestVersion", "3.1.0", autoload=True)
        assert first.get_autoloaded() == {
            "UpdateCheck_LastTimeChecked": "1700000000",
            "UpdateCheck_LatestVersion": "3.1.0",
        }

        first.set("UpdateCheck_LastTimeChecked", "1700028800", autoload=True)
        assert second.get("UpdateCheck_LatestVersion") == "3.1.0"
        assert second.get("UpdateCheck_LastTimeChecked") == "1700028800"

    def test_delete_keeps_options_written_by_another_store(self, tmp_path):
        path = str(tmp_path / "options.json")
        first = FileOptionStore(path)
        second = FileOptionStore(path)

        first.set("old", "1")
        second.set("new", "2")

        assert first.delete("old")
        assert first.get("new") == "2"
        assert second.get("old") is None
