"""Tests for local key-value storage."""

import json

import pytest

from kavita_source.models import Credentials
from kavita_source.storage import Storage, default_base_path


@pytest.fixture
def storage(tmp_path) -> Storage:
    """Create a Storage instance with a temporary base path."""
    return Storage(base_path=tmp_path / "kavita")


class TestGetSet:
    """Tests for Storage.get() and Storage.set()."""

    def test_get_missing_key_returns_default(self, storage):
        assert storage.get("url") is None
        assert storage.get("url", "fallback") == "fallback"

    def test_get_before_any_write_does_not_create_file(self, storage):
        storage.get("url")
        assert not storage.storage_path.exists()

    def test_set_creates_directory_and_file(self, storage):
        storage.set("url", "http://kavita.local")
        assert storage.storage_path.exists()

    def test_set_then_get_round_trips_nested_values(self, storage):
        user = {"username": "reader", "token": "a.b.c", "refreshToken": "r"}
        storage.set("user", user)
        assert storage.get("user") == user

    def test_set_preserves_other_keys(self, storage):
        storage.set("url", "http://kavita.local")
        storage.set("apiKey", "key")
        assert storage.get("url") == "http://kavita.local"
        assert storage.get("apiKey") == "key"

    def test_values_are_visible_to_a_new_instance(self, storage):
        storage.set("apiKey", "key")
        assert Storage(base_path=storage.base_path).get("apiKey") == "key"

    def test_file_is_pretty_printed_json(self, storage):
        storage.set("url", "http://kavita.local")
        data = json.loads(storage.storage_path.read_text(encoding="utf-8"))
        assert data == {"url": "http://kavita.local"}



class TestCredentials:
    """Tests for credential helpers."""

    def test_get_credentials_defaults_to_empty_strings(self, storage):
        assert storage.get_credentials() == Credentials(url="", api_key="")

    def test_save_credentials_writes_url_and_api_key(self, storage):
        storage.save_credentials(Credentials(url="http://kavita.local", api_key="key"))
        assert storage.get("url") == "http://kavita.local"
        assert storage.get("apiKey") == "key"
        assert storage.get_credentials() == Credentials(url="http://kavita.local", api_key="key")

    def test_save_credentials_drops_cached_session(self, storage):
        storage.set("user", {"token": "t", "refreshToken": "r"})
        storage.save_credentials(Credentials(url="http://other.local", api_key="new"))
        assert storage.get("user") is None


class TestDefaultBasePath:
    """Tests for default_base_path()."""

    def test_uses_home_directory(self, monkeypatch, tmp_path):
        monkeypatch.delenv("KAVITA_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert default_base_path() == tmp_path / ".kavita"

    def test_kavita_home_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("KAVITA_HOME", str(tmp_path / "custom"))
        assert default_base_path() == tmp_path / "custom"
        assert Storage().storage_path == tmp_path / "custom" / "storage.json"
