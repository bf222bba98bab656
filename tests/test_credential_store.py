"""Tests for the JSON token file store."""

import json
from pathlib import Path

from calorie_tracker.adapters.file_credential_store import FileCredentialStore
from calorie_tracker.domain.auth import CredentialPair


def test_create_loads_existing_token_file(tmp_path: Path) -> None:
    path = tmp_path / "tokens.json"
    path.write_text(
        json.dumps({"access_token": "a", "refresh_token": "r", "expiry_date": 1}),
        encoding="utf-8",
    )

    store = FileCredentialStore.create(path)

    loaded = store.load()
    assert loaded is not None
    assert loaded.access_token == "a"
    assert loaded.refresh_token == "r"


def test_save_writes_indented_json(tmp_path: Path) -> None:
    path = tmp_path / "tokens.json"
    store = FileCredentialStore.create(path)

    store.save(CredentialPair(access_token="a", refresh_token="r", token_type="Bearer"))

    text = path.read_text(encoding="utf-8")
    assert text == json.dumps(
        {"access_token": "a", "refresh_token": "r", "token_type": "Bearer"},
        indent=2,
    )


def test_refresh_without_refresh_token_keeps_stored_one(tmp_path: Path) -> None:
    path = tmp_path / "tokens.json"
    store = FileCredentialStore.create(path)
    store.save(
        CredentialPair(access_token="old", refresh_token="keep-me", scope="sheets")
    )

    store.save(CredentialPair(access_token="new", expiry_date=1234))

    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert on_disk["refresh_token"] == "keep-me"
    assert on_disk["access_token"] == "new"
    assert on_disk["expiry_date"] == 1234
    assert on_disk["scope"] == "sheets"
    assert store.load().refresh_token == "keep-me"


def test_new_refresh_token_overwrites_record(tmp_path: Path) -> None:
    path = tmp_path / "tokens.json"
    store = FileCredentialStore.create(path)
    store.save(CredentialPair(access_token="old", refresh_token="r1", scope="x"))

    store.save(CredentialPair(access_token="new", refresh_token="r2"))

    assert json.loads(path.read_text(encoding="utf-8")) == {
        "access_token": "new",
        "refresh_token": "r2",
    }


def test_unknown_provider_fields_are_preserved(tmp_path: Path) -> None:
    path = tmp_path / "tokens.json"
    store = FileCredentialStore.create(path)

    store.save(
        CredentialPair.model_validate(
            {"access_token": "a", "refresh_token": "r", "refresh_token_expires_in": 9}
        )
    )

    assert json.loads(path.read_text(encoding="utf-8"))["refresh_token_expires_in"] == 9


def test_clear_removes_file_and_memory(tmp_path: Path) -> None:
    path = tmp_path / "tokens.json"
    store = FileCredentialStore.create(path)
    store.save(CredentialPair(access_token="a", refresh_token="r"))

    store.clear()

    assert not path.exists()
    assert store.load() is None
    store.clear()


def test_corrupt_token_file_is_treated_as_absent(tmp_path: Path) -> None:
    path = tmp_path / "tokens.json"
    path.write_text("{not json", encoding="utf-8")

    store = FileCredentialStore.create(path)

    assert store.load() is None
