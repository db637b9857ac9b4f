"""Unit tests for local storage, unread counters and credentials."""
import json

from netchat.storage.credentials import CredentialStore, User
from netchat.storage.local import LocalStorage
from netchat.storage.unread import UNREAD_KEY, UnreadCounterStore


class TestLocalStorage:
    def test_missing_file_reads_empty(self, storage):
        assert storage.get("anything") is None

    def test_set_get_remove(self, storage):
        storage.set("k", {"a": 1})
        assert LocalStorage(storage.path.parent.parent / "state").get("k") == {"a": 1}
        storage.remove("k")
        assert storage.get("k") is None

    def test_malformed_file_reads_empty(self, storage):
        storage.path.parent.mkdir(parents=True)
        storage.path.write_text("{not json", encoding="utf-8")
        assert storage.get("k") is None
        storage.set("k", 1)
        assert storage.get("k") == 1

    def test_non_object_file_reads_empty(self, storage):
        storage.path.parent.mkdir(parents=True)
        storage.path.write_text("[1, 2]", encoding="utf-8")
        assert storage.get("0") is None


class TestUnreadCounterStore:
    def test_load_absent(self, storage):
        assert UnreadCounterStore(storage).load() == {}

    def test_load_malformed(self, storage):
        storage.set(UNREAD_KEY, "garbage")
        assert UnreadCounterStore(storage).load() == {}

    def test_load_skips_bad_entries(self, storage):
        storage.set(UNREAD_KEY, {"bob": 2, "eve": "x", "zed": -1, "amy": 0})
        assert UnreadCounterStore(storage).load() == {"bob": 2}

    def test_increment_writes_through(self, storage):
        counters = UnreadCounterStore(storage)
        counters.load()
        counters.increment("bob")
        counters.increment("bob")
        assert json.loads(storage.path.read_text())[UNREAD_KEY] == {"bob": 2}

        reloaded = UnreadCounterStore(storage)
        assert reloaded.load() == {"bob": 2}
        assert reloaded.get("bob") == 2

    def test_reset(self, storage):
        counters = UnreadCounterStore(storage)
        counters.increment("bob")
        counters.reset("bob")
        assert counters.get("bob") == 0
        assert UnreadCounterStore(storage).load() == {}

    def test_reset_of_zero_counter_does_not_write(self, storage):
        counters = UnreadCounterStore(storage)
        counters.reset("bob")
        assert not storage.path.exists()


class TestCredentialStore:
    def test_round_trip_and_clear(self, storage):
        creds = CredentialStore(storage)
        assert creds.token is None and creds.user is None

        creds.save("tok", User(id="1", username="alice"))
        assert creds.token == "tok"
        assert creds.user == User(id="1", username="alice")

        creds.clear()
        assert creds.token is None and creds.user is None

    def test_malformed_user(self, storage):
        storage.set("user", {"name": "no id"})
        assert CredentialStore(storage).user is None
