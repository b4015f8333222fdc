from analytics.storage import STORAGE_KEY, ActivityPersistence, FileStorage, MemoryStorage


def test_file_storage_roundtrip(tmp_path):
    storage = FileStorage(str(tmp_path / "store"))

    assert storage.get("user_analytics") is None
    storage.set("user_analytics", '{"totalXP": 5}')
    assert storage.get("user_analytics") == '{"totalXP": 5}'
    assert (tmp_path / "store" / "user_analytics.json").exists()

    storage.remove("user_analytics")
    assert storage.get("user_analytics") is None
    # removing a missing key is fine
    storage.remove("user_analytics")


def test_file_storage_sanitizes_keys(tmp_path):
    storage = FileStorage(str(tmp_path))
    storage.set("../escape/key", "x")

    assert storage.get("../escape/key") == "x"
    assert list(p.name for p in tmp_path.iterdir()) == [".._escape_key.json"]


def test_persistence_uses_fixed_key():
    storage = MemoryStorage()
    persistence = ActivityPersistence(storage)

    assert persistence.load() is None
    persistence.save("blob")
    assert storage.items == {STORAGE_KEY: "blob"}
    persistence.clear()
    assert storage.items == {}
