import threading
from pulse_onboarding.services import entity_store
from pulse_onboarding.services.entity_store import user_write_lock


def test_write_lock_is_reentrant_and_released():
    with user_write_lock("u1"):
        with user_write_lock("u1"):
            assert entity_store._user_locks["u1"][1] == 2

    assert "u1" not in entity_store._user_locks


def test_write_lock_serializes_one_user():
    order = []
    entered = threading.Event()
    release = threading.Event()

    def first_writer():
        with user_write_lock("u2"):
            entered.set()
            release.wait(timeout=5)
            order.append("first")

    def second_writer():
        entered.wait(timeout=5)
        with user_write_lock("u2"):
            order.append("second")

    threads = [threading.Thread(target=first_writer), threading.Thread(target=second_writer)]
    for thread in threads:
        thread.start()
    entered.wait(timeout=5)
    release.set()
    for thread in threads:
        thread.join(timeout=5)

    assert order == ["first", "second"]
    assert "u2" not in entity_store._user_locks


def test_platform_flags_are_bounded(platform_store, monkeypatch):
    monkeypatch.setattr(entity_store, "_PLATFORM_FLAGS_MAX_USERS", 2)
    monkeypatch.setattr(entity_store, "_platform_flags", entity_store.OrderedDict())

    platform_store.storage_for("a").set("getting_started_dismissed", "true")
    platform_store.storage_for("b")
    platform_store.storage_for("a")
    platform_store.storage_for("c")

    assert list(entity_store._platform_flags) == ["a", "c"]
    assert platform_store.storage_for("a").get("getting_started_dismissed") == "true"
