"""Tests for keyed import locks."""

import threading
import time

from ledgerhealth.database.locks import KeyedLockRegistry


def test_same_key_is_serialized():
    registry = KeyedLockRegistry()
    events = []

    def work(name):
        with registry.hold("import:cash_in:u:2024-01-01"):
            events.append(f"{name}-start")
            time.sleep(0.05)
            events.append(f"{name}-end")

    threads = [threading.Thread(target=work, args=(n,)) for n in ("a", "b")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert events[0].endswith("-start")
    assert events[1] == events[0].replace("start", "end")


def test_different_keys_do_not_block():
    registry = KeyedLockRegistry()
    with registry.hold("a"):
        acquired = threading.Event()

        def other():
            with registry.hold("b"):
                acquired.set()

        t = threading.Thread(target=other)
        t.start()
        assert acquired.wait(timeout=2)
        t.join()


def test_idle_locks_are_dropped():
    registry = KeyedLockRegistry()
    with registry.hold("a"):
        assert len(registry) == 1
    assert len(registry) == 0
