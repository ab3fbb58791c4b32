from __future__ import annotations

import threading

from modelcat.domain.store import SnapshotStore


def test_empty_store_reads_are_sentinels() -> None:
    store: SnapshotStore[str] = SnapshotStore()

    assert store.get() is None
    assert store.snapshot() is None
    assert store.generation() == 0
    assert store.last_options() is None


def test_put_assigns_increasing_generations() -> None:
    store: SnapshotStore[str] = SnapshotStore()

    assert store.put("first") == 1
    assert store.put("second", {"source": "b"}) == 2
    assert store.snapshot() == "second"
    assert store.last_options() == {"source": "b"}


def test_generations_are_not_reused_after_clear() -> None:
    store: SnapshotStore[str] = SnapshotStore()
    store.put("first")

    store.clear()

    assert store.generation() == 0
    assert store.put("again") == 2


def test_concurrent_puts_get_unique_generations() -> None:
    store: SnapshotStore[int] = SnapshotStore()
    writers = 16
    puts_per_writer = 50
    generations: list[int] = []
    observed: list[int] = []
    lock = threading.Lock()
    start = threading.Barrier(writers + 1)

    def writer(index: int) -> None:
        start.wait()
        for _ in range(puts_per_writer):
            generation = store.put(index)
            with lock:
                generations.append(generation)

    def reader() -> None:
        start.wait()
        for _ in range(writers * puts_per_writer):
            observed.append(store.generation())

    threads = [threading.Thread(target=writer, args=(i,)) for i in range(writers)]
    threads.append(threading.Thread(target=reader))
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    total = writers * puts_per_writer
    assert sorted(generations) == list(range(1, total + 1))
    assert store.generation() == total
    assert observed == sorted(observed)
