import random
import threading

import pytest

from cbq.core.exceptions import EmptyQueueError, StorageError
from cbq.core.queue import QueueManager
from cbq.core.storage import QueueMode, QueueState

pytestmark = pytest.mark.unit


class TestAdd:

    def test_appends_while_active(self, manager, store, seed):
        seed([])

        assert manager.add("item1") is True
        assert manager.add("item2") is True

        assert store.load().items == ["item1", "item2"]

    def test_inactive_is_noop(self, manager, store, seed, clipboard):
        seed(["a"], active=False)

        assert manager.add("b") is False

        assert store.load().items == ["a"]
        assert clipboard.writes == []

    def test_skips_consecutive_duplicate(self, manager, store, seed):
        seed(["a", "b"])

        assert manager.add("b") is False
        assert manager.add("a") is True

        assert store.load().items == ["a", "b", "a"]

    def test_appends_empty_text(self, manager, store, seed):
        seed(["a"])

        assert manager.add("") is True
        assert store.load().items == ["a", ""]
        # still subject to the consecutive duplicate rule
        assert manager.add("") is False
        assert store.load().items == ["a", ""]

    def test_does_not_touch_clipboard(self, manager, seed, clipboard):
        seed(["a"])

        manager.add("b")

        assert clipboard.writes == []

    def test_random_sequences_never_have_consecutive_duplicates(self, manager, store, seed):
        seed([])
        rng = random.Random(1234)

        for _ in range(200):
            manager.add(rng.choice(["a", "b", "c"]))

        items = store.load().items
        assert items
        assert all(x != y for x, y in zip(items, items[1:]))


class TestAddAndSync:

    def test_queue_mode_restores_first_item(self, manager, store, seed, clipboard):
        seed(["a"], mode=QueueMode.QUEUE)
        clipboard.content = "x"  # the user's copy

        assert manager.add_and_sync("x") is True

        assert store.load().items == ["a", "x"]
        assert clipboard.content == "a"

    def test_stack_mode_keeps_new_item(self, manager, store, seed, clipboard):
        seed(["a"], mode=QueueMode.STACK)
        clipboard.content = "x"

        manager.add_and_sync("x")

        assert store.load().items == ["a", "x"]
        assert clipboard.content == "x"

    def test_clipboard_failure_keeps_item(self, manager, store, seed, clipboard):
        seed(["a"])
        clipboard.fail_writes = True

        assert manager.add_and_sync("x") is True
        assert store.load().items == ["a", "x"]

    def test_inactive_does_not_sync(self, manager, seed, clipboard):
        seed([], active=False)

        assert manager.add_and_sync("x") is False
        assert clipboard.writes == []


class TestPop:

    def test_fifo(self, manager, store, seed):
        seed(["a", "b", "c"])

        assert manager.pop(False) == "a"
        assert store.load().items == ["b", "c"]

    def test_lifo(self, manager, store, seed):
        seed(["a", "b", "c"])

        assert manager.pop(True) == "c"
        assert store.load().items == ["a", "b"]

    def test_pop_ignores_persisted_mode(self, manager, store, seed):
        seed(["a", "b"], mode=QueueMode.STACK)

        assert manager.pop(False) == "a"

    def test_does_not_touch_clipboard(self, manager, seed, clipboard):
        seed(["a", "b"])

        manager.pop(False)

        assert clipboard.writes == []

    @pytest.mark.parametrize("use_stack", [False, True])
    def test_empty_raises_and_leaves_state(self, manager, store, seed, use_stack):
        seed([], active=True, mode=QueueMode.STACK)
        before = store.load()

        with pytest.raises(EmptyQueueError, match="Queue is empty"):
            manager.pop(use_stack)

        assert store.load() == before


class TestPopAndSync:

    def test_queue_mode(self, manager, store, seed, clipboard):
        seed(["a", "b", "c"], mode=QueueMode.QUEUE)

        result = manager.pop_and_sync()

        assert result.item == "a"
        assert result.synced
        assert clipboard.content == "b"
        assert store.load().items == ["b", "c"]

    def test_stack_mode(self, manager, store, seed, clipboard):
        seed(["a", "b", "c"], mode=QueueMode.STACK)

        result = manager.pop_and_sync()

        assert result.item == "c"
        assert clipboard.content == "b"
        assert store.load().items == ["a", "b"]

    def test_last_item_leaves_clipboard_alone(self, manager, store, seed, clipboard):
        seed(["only"])
        clipboard.content = "only"

        assert manager.pop_and_sync().item == "only"

        assert clipboard.writes == []
        assert clipboard.content == "only"
        assert store.load().items == []

    def test_clipboard_failure_is_a_warning(self, manager, store, seed, clipboard):
        seed(["a", "b"])
        clipboard.fail_writes = True

        result = manager.pop_and_sync()

        assert result.item == "a"
        assert not result.synced
        assert result.sync_error is not None
        assert store.load().items == ["b"]

    def test_empty_raises(self, manager, seed):
        seed([])

        with pytest.raises(EmptyQueueError):
            manager.pop_and_sync()


class TestFlags:

    @pytest.mark.parametrize("start_active", [False, True])
    @pytest.mark.parametrize("target", [False, True])
    def test_set_active_always_clears(self, manager, store, seed, start_active, target):
        seed(["a", "b"], active=start_active)

        manager.set_active(target)

        state = store.load()
        assert state.active is target
        assert state.items == []

    def test_set_stack_mode_keeps_items_and_clipboard(self, manager, store, seed, clipboard):
        seed(["a", "b"])

        manager.set_stack_mode(True)

        state = store.load()
        assert state.mode == QueueMode.STACK
        assert state.items == ["a", "b"]
        assert clipboard.writes == []

        manager.set_mode(QueueMode.QUEUE)
        assert store.load().mode == QueueMode.QUEUE


class TestSyncAndStatus:

    def test_sync_writes_front(self, manager, seed, clipboard):
        seed(["a", "b"], mode=QueueMode.STACK)

        assert manager.sync_clipboard() is True
        assert manager.sync_clipboard() is True

        assert clipboard.writes == ["b", "b"]

    def test_sync_empty_is_noop(self, manager, seed, clipboard):
        seed([])
        clipboard.content = "untouched"

        assert manager.sync_clipboard() is False
        assert clipboard.content == "untouched"

    def test_status_reflects_other_writers(self, manager, store, seed):
        seed(["a"])
        assert manager.get_status().items == ["a"]

        # another process rewrites the file
        store.save(QueueState(items=["z"], active=True, mode=QueueMode.STACK))

        status = manager.get_status()
        assert status.items == ["z"]
        assert status.mode == QueueMode.STACK

    def test_clear(self, manager, store, seed):
        seed(["a", "b"], mode=QueueMode.STACK)

        manager.clear()

        state = store.load()
        assert state.items == []
        assert state.active is True
        assert state.mode == QueueMode.STACK


class TestStorageFailures:

    def test_save_failure_propagates_and_state_on_disk_unchanged(self, manager, store, seed, monkeypatch):
        seed(["a"])

        def failing_save(state):
            raise StorageError("Failed to write state", OSError("read-only"))

        monkeypatch.setattr(store, "save", failing_save)

        with pytest.raises(StorageError):
            manager.add("b")
        with pytest.raises(StorageError):
            manager.pop(False)

        monkeypatch.undo()
        assert store.load().items == ["a"]
        assert manager.get_status().items == ["a"]

    def test_unencodable_text_raises_storage_error(self, manager, store, seed):
        seed(["a"])

        with pytest.raises(StorageError):
            manager.add("x\udc80")

        assert store.load().items == ["a"]
        assert not list(store.state_path.parent.glob(".state.json.*"))


@pytest.mark.integration
class TestConcurrency:

    def test_concurrent_adds_and_pops_keep_items_consistent(self, store, clipboard, seed):
        manager = QueueManager(store, clipboard)
        seed([f"seed-{i}" for i in range(50)])

        adders, pops_per_thread, adds_per_thread = 4, 10, 25
        popped = []
        popped_lock = threading.Lock()
        errors = []

        def add_worker(n):
            try:
                for i in range(adds_per_thread):
                    manager.add(f"w{n}-{i}")
            except Exception as e:
                errors.append(e)

        def pop_worker():
            try:
                for _ in range(pops_per_thread):
                    item = manager.pop(False)
                    with popped_lock:
                        popped.append(item)
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=add_worker, args=(n,)) for n in range(adders)]
        threads += [threading.Thread(target=pop_worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert not errors
        items = store.load().items
        assert len(items) == 50 + adders * adds_per_thread - 4 * pops_per_thread
        assert len(set(popped)) == len(popped)
        assert not set(popped) & set(items)
        # FIFO pops only ever reach the seeded items
        assert all(item.startswith("seed-") for item in popped)
        for n in range(adders):
            mine = [int(i.split("-")[1]) for i in items if i.startswith(f"w{n}-")]
            assert mine == list(range(adds_per_thread))
