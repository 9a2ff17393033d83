"""
Unit tests for imgsearch/store/

Coverage plan
─────────────
models.py     → ImagePayload invariants + wire form, UploadSession counting
ephemeral.py  → put/get deep copy, delete idempotence, expiry, cleanup
                ownership (timer no-op after manual delete), close()
scheduler.py  → ManualScheduler ordering and cancellation, AsyncioScheduler
                delegation to the loop
"""

import asyncio
from unittest.mock import MagicMock

import pytest

from conftest import run

from imgsearch.exceptions import ReceiptOverflowError, StoreError
from imgsearch.store.ephemeral import EphemeralStore
from imgsearch.store.models import ImagePayload, UploadSession
from imgsearch.store.scheduler import AsyncioScheduler, ManualScheduler


@pytest.fixture
def store(scheduler):
    return EphemeralStore(scheduler=scheduler, ttl=120.0)


# ─────────────────────────────────────────────────────────────────────────────
# 1. Models
# ─────────────────────────────────────────────────────────────────────────────

class TestImagePayload:

    def test_remote_payload_requires_url(self):
        with pytest.raises(ValueError):
            ImagePayload(is_blob=False)

    def test_blob_payload_rejects_url(self):
        with pytest.raises(ValueError):
            ImagePayload(is_blob=True, object_url="blob:x/1", url="https://a.example/i.png")

    def test_to_dict_uses_camel_case_and_omits_unset(self):
        p = ImagePayload(is_blob=True, object_url="blob:x/1", filename="a.png", data_key="k")
        assert p.to_dict() == {
            "isBlob": True,
            "objectUrl": "blob:x/1",
            "filename": "a.png",
            "dataKey": "k",
        }


class TestUploadSession:

    def test_one_before_total_is_not_complete(self):
        s = UploadSession(total=3, tab_id=9)
        assert s.record_receipt() is False
        assert s.record_receipt() is False
        assert s.receipts == 2
        assert not s.complete

    def test_last_receipt_completes(self):
        s = UploadSession(total=2, tab_id=9, receipts=1)
        assert s.record_receipt() is True
        assert s.complete

    def test_receipt_beyond_total_raises(self):
        s = UploadSession(total=1, tab_id=9, receipts=1)
        with pytest.raises(ReceiptOverflowError):
            s.record_receipt()


# ─────────────────────────────────────────────────────────────────────────────
# 2. EphemeralStore
# ─────────────────────────────────────────────────────────────────────────────

class TestPutGet:

    def test_get_after_put_returns_equal_value(self, store):
        value = {"images": [{"data": "https://a.example/1.png"}], "n": 1}
        key = store.put(value)
        assert store.get(key) == value

    def test_later_mutation_of_input_does_not_leak(self, store):
        value = {"images": [{"data": "a"}]}
        key = store.put(value)
        value["images"][0]["data"] = "changed"
        value["images"].append({"data": "b"})
        assert store.get(key) == {"images": [{"data": "a"}]}

    def test_keys_are_unique_128_bit_hex(self, store):
        keys = {store.put(i) for i in range(50)}
        assert len(keys) == 50
        assert all(len(k) == 32 and int(k, 16) >= 0 for k in keys)

    def test_get_unknown_key_returns_none(self, store):
        assert store.get("missing") is None

    def test_dataclass_values_are_copied(self, store):
        session = UploadSession(total=2, tab_id=3)
        key = store.put(session)
        session.receipts = 2
        assert store.get(key).receipts == 0


class TestDelete:

    def test_delete_existing_returns_true(self, store):
        key = store.put("x")
        assert store.delete(key) is True
        assert key not in store

    def test_second_delete_returns_false(self, store):
        key = store.put("x")
        store.delete(key)
        assert store.delete(key) is False

    def test_delete_never_existing_returns_false(self, store):
        assert store.delete("nope") is False


class TestExpiry:

    def test_entry_survives_until_ttl(self, store, scheduler):
        key = store.put("x")
        run(scheduler.advance(119.9))
        assert store.get(key) == "x"

    def test_entry_removed_at_ttl(self, store, scheduler):
        key = store.put("x")
        run(scheduler.advance(120))
        assert store.get(key) is None
        assert len(store) == 0

    def test_on_expire_receives_stored_value_once(self, store, scheduler):
        seen = []
        store.put({"v": 1}, on_expire=seen.append)
        run(scheduler.advance(500))
        assert seen == [{"v": 1}]

    def test_manual_delete_makes_timer_a_noop(self, store, scheduler):
        seen = []
        key = store.put("x", on_expire=seen.append)
        assert store.delete(key)
        run(scheduler.advance(120))
        assert seen == []
        assert scheduler.pending == 0

    def test_async_cleanup_is_awaited(self, store, scheduler):
        seen = []

        async def cleanup(value):
            seen.append(value)

        store.put("blob", on_expire=cleanup)
        run(scheduler.advance(120))
        assert seen == ["blob"]

    def test_custom_ttl(self, scheduler):
        short = EphemeralStore(scheduler=scheduler, ttl=5)
        key = short.put("x")
        run(scheduler.advance(5))
        assert key not in short


class TestClose:

    def test_close_drops_entries_and_timers(self, store, scheduler):
        seen = []
        store.put("a", on_expire=seen.append)
        store.put("b", on_expire=seen.append)
        store.close()
        run(scheduler.advance(120))
        assert len(store) == 0
        assert seen == []

    def test_put_after_close_raises(self, store):
        store.close()
        with pytest.raises(StoreError):
            store.put("x")


class TestManualScheduler:

    def test_fires_in_due_order(self):
        sched = ManualScheduler()
        fired = []
        sched.call_later(10, lambda: fired.append("late"))
        sched.call_later(1, lambda: fired.append("early"))
        run(sched.advance(20))
        assert fired == ["early", "late"]
        assert sched.now == 20

    def test_cancelled_timer_does_not_fire(self):
        sched = ManualScheduler()
        fired = []
        handle = sched.call_later(1, lambda: fired.append(1))
        handle.cancel()
        run(sched.advance(2))
        assert fired == []


class TestAsyncioScheduler:

    def test_delegates_to_loop_call_later(self):
        loop = MagicMock()
        fired = []
        AsyncioScheduler(loop).call_later(120, lambda: fired.append(1))
        delay, fire = loop.call_later.call_args.args
        assert delay == 120
        fire()
        assert fired == [1]

    def test_real_loop_fires_async_cleanup(self):
        seen = []

        async def cleanup():
            seen.append("done")

        async def scenario():
            AsyncioScheduler().call_later(0, cleanup)
            await asyncio.sleep(0.01)

        run(scenario())
        assert seen == ["done"]
