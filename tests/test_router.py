"""Test Suite - Router Delivery and Event Log.

Tests synchronous delivery, one event per attempt, sequence numbering,
the query surface, and serialized appends under concurrent senders.
"""

import threading

import pytest

from crosschain_testing.harness import JsonlEventStore, Receiver, Router, RouterConfig, evaluate_invariants
from crosschain_testing.models import FailureReason

from tests.test_constants import CHAIN_SELECTOR, ROGUE_SENDER, make_message


@pytest.fixture
def wired_router(bare_router, lone_receiver):
    bare_router.register_receiver(CHAIN_SELECTOR, lone_receiver)
    return bare_router


@pytest.mark.case("XC-RT-001")
def test_send_records_successful_event(wired_router, schedule):
    event = wired_router.send(make_message("lone-receiver", iterations=3))

    assert event.sequence == 1
    assert event.success
    assert event.consumed == schedule.cost(3)
    assert event.message_id.startswith("0x")
    assert wired_router.list_events() == [event]
    assert wired_router.last_event() == event


@pytest.mark.prio1
@pytest.mark.case("XC-RT-002")
def test_failed_delivery_is_an_event_not_an_exception(wired_router):
    """Test Case - Delivery Failures Never Raise From send().

    Description:
    -----------------
    Unauthorized and out-of-gas deliveries must come back as failed
    events so the caller can always read the consumed amount.

    Expected Results:
    ---------------------------
    1. Unauthorized sender: success=False, consumed=0
    2. Out of gas: success=False, consumed=budget
    3. Both appended to the log in order
    """
    rejected = wired_router.send(make_message("lone-receiver", sender=ROGUE_SENDER))
    starved = wired_router.send(make_message("lone-receiver", iterations=99, budget=30_000))

    assert (rejected.success, rejected.consumed, rejected.reason) == (
        False, 0, FailureReason.UNAUTHORIZED,
    )
    assert (starved.success, starved.consumed, starved.reason) == (
        False, 30_000, FailureReason.BUDGET_EXHAUSTED,
    )
    assert [e.sequence for e in wired_router.list_events()] == [1, 2]


@pytest.mark.case("XC-RT-003")
def test_unknown_receiver_recorded(bare_router):
    event = bare_router.send(make_message("nobody"))
    assert not event.success
    assert event.reason == FailureReason.UNKNOWN_RECEIVER
    assert event.consumed == 0


@pytest.mark.case("XC-RT-004")
def test_resend_gets_new_sequence_and_id(wired_router):
    msg = make_message("lone-receiver", iterations=1)
    first = wired_router.send(msg)
    second = wired_router.send(msg)

    assert second.sequence == first.sequence + 1
    assert second.message_id != first.message_id
    assert wired_router.last_event_for(first.message_id) == first
    assert wired_router.last_event_for(second.message_id) == second
    assert wired_router.last_event_for("0xmissing") is None


@pytest.mark.case("XC-RT-005")
def test_list_events_is_restartable_snapshot(wired_router):
    for n in range(4):
        wired_router.send(make_message("lone-receiver", iterations=n))

    first_read = wired_router.list_events()
    first_read.clear()
    assert len(wired_router.list_events()) == 4
    assert wired_router.list_events() == wired_router.list_events()


@pytest.mark.case("XC-RT-006")
def test_fee_quote():
    router = Router(RouterConfig(flat_fee=100, fee_per_budget_unit=2))
    assert router.get_fee(make_message("x", budget=1_000)) == 2_100


@pytest.mark.case("XC-RT-007")
def test_listener_errors_do_not_break_send(wired_router):
    seen = []

    def broken(event):
        raise RuntimeError("listener down")

    wired_router.on_event(broken)
    wired_router.on_event(seen.append)

    event = wired_router.send(make_message("lone-receiver"))

    assert seen == [event]
    assert wired_router.listener_errors == 1


@pytest.mark.prio1
@pytest.mark.case("XC-RT-008")
def test_concurrent_sends_keep_log_linearizable(wired_router):
    """Test Case - Concurrent Senders Share One Gapless Sequence.

    Description:
    -----------------
    Several threads sending through the same router must produce a log
    whose sequence numbers run 1..N with no gaps or reordering, and in
    which every event respects its budget.
    """
    per_thread = 25
    threads = [
        threading.Thread(
            target=lambda n=n: [
                wired_router.send(make_message("lone-receiver", iterations=n))
                for _ in range(per_thread)
            ]
        )
        for n in range(4)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    events = wired_router.list_events()
    assert [e.sequence for e in events] == list(range(1, 4 * per_thread + 1))
    assert evaluate_invariants(events) == []


class FaultyReceiver(Receiver):
    """Raises from deliver() a fixed number of times, then behaves."""

    def __init__(self, *args, faults=1, **kwargs):
        super().__init__(*args, **kwargs)
        self.faults = faults

    def deliver(self, msg, message_id=None):
        if self.faults:
            self.faults -= 1
            raise RuntimeError("receiver crashed")
        return super().deliver(msg, message_id=message_id)


class FlakyStore(JsonlEventStore):
    """Fails the first append with an OSError."""

    def __init__(self, path):
        super().__init__(path)
        self.failed = False

    def append(self, event):
        if not self.failed:
            self.failed = True
            raise OSError("disk full")
        super().append(event)


@pytest.mark.prio1
@pytest.mark.case("XC-RT-009")
def test_receiver_exception_keeps_sequence_gapless(bare_router, schedule):
    """Test Case - A Raising Receiver Is Recorded, Not Skipped.

    Description:
    -----------------
    A receiver that raises instead of returning an outcome must still
    leave exactly one failed event behind, so the next send continues the
    sequence without a gap.

    Expected Results:
    ---------------------------
    1. First send: success=False, consumed=0, reason=RECEIVER_FAULT
    2. Second send succeeds with sequence 2
    3. Log sequences are [1, 2] and the log is sound
    """
    rcv = FaultyReceiver("faulty", owner="owner", schedule=schedule)
    rcv.allowlist_source_chain("owner", CHAIN_SELECTOR, True)
    rcv.allowlist_sender("owner", "sender", True)
    bare_router.register_receiver(CHAIN_SELECTOR, rcv)

    crashed = bare_router.send(make_message("faulty", iterations=2))
    delivered = bare_router.send(make_message("faulty", iterations=2))

    assert (crashed.success, crashed.consumed, crashed.reason) == (
        False, 0, FailureReason.RECEIVER_FAULT,
    )
    assert delivered.success
    assert delivered.sequence == 2
    events = bare_router.list_events()
    assert [e.sequence for e in events] == [1, 2]
    assert evaluate_invariants(events) == []


@pytest.mark.case("XC-RT-010")
def test_unwritable_store_leaves_log_untouched(tmp_path, lone_receiver):
    store = JsonlEventStore(tmp_path)  # a directory cannot be opened for append
    router = Router(store=store)
    router.register_receiver(CHAIN_SELECTOR, lone_receiver)

    with pytest.raises(OSError):
        router.send(make_message("lone-receiver"))

    assert router.list_events() == []
    assert router.last_event() is None


@pytest.mark.case("XC-RT-011")
def test_store_failure_does_not_burn_sequence(tmp_path, lone_receiver):
    store = FlakyStore(tmp_path / "events.jsonl")
    router = Router(store=store)
    router.register_receiver(CHAIN_SELECTOR, lone_receiver)

    with pytest.raises(OSError):
        router.send(make_message("lone-receiver"))
    event = router.send(make_message("lone-receiver"))

    assert event.sequence == 1
    assert router.list_events() == [event]
    assert store.read_all() == [event.to_record()]
