"""Tests for the in-memory authorization token store."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from parcel_notify.exceptions import ResourceExhaustedError
from parcel_notify.models.token import AuthError, PackageKind
from parcel_notify.store.token_store import TokenStore


# ---------------------------------------------------------------------------
# TestIssue
# ---------------------------------------------------------------------------

class TestIssue:
    """Verify TokenStore.issue() behavior."""

    def test_returns_id_and_expiry(self, store, clock):
        """Issued token expires exactly one TTL after issuance."""
        issued = store.issue("Box A", PackageKind.STANDARD, "en", "a@example.com")

        assert issued.expires_at == clock.now + timedelta(minutes=20)
        assert issued.token_id in store

    def test_default_id_is_256_bits_hex(self, store):
        """Default ids are 64 hex characters."""
        issued = store.issue("Box A")

        assert len(issued.token_id) == 64
        int(issued.token_id, 16)

    def test_entropy_is_configurable(self, clock):
        """entropy_bits controls the id length."""
        store = TokenStore(entropy_bits=128, clock=clock)

        assert len(store.issue("Box A").token_id) == 32

    def test_ids_are_unique(self, store):
        """10,000 issues give 10,000 distinct ids."""
        ids = {store.issue(f"Box {i}").token_id for i in range(10_000)}

        assert len(ids) == 10_000
        assert len(store) == 10_000

    def test_new_token_is_not_authorized(self, store):
        """Tokens start unauthorized."""
        issued = store.issue("Box A")

        assert store.status(issued.token_id).authorized is False

    @pytest.mark.parametrize("bits", [64, 120, 250])
    def test_rejects_weak_or_unaligned_entropy(self, bits):
        with pytest.raises(ValueError):
            TokenStore(entropy_bits=bits)

    def test_rejects_non_positive_ttl(self):
        with pytest.raises(ValueError):
            TokenStore(ttl=timedelta(0))


# ---------------------------------------------------------------------------
# TestCapacity
# ---------------------------------------------------------------------------

class TestCapacity:
    """Verify the store refuses new records once full of live tokens."""

    def test_full_store_raises_resource_exhausted(self, clock):
        store = TokenStore(max_tokens=2, clock=clock)
        store.issue("a")
        store.issue("b")

        with pytest.raises(ResourceExhaustedError) as exc_info:
            store.issue("c")

        assert exc_info.value.max_tokens == 2
        assert len(store) == 2

    def test_expired_tokens_are_purged_to_make_room(self, clock):
        """A full store of expired tokens still accepts new ones."""
        store = TokenStore(ttl=timedelta(minutes=1), max_tokens=2, clock=clock)
        store.issue("a")
        store.issue("b")
        clock.advance(minutes=2)

        issued = store.issue("c")

        assert len(store) == 1
        assert issued.token_id in store


# ---------------------------------------------------------------------------
# TestAuthorize
# ---------------------------------------------------------------------------

class TestAuthorize:
    """Verify TokenStore.authorize() behavior."""

    def test_unknown_id_is_not_found(self, store):
        result = store.authorize("does-not-exist")

        assert result.ok is False
        assert result.error == AuthError.NOT_FOUND
        assert result.info is None

    @pytest.mark.parametrize("token_id", ["", " ", "../../etc", "x" * 10_000])
    def test_odd_ids_never_raise(self, store, token_id):
        assert store.authorize(token_id).error == AuthError.NOT_FOUND

    def test_returns_snapshot(self, store):
        issued = store.issue("Box A", PackageKind.STANDARD, "es")

        result = store.authorize(issued.token_id)

        assert result.ok is True
        assert result.info.subject_name == "Box A"
        assert result.info.kind == PackageKind.STANDARD
        assert result.info.locale == "es"

    def test_idempotent(self, store):
        """Authorizing twice succeeds both times with the same info."""
        issued = store.issue("Box A")

        first = store.authorize(issued.token_id)
        second = store.authorize(issued.token_id)

        assert first.ok and second.ok
        assert first.info.subject_name == second.info.subject_name
        assert first.info.kind == second.info.kind
        assert store.status(issued.token_id).authorized is True

    def test_first_authorization_flag(self, store):
        """Only the false->true transition reports first_authorization."""
        issued = store.issue("Box A")

        assert store.authorize(issued.token_id).info.first_authorization is True
        assert store.authorize(issued.token_id).info.first_authorization is False

    def test_expired_but_unswept_is_rejected(self, store, clock):
        """Expiry is checked against the clock, not only by the sweep."""
        issued = store.issue("Box A")
        clock.advance(minutes=20)

        result = store.authorize(issued.token_id)

        assert result.error == AuthError.NOT_FOUND
        assert issued.token_id in store
        assert store.status(issued.token_id).authorized is False

    def test_authorize_after_real_ttl_elapses(self):
        """A 1ms token is rejected once real time has passed its expiry."""
        store = TokenStore(ttl=timedelta(milliseconds=1))
        issued = store.issue("Box A")
        time.sleep(0.01)

        assert store.authorize(issued.token_id).ok is False
        assert store.status(issued.token_id).authorized is False

    def test_suspended_kind_round_trips(self, store):
        issued = store.issue("Pkg 7", PackageKind.SUSPENDED)

        result = store.authorize(issued.token_id)

        assert result.info.kind == PackageKind.SUSPENDED
        assert result.info.subject_name == "Pkg 7"


# ---------------------------------------------------------------------------
# TestStatus
# ---------------------------------------------------------------------------

class TestStatus:
    """Verify TokenStore.status() behavior."""

    def test_unknown_id(self, store):
        status = store.status("nope")

        assert status.exists is False
        assert status.subject_name is None

    def test_expiry_boundary(self, store, clock):
        """expired flips exactly at created_at + ttl."""
        issued = store.issue("Box A")

        clock.advance(minutes=20, microseconds=-1)
        assert store.status(issued.token_id).expired is False

        clock.advance(microseconds=1)
        status = store.status(issued.token_id)
        assert status.expired is True
        assert status.time_remaining == timedelta(0)

    def test_status_does_not_mutate(self, store):
        issued = store.issue("Box A")

        for _ in range(3):
            store.status(issued.token_id)

        assert store.status(issued.token_id).authorized is False

    def test_expired_reports_zero_remaining_even_if_authorized(self, store, clock):
        issued = store.issue("Box A")
        store.authorize(issued.token_id)
        clock.advance(minutes=30)

        status = store.status(issued.token_id)

        assert status.expired is True
        assert status.authorized is True
        assert status.time_remaining == timedelta(0)


# ---------------------------------------------------------------------------
# TestSweep
# ---------------------------------------------------------------------------

class TestSweep:
    """Verify expired tokens are evicted and stay gone."""

    def test_sweep_removes_only_expired(self, store, clock):
        old = store.issue("old")
        clock.advance(minutes=10)
        new = store.issue("new")
        clock.advance(minutes=10)

        removed = store.sweep()

        assert removed == 1
        assert old.token_id not in store
        assert new.token_id in store

    def test_evicted_id_is_indistinguishable_from_unknown(self, store, clock):
        issued = store.issue("Box A")
        store.authorize(issued.token_id)
        clock.advance(minutes=21)
        store.sweep()

        assert store.status(issued.token_id) == store.status("never-issued")
        assert store.authorize(issued.token_id).error == AuthError.NOT_FOUND

    def test_sweep_on_empty_store(self, store):
        assert store.sweep() == 0


# ---------------------------------------------------------------------------
# TestScenarios
# ---------------------------------------------------------------------------

class TestScenarios:
    """End-to-end token lifecycles."""

    def test_standard_box(self, store, clock):
        issued = store.issue("Box A", PackageKind.STANDARD)

        clock.advance(minutes=5)
        status = store.status(issued.token_id)
        assert status.exists is True
        assert status.authorized is False
        assert status.expired is False
        assert status.time_remaining == timedelta(minutes=15)

        result = store.authorize(issued.token_id)
        assert result.ok is True
        assert result.info.subject_name == "Box A"
        assert result.info.kind == PackageKind.STANDARD

        clock.advance(minutes=16)
        status = store.status(issued.token_id)
        assert status.expired is True
        assert status.time_remaining == timedelta(0)


# ---------------------------------------------------------------------------
# TestConcurrency
# ---------------------------------------------------------------------------

class TestConcurrency:
    """Interleaved callers from several threads."""

    def test_parallel_authorize_single_transition(self):
        """Exactly one of many concurrent authorize calls is the first."""
        store = TokenStore()
        issued = store.issue("Box A")

        with ThreadPoolExecutor(max_workers=16) as pool:
            results = list(pool.map(lambda _: store.authorize(issued.token_id), range(200)))

        assert all(r.ok for r in results)
        assert sum(r.info.first_authorization for r in results) == 1

    def test_parallel_issue_and_sweep(self):
        store = TokenStore(ttl=timedelta(seconds=60))
        stop = threading.Event()

        def sweep_loop():
            while not stop.is_set():
                store.sweep()

        sweeper = threading.Thread(target=sweep_loop)
        sweeper.start()
        try:
            with ThreadPoolExecutor(max_workers=8) as pool:
                ids = list(pool.map(lambda i: store.issue(f"Box {i}").token_id, range(1000)))
        finally:
            stop.set()
            sweeper.join()

        assert len(set(ids)) == 1000
        assert all(store.status(token_id).exists for token_id in ids)
