# tests/test_sweep.py

from __future__ import annotations

from datetime import timedelta

import pytest

from todoist_recent.core.batch import BatchApplier
from todoist_recent.core.models import DEFAULT_LOOKBACK, RECENT_THRESHOLD
from todoist_recent.core.models import RECENTLY_CREATED_LABEL as CREATED
from todoist_recent.core.models import RECENTLY_UPDATED_LABEL as UPDATED
from todoist_recent.core.sweep import SweepReconciler
from todoist_recent.errors import RemoteCallFailure

from .fakes import NOW, FakeTaskStore, ago, make_item


def _sweep(store: FakeTaskStore, **kwargs) -> SweepReconciler:
    kwargs.setdefault("applier", BatchApplier(store, delay_seconds=0))
    return SweepReconciler(store, now=NOW, **kwargs)


def test_stale_created_label_is_removed(store: FakeTaskStore) -> None:
    stamp = ago(hours=25)
    store.items["1"] = make_item("1", added_at=stamp, updated_at=stamp, labels=[CREATED, "work"])

    report = _sweep(store).run()

    assert store.items["1"].labels == ["work"]
    assert report.considered == 1
    assert report.changed == 1
    assert report.failed == 0


def test_adds_and_removes_as_needed(store: FakeTaskStore) -> None:
    store.items["new"] = make_item("new", added_at=ago(hours=2), labels=["a"])
    store.items["edited"] = make_item("edited", added_at=ago(days=3), updated_at=ago(hours=3), labels=[CREATED])
    store.items["stale"] = make_item("stale", added_at=ago(days=5), updated_at=ago(days=2), labels=[UPDATED, "b"])
    store.items["fine"] = make_item("fine", added_at=ago(days=4), labels=["c"])

    report = _sweep(store).run()

    assert store.items["new"].labels == ["a", CREATED]
    assert store.items["edited"].labels == [UPDATED]
    assert store.items["stale"].labels == ["b"]
    assert store.items["fine"].labels == ["c"]
    assert report.considered == 4
    assert report.changed == 3


def test_unrelated_labels_keep_order(store: FakeTaskStore) -> None:
    store.items["1"] = make_item(
        "1", added_at=ago(days=2), updated_at=ago(hours=1), labels=["z", CREATED, "a", "m"]
    )

    _sweep(store).run()

    assert store.items["1"].labels == ["z", "a", "m", UPDATED]


def test_no_writes_when_already_converged(store: FakeTaskStore) -> None:
    store.items["1"] = make_item("1", added_at=ago(hours=1), labels=[CREATED])
    store.items["2"] = make_item("2", added_at=ago(days=3), updated_at=ago(hours=1), labels=[UPDATED])

    report = _sweep(store).run()

    assert store.updates == []
    assert report.considered == 2
    assert report.changed == 0


def test_candidates_are_deduplicated_last_snapshot_wins(store: FakeTaskStore) -> None:
    store.items["1"] = make_item("1", added_at=ago(days=3), labels=[CREATED, UPDATED])
    # The changed-since query returns a later snapshot of the same task.
    store.changed_since = [make_item("1", added_at=ago(days=3), labels=[CREATED, UPDATED, "later"])]

    report = _sweep(store).run()

    assert report.considered == 1
    assert store.updates == [("1", ["later"])]


def test_queries_in_order_with_lookback(store: FakeTaskStore) -> None:
    _sweep(store).run()

    queries = [c for c in store.calls if c[0].startswith("get_items")]
    assert queries == [
        ("get_items_by_label", CREATED),
        ("get_items_by_label", UPDATED),
        ("get_items_changed_since", DEFAULT_LOOKBACK),
    ]


def test_cleanup_only_never_adds(store: FakeTaskStore) -> None:
    store.items["new"] = make_item("new", added_at=ago(hours=1), labels=[])
    store.items["stale"] = make_item("stale", added_at=ago(days=2), labels=[CREATED])

    report = _sweep(store, add_labels=False).run()

    assert store.count("get_items_changed_since") == 0
    assert store.items["new"].labels == []
    assert store.items["stale"].labels == []
    assert report.changed == 1


def test_dry_run_writes_nothing(store: FakeTaskStore) -> None:
    store.items["1"] = make_item("1", added_at=ago(days=2), labels=[CREATED])

    report = _sweep(store, dry_run=True).run()

    assert store.updates == []
    assert report.considered == 1
    assert report.changed == 0


def test_malformed_timestamp_skips_only_that_item(store: FakeTaskStore) -> None:
    store.items["bad"] = make_item("bad", added_at="garbage", labels=[CREATED])
    store.items["good"] = make_item("good", added_at=ago(days=2), labels=[CREATED])

    report = _sweep(store).run()

    assert report.skipped == 1
    assert report.changed == 1
    assert store.items["bad"].labels == [CREATED]
    assert store.items["good"].labels == []


def test_write_failure_is_counted_and_sweep_continues(store: FakeTaskStore) -> None:
    store.items["1"] = make_item("1", added_at=ago(days=2), labels=[CREATED])
    store.items["2"] = make_item("2", added_at=ago(days=2), labels=[CREATED])
    store.fail_on["update_item_labels"] = {"1": RemoteCallFailure("boom", status_code=500)}

    report = _sweep(store).run()

    assert report.failed == 1
    assert report.changed == 1
    assert store.items["2"].labels == []


def test_failed_candidate_query_is_not_fatal(store: FakeTaskStore) -> None:
    store.items["1"] = make_item("1", added_at=ago(days=2), labels=[CREATED])
    store.fail_on["get_items_changed_since"] = RemoteCallFailure("timeout")

    report = _sweep(store).run()

    assert report.query_failures == 1
    assert store.items["1"].labels == []


def test_directory_failure_is_fatal(store: FakeTaskStore) -> None:
    store.fail_on["get_labels"] = RemoteCallFailure("unauthorized", status_code=401)

    with pytest.raises(RemoteCallFailure):
        _sweep(store).run()
    assert store.updates == []


def test_sweep_is_only_path_that_removes(store: FakeTaskStore) -> None:
    store.items["1"] = make_item("1", added_at=ago(days=10), updated_at=ago(days=9), labels=[CREATED, UPDATED])

    _sweep(store).run()

    assert store.items["1"].labels == []


def test_second_run_is_a_noop(store: FakeTaskStore) -> None:
    store.items["1"] = make_item("1", added_at=ago(hours=1), labels=[])
    store.items["2"] = make_item("2", added_at=ago(days=2), labels=[CREATED])

    _sweep(store).run()
    writes = len(store.updates)
    report = _sweep(store).run()

    assert len(store.updates) == writes
    assert report.changed == 0


def test_lookback_query_uses_sweep_now(store: FakeTaskStore) -> None:
    _sweep(store).run()

    assert store.changed_since_now == NOW


@pytest.mark.parametrize("lookback", [timedelta(0), timedelta(hours=6)])
def test_lookback_narrower_than_threshold_is_widened(store: FakeTaskStore, lookback: timedelta) -> None:
    _sweep(store, lookback=lookback).run()

    assert ("get_items_changed_since", RECENT_THRESHOLD) in store.calls
