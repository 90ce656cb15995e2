"""完成状态测试。"""
import asyncio
import tempfile
from datetime import date, datetime
from pathlib import Path

import pytest

from pet_tracker.errors import PersistenceError
from pet_tracker.reminders.completion import (
    CompletionTracker,
    PersistenceRequest,
    is_completed,
    occurrences,
    revert,
    toggle,
)
from pet_tracker.reminders.models import ReminderRule
from pet_tracker.store.json_store import JsonDocumentStore


def _twice_daily() -> ReminderRule:
    return ReminderRule(
        id="med",
        title="Antibiotic",
        scheduled_at=datetime(2024, 3, 30, 8, 0),
        frequency="EVERY_12_HOURS",
    )


class RecordingStore:
    """不支持增量更新，只记录整体替换请求。"""
    supports_key_delta = False

    def __init__(self, result=True):
        self.calls = []
        self.result = result

    async def update_reminder_rule(self, user_id, rule_id, fields):
        self.calls.append((user_id, rule_id, fields))
        return self.result


def test_once_uses_completed_flag_only() -> None:
    rule = ReminderRule(
        id="vac",
        scheduled_at=datetime(2024, 5, 1, 10, 0),
        completed=True,
        completed_keys=["2024-05-02"],
    )
    assert is_completed(rule, date(2024, 5, 1)) is True
    assert is_completed(rule, date(2024, 9, 9)) is True


def test_recurring_ignores_completed_flag() -> None:
    rule = _twice_daily().model_copy(update={"completed": True})
    assert is_completed(rule, date(2024, 4, 1), "-08:00") is False


def test_toggle_isolates_one_instance() -> None:
    rule = _twice_daily()
    result = toggle(rule, date(2024, 4, 1), "-20:00")
    assert result.completed is True
    assert result.rule.completed_keys == ["2024-04-01-20:00"]
    assert result.previous is rule
    assert rule.completed_keys == []
    assert result.request == PersistenceRequest(
        "med", {"completed_keys": ["2024-04-01-20:00"]}, added_key="2024-04-01-20:00"
    )

    updated = result.rule
    assert is_completed(updated, date(2024, 4, 1), "-20:00")
    assert not is_completed(updated, date(2024, 4, 1), "-08:00")
    assert not is_completed(updated, date(2024, 4, 2), "-20:00")

    undone = toggle(updated, date(2024, 4, 1), "-20:00")
    assert undone.completed is False
    assert undone.rule.completed_keys == []
    assert undone.request.removed_key == "2024-04-01-20:00"


def test_toggle_once() -> None:
    rule = ReminderRule(id="vac", scheduled_at=datetime(2024, 5, 1, 10, 0))
    result = toggle(rule, date(2024, 5, 1))
    assert result.rule.completed is True
    assert result.key is None
    assert result.request.fields == {"completed": True}
    assert not result.request.is_delta


def test_revert_keeps_other_toggles() -> None:
    first = toggle(_twice_daily(), date(2024, 4, 1), "-08:00")
    second = toggle(first.rule, date(2024, 4, 1), "-20:00")
    reverted = revert(second.rule, first)
    assert reverted.completed_keys == ["2024-04-01-20:00"]

    removal = toggle(second.rule, date(2024, 4, 1), "-08:00")
    restored = revert(removal.rule, removal)
    assert set(restored.completed_keys) == {"2024-04-01-08:00", "2024-04-01-20:00"}


def test_occurrences_annotate_completion() -> None:
    rule = _twice_daily().model_copy(update={"completed_keys": ["2024-03-31-20:00"]})
    out = occurrences(rule, date(2024, 3, 31), date(2024, 3, 31))
    assert [(o.key, o.completed) for o in out] == [
        ("2024-03-31-08:00", False),
        ("2024-03-31-20:00", True),
    ]


def test_persist_full_replacement() -> None:
    store = RecordingStore()
    request = toggle(_twice_daily(), date(2024, 4, 1), "-08:00").request
    asyncio.run(CompletionTracker(store).persist("u1", request))
    assert store.calls == [("u1", "med", {"completed_keys": ["2024-04-01-08:00"]})]


def test_persist_rejected_raises() -> None:
    store = RecordingStore(result=False)
    request = toggle(_twice_daily(), date(2024, 4, 1), "-08:00").request
    with pytest.raises(PersistenceError):
        asyncio.run(CompletionTracker(store).persist("u1", request))


def test_persist_delta() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = JsonDocumentStore(base_dir=Path(tmp))
        rule = _twice_daily().model_copy(update={"completed_keys": ["2024-03-31-08:00"]})
        store.save_reminder("u1", rule)
        tracker = CompletionTracker(store)

        # 基于旧规则计算的整体列表不会覆盖已有的键
        request = toggle(_twice_daily(), date(2024, 4, 1), "-20:00").request
        asyncio.run(tracker.persist("u1", request))
        saved = store.get_reminder("u1", "med")
        assert saved.completed_keys == ["2024-03-31-08:00", "2024-04-01-20:00"]

        with pytest.raises(PersistenceError):
            asyncio.run(tracker.persist("u1", PersistenceRequest("missing", added_key="2024-04-01")))
