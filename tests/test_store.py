"""JSON 文档存储测试。"""
import asyncio
import json
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from pet_tracker.errors import PersistenceError, StoreError
from pet_tracker.health.models import VetVisit
from pet_tracker.reminders.models import ReminderRule
from pet_tracker.store.json_store import JsonDocumentStore


def test_save_and_list_sorted() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = JsonDocumentStore(base_dir=Path(tmp))
        store.save_reminder("u1", ReminderRule(id="late", scheduled_at=datetime(2024, 5, 1, 9, 0)))
        store.save_reminder("u1", ReminderRule(id="early", scheduled_at=datetime(2024, 1, 1, 9, 0), frequency="DAILY"))
        store.save_reminder("u1", ReminderRule(id="late", title="Updated", scheduled_at=datetime(2024, 5, 1, 9, 0)))
        rules = asyncio.run(store.list_reminder_rules("u1"))
        assert [r.id for r in rules] == ["early", "late"]
        assert rules[1].title == "Updated"
        assert asyncio.run(store.list_reminder_rules("someone-else")) == []


def test_invalid_documents_are_skipped() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        (base / "u1").mkdir()
        docs = [
            {"id": "ok", "scheduled_at": "2024-01-01T09:00:00", "frequency": "WEEKLY"},
            {"id": "bad-frequency", "scheduled_at": "2024-01-01T09:00:00", "frequency": "HOURLY"},
            {"id": "bad-anchor", "scheduled_at": "not a date"},
        ]
        (base / "u1" / "reminders.json").write_text(json.dumps({"documents": docs}), encoding="utf-8")
        rules = asyncio.run(JsonDocumentStore(base_dir=base).list_reminder_rules("u1"))
        assert [r.id for r in rules] == ["ok"]


def test_corrupt_file_raises_store_error() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        (base / "u1").mkdir()
        (base / "u1" / "visits.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(StoreError):
            asyncio.run(JsonDocumentStore(base_dir=base).list_visits("u1"))


def test_update_fields_and_keys() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = JsonDocumentStore(base_dir=Path(tmp))
        store.save_reminder("u1", ReminderRule(id="r", scheduled_at=datetime(2024, 1, 1, 9, 0), frequency="DAILY"))
        asyncio.run(store.update_completed_keys("u1", "r", add="2024-01-02"))
        asyncio.run(store.update_completed_keys("u1", "r", add="2024-01-03"))
        asyncio.run(store.update_completed_keys("u1", "r", add="2024-01-03"))
        asyncio.run(store.update_completed_keys("u1", "r", remove="2024-01-02"))
        assert store.get_reminder("u1", "r").completed_keys == ["2024-01-03"]

        asyncio.run(store.update_reminder_rule("u1", "r", {"title": "Walk"}))
        assert store.get_reminder("u1", "r").title == "Walk"

        with pytest.raises(PersistenceError):
            asyncio.run(store.update_reminder_rule("u1", "missing", {"completed": True}))


def test_delete_reminder() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = JsonDocumentStore(base_dir=Path(tmp))
        store.save_reminder("u1", ReminderRule(id="r", scheduled_at=datetime(2024, 1, 1, 9, 0)))
        assert store.delete_reminder("u1", "r") is True
        assert store.delete_reminder("u1", "r") is False
        assert store.get_reminder("u1", "r") is None


def test_wrong_shape_documents() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        base = Path(tmp)
        (base / "u1").mkdir()
        docs = ["oops", {"id": "ok", "scheduled_at": "2024-01-01T09:00:00"}]
        (base / "u1" / "reminders.json").write_text(json.dumps({"documents": docs}), encoding="utf-8")
        (base / "u1" / "visits.json").write_text("[]", encoding="utf-8")
        store = JsonDocumentStore(base_dir=base)
        assert [r.id for r in asyncio.run(store.list_reminder_rules("u1"))] == ["ok"]
        assert asyncio.run(store.update_completed_keys("u1", "ok", add="2024-01-01")) is True
        with pytest.raises(StoreError):
            asyncio.run(store.list_visits("u1"))

        (base / "u1" / "reminders.json").write_text(json.dumps({"documents": {"id": "ok"}}), encoding="utf-8")
        with pytest.raises(PersistenceError):
            asyncio.run(store.update_completed_keys("u1", "ok", add="2024-01-02"))


def test_aware_timestamps_become_local_wall_clock() -> None:
    visit = VetVisit.model_validate({"id": "v1", "date": "2024-04-01T12:00:00+00:00"})
    rule = ReminderRule.model_validate({"id": "r1", "scheduled_at": "2024-04-01T09:00:00"})
    expected = datetime(2024, 4, 1, 12, 0, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert visit.date == expected
    assert visit.date.tzinfo is None
    assert rule.scheduled_at == datetime(2024, 4, 1, 9, 0)
