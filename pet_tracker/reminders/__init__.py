"""提醒规则、重复展开与完成状态。"""
from pet_tracker.reminders.completion import (
    CompletionTracker,
    Occurrence,
    PersistenceRequest,
    ToggleResult,
    is_completed,
    occurrences,
    revert,
    toggle,
)
from pet_tracker.reminders.instances import Instance, date_key, instances, item_id, occurrence_key
from pet_tracker.reminders.models import Frequency, ReminderRule, ReminderType
from pet_tracker.reminders.recurrence import expand, step_interval_days

__all__ = [
    "CompletionTracker",
    "Frequency",
    "Instance",
    "Occurrence",
    "PersistenceRequest",
    "ReminderRule",
    "ReminderType",
    "ToggleResult",
    "date_key",
    "expand",
    "instances",
    "is_completed",
    "item_id",
    "occurrence_key",
    "occurrences",
    "revert",
    "step_interval_days",
    "toggle",
]
