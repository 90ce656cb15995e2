"""一天内的提醒实例与实例键。"""
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import List

from pet_tracker.errors import MalformedRuleError
from pet_tracker.reminders.models import Frequency, ReminderRule

# 子日频率 → 间隔小时
_SUB_DAILY_HOURS = {
    Frequency.EVERY_8_HOURS: 8,
    Frequency.EVERY_12_HOURS: 12,
}


@dataclass(frozen=True)
class Instance:
    """某个发生日期内的一次提醒。"""
    time: datetime
    suffix: str = ""  # 子日实例为 "-HH:MM"，其余为空


def date_key(d: date) -> str:
    """YYYY-MM-DD（补零）。"""
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def parse_date_key(key: str) -> date:
    return date.fromisoformat(key)


def occurrence_key(occurrence_date: date, suffix: str = "") -> str:
    """完成状态使用的实例键，如 ``2024-04-01`` 或 ``2024-04-01-20:00``。"""
    return date_key(occurrence_date) + suffix


def item_id(rule_id: str, occurrence_date: date, suffix: str = "") -> str:
    """时间线条目 ID：``<rule_id>_<实例键>``。"""
    return f"{rule_id}_{occurrence_key(occurrence_date, suffix)}"


def _at(occurrence_date: date, hour: int, minute: int, tzinfo) -> datetime:
    return datetime.combine(occurrence_date, time(hour, minute), tzinfo=tzinfo)


def instances(rule: ReminderRule, occurrence_date: date) -> List[Instance]:
    """展开某天的实例，按时刻升序。

    每 8/12 小时的规则从锚点小时起按间隔取模 24，可能回绕到更早的时刻
    （20:00 每 8 小时 → 04:00、12:00、20:00），排序后返回。
    """
    try:
        frequency = Frequency(rule.frequency)
    except ValueError:
        raise MalformedRuleError(rule.id, f"unknown frequency {rule.frequency!r}") from None
    anchor = rule.scheduled_at
    hours = _SUB_DAILY_HOURS.get(frequency)
    if hours is None:
        return [Instance(_at(occurrence_date, anchor.hour, anchor.minute, anchor.tzinfo))]

    out = []
    for i in range(24 // hours):
        hour = (anchor.hour + hours * i) % 24
        out.append(
            Instance(
                time=_at(occurrence_date, hour, anchor.minute, anchor.tzinfo),
                suffix=f"-{hour:02d}:{anchor.minute:02d}",
            )
        )
    return sorted(out, key=lambda inst: inst.time)
