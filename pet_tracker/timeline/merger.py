"""合并提醒实例与就诊，生成有序时间线、日历标记与单日视图。"""
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Union

from pet_tracker.config import (
    DEFAULT_COLOR,
    DEFAULT_ICON,
    LOGGER,
    MAX_CALENDAR_DOTS,
    REMINDER_COLORS,
    REMINDER_ICONS,
    SELECTED_DATE_COLOR,
    VISIT_COLOR,
    VISIT_ICON,
)
from pet_tracker.errors import MalformedRuleError
from pet_tracker.health.models import VetVisit
from pet_tracker.pets.models import Pet
from pet_tracker.reminders.completion import occurrences
from pet_tracker.reminders.instances import date_key, item_id, parse_date_key
from pet_tracker.reminders.models import ReminderRule
from pet_tracker.timeline.models import CalendarDay, CalendarDot, CalendarIndex, ItemKind, TimelineItem

VISIT_CATEGORY = "VISIT"

# 同一时刻：提醒在前，就诊在后，再按 ID
_KIND_ORDER = {ItemKind.REMINDER: 0, ItemKind.VISIT: 1}


def _category(rule: ReminderRule) -> str:
    return str(getattr(rule.reminder_type, "value", rule.reminder_type))


def _pet_names(pets: Optional[Iterable[Pet]]) -> Dict[str, str]:
    return {p.id: p.name for p in pets or ()}


def _selected_key(selected_date: Union[date, str]) -> str:
    if isinstance(selected_date, str):
        # 校验并规范化，非法日期抛 ValueError
        selected_date = parse_date_key(selected_date)
    if isinstance(selected_date, datetime):
        selected_date = selected_date.date()
    return date_key(selected_date)


def sort_key(item: TimelineItem):
    return (item.effective_at, _KIND_ORDER[item.kind], item.id)


def reminder_items(
    rules: Iterable[ReminderRule],
    window_start: Union[date, datetime],
    window_end: Union[date, datetime],
    pets: Optional[Iterable[Pet]] = None,
) -> List[TimelineItem]:
    """把每条规则展开为条目；无法展开的规则记录日志后跳过。"""
    names = _pet_names(pets)
    out = []
    for rule in rules:
        try:
            expanded = occurrences(rule, window_start, window_end)
        except MalformedRuleError as exc:
            LOGGER.warning("Skipping reminder %s: %s", exc.rule_id, exc.reason)
            continue
        category = _category(rule)
        for occ in expanded:
            out.append(
                TimelineItem(
                    id=item_id(rule.id, occ.occurrence_date, occ.instance_suffix),
                    kind=ItemKind.REMINDER,
                    effective_at=occ.instance_time,
                    occurrence_date=occ.occurrence_date,
                    title=rule.title,
                    category=category,
                    color=REMINDER_COLORS.get(category, DEFAULT_COLOR),
                    icon=REMINDER_ICONS.get(category, DEFAULT_ICON),
                    subtitle=names.get(rule.pet_id) if rule.pet_id else None,
                    completed=occ.completed,
                    source_id=rule.id,
                    instance_key=occ.instance_suffix,
                )
            )
    return out


def visit_items(visits: Iterable[VetVisit], pets: Optional[Iterable[Pet]] = None) -> List[TimelineItem]:
    names = _pet_names(pets)
    return [
        TimelineItem(
            id=visit.id,
            kind=ItemKind.VISIT,
            effective_at=visit.date,
            occurrence_date=visit.date.date(),
            title=visit.label,
            category=VISIT_CATEGORY,
            color=VISIT_COLOR,
            icon=VISIT_ICON,
            subtitle=names.get(visit.pet_id) if visit.pet_id else None,
            source_id=visit.id,
        )
        for visit in visits
    ]


def merge(
    rules: Iterable[ReminderRule],
    visits: Iterable[VetVisit],
    window_start: Union[date, datetime],
    window_end: Union[date, datetime],
    pets: Optional[Iterable[Pet]] = None,
) -> List[TimelineItem]:
    """合并为按时间升序的时间线。

    同一时刻的条目顺序固定：提醒在前、就诊在后，然后按 ID。
    """
    pets = list(pets or ())
    items = reminder_items(rules, window_start, window_end, pets) + visit_items(visits, pets)
    return sorted(items, key=sort_key)


def build_calendar_index(items: Iterable[TimelineItem], selected_date: Union[date, str]) -> CalendarIndex:
    """按日期汇总标记点（每天最多 MAX_CALENDAR_DOTS 个），并标记选中日期。

    选中日期即使没有条目也会出现在结果中。
    """
    index: CalendarIndex = {}
    for item in items:
        day = index.setdefault(date_key(item.occurrence_date), CalendarDay(marked=True))
        if len(day.dots) < MAX_CALENDAR_DOTS:
            day.dots.append(CalendarDot(key=item.id, color=item.color))

    key = _selected_key(selected_date)
    day = index.setdefault(key, CalendarDay(marked=False))
    day.selected = True
    day.selected_color = SELECTED_DATE_COLOR
    return index


def filter_day(items: Iterable[TimelineItem], selected_date: Union[date, str]) -> List[TimelineItem]:
    """选中日期的条目，保持原有顺序。"""
    key = _selected_key(selected_date)
    return [item for item in items if date_key(item.occurrence_date) == key]
