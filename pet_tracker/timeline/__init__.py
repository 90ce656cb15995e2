"""时间线：合并、日历标记与界面接口。"""
from pet_tracker.timeline.merger import build_calendar_index, filter_day, merge
from pet_tracker.timeline.models import CalendarDay, CalendarDot, CalendarIndex, ItemKind, TimelineItem
from pet_tracker.timeline.service import TimelineService

__all__ = [
    "CalendarDay",
    "CalendarDot",
    "CalendarIndex",
    "ItemKind",
    "TimelineItem",
    "TimelineService",
    "build_calendar_index",
    "filter_day",
    "merge",
]
