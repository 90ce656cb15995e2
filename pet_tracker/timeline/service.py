"""界面使用的时间线接口：窗口条目、日历标记、单日视图与完成切换。

只有读取数据和写回完成状态会等待外部存储；展开与合并都是同步计算。
完成切换先改内存（乐观更新），写回失败时回滚并给出提示。
"""
import asyncio
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

from pet_tracker.config import (
    CALENDAR_MONTHS_AHEAD,
    CALENDAR_MONTHS_BACK,
    LOGGER,
    NOTICE_FETCH_FAILED,
    NOTICE_UPDATE_FAILED,
)
from pet_tracker.errors import PersistenceError, PetTrackerError, StoreError
from pet_tracker.reminders.completion import CompletionTracker, is_completed, revert, toggle
from pet_tracker.reminders.models import ReminderRule
from pet_tracker.reminders.recurrence import as_date
from pet_tracker.store.base import DocumentStore
from pet_tracker.timeline.merger import build_calendar_index, filter_day, merge
from pet_tracker.timeline.models import CalendarIndex, TimelineItem

DateLike = Union[date, datetime]


def default_window(today: Optional[date] = None) -> Tuple[date, date]:
    """日历默认窗口：前 3 个月到后 6 个月。"""
    today = as_date(today or date.today())
    return (
        today - relativedelta(months=CALENDAR_MONTHS_BACK),
        today + relativedelta(months=CALENDAR_MONTHS_AHEAD),
    )


class TimelineService:
    """某个界面持有的时间线状态。"""

    def __init__(self, store: DocumentStore, on_notice: Optional[Callable[[str], None]] = None):
        self.store = store
        self.tracker = CompletionTracker(store)
        self.on_notice = on_notice
        self.items: List[TimelineItem] = []
        self.loading = False
        self.last_error: Optional[PetTrackerError] = None
        self._rules: Dict[str, ReminderRule] = {}
        self._window: Optional[Tuple[date, date]] = None
        self._generation = 0

    def _notify(self, message: str) -> None:
        if self.on_notice is not None:
            self.on_notice(message)

    async def get_window_items(self, user_id: str, window_start: DateLike, window_end: DateLike) -> List[TimelineItem]:
        """读取并展开窗口内的全部条目，结果成为当前时间线。

        读取失败时清空时间线并提示；较早发起、较晚返回的读取结果直接丢弃。
        """
        start, end = as_date(window_start), as_date(window_end)
        if start > end:
            LOGGER.debug("Ignoring inverted window %s > %s", start, end)
            return []

        self._generation += 1
        generation = self._generation
        self._window = (start, end)
        self.loading = True
        try:
            rules, visits, pets = await asyncio.gather(
                self.store.list_reminder_rules(user_id),
                self.store.list_visits(user_id),
                self.store.list_pets(user_id),
            )
        except StoreError as exc:
            if generation != self._generation:
                return self.items
            LOGGER.error("Loading timeline for user %s failed: %s", user_id, exc)
            self.last_error = exc
            self.items = []
            self._rules = {}
            self._notify(NOTICE_FETCH_FAILED)
            return []
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            LOGGER.debug("Discarding superseded timeline fetch for user %s", user_id)
            return self.items

        visits = [v for v in visits if start <= v.date.date() <= end]
        self._rules = {rule.id: rule for rule in rules}
        self.items = merge(rules, visits, start, end, pets)
        LOGGER.debug("Timeline %s..%s: %d items", start, end, len(self.items))
        return self.items

    async def refresh(self, user_id: str) -> List[TimelineItem]:
        """重新读取上一次的窗口，覆盖所有乐观修改。"""
        start, end = self._window or default_window()
        return await self.get_window_items(user_id, start, end)

    async def get_today_items(self, user_id: str, today: Optional[date] = None) -> List[TimelineItem]:
        """今天的条目。"""
        today = as_date(today or date.today())
        return await self.get_window_items(user_id, today, today)

    def get_calendar_index(
        self,
        items: Optional[List[TimelineItem]] = None,
        selected_date: Union[date, str, None] = None,
    ) -> CalendarIndex:
        return build_calendar_index(self.items if items is None else items, selected_date or date.today())

    def get_day_items(
        self,
        items: Optional[List[TimelineItem]] = None,
        selected_date: Union[date, str, None] = None,
    ) -> List[TimelineItem]:
        return filter_day(self.items if items is None else items, selected_date or date.today())

    def _find(self, item_id: str) -> Optional[TimelineItem]:
        return next((item for item in self.items if item.id == item_id), None)

    def _apply_rule(self, rule: ReminderRule) -> None:
        # 同一规则的所有条目按新规则重新判断完成状态
        self._rules[rule.id] = rule
        self.items = [
            replace(item, completed=is_completed(rule, item.occurrence_date, item.instance_key))
            if item.is_reminder and item.source_id == rule.id
            else item
            for item in self.items
        ]

    async def toggle_completion(self, user_id: str, item_id: str) -> bool:
        """切换某个提醒实例的完成状态。

        返回是否写回成功；失败时内存状态恢复为切换前，并通过 on_notice 提示。
        就诊或未知条目不做任何事。
        """
        item = self._find(item_id)
        if item is None or not item.is_reminder:
            return False
        rule = self._rules.get(item.source_id)
        if rule is None:
            return False

        result = toggle(rule, item.occurrence_date, item.instance_key)
        self._apply_rule(result.rule)
        try:
            await self.tracker.persist(user_id, result.request)
        except PersistenceError as exc:
            LOGGER.warning("Reverting completion of %s: %s", item_id, exc)
            current = self._rules.get(rule.id)
            if current is not None:
                self._apply_rule(revert(current, result))
            self.last_error = exc
            self._notify(NOTICE_UPDATE_FAILED)
            return False
        return True
