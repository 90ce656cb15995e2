"""重复规则展开：步长计算与窗口内的发生日期。

月度规则分两步定位首个落在窗口内的日期：先按每月 30 天粗略估算，
再用真实日历月修正。生成结果只使用日历月，30 天近似不会进入输出。
"""
from datetime import date, datetime, timedelta
from typing import List, Union

from dateutil.relativedelta import relativedelta

from pet_tracker.config import LOGGER
from pet_tracker.errors import MalformedRuleError
from pet_tracker.reminders.models import Frequency, ReminderRule

CALENDAR_MONTH = "calendar-month"

_STEP_DAYS = {
    Frequency.EVERY_8_HOURS: 1,   # 子日频率每天仍只占一个日期
    Frequency.EVERY_12_HOURS: 1,
    Frequency.DAILY: 1,
    Frequency.EVERY_TWO_DAYS: 2,
    Frequency.EVERY_THREE_DAYS: 3,
    Frequency.WEEKLY: 7,
}
_APPROX_MONTH_DAYS = 30

Step = Union[int, str]


def as_date(value: Union[date, datetime]) -> date:
    """datetime 取日历日期，date 原样返回。"""
    if isinstance(value, datetime):
        return value.date()
    return value


def step_interval_days(frequency) -> Step:
    """频率 → 天数步长，月度返回 ``CALENDAR_MONTH``。未知频率抛 ValueError。"""
    freq = Frequency(frequency)
    if freq == Frequency.ONCE:
        raise ValueError("ONCE reminders have no step")
    if freq == Frequency.MONTHLY:
        return CALENDAR_MONTH
    return _STEP_DAYS[freq]


def add_months(anchor: date, months: int) -> date:
    """日历月加法；目标月份较短时取当月最后一天。"""
    return anchor + relativedelta(months=months)


def occurrence_at(anchor: date, step: Step, index: int) -> date:
    """锚点之后第 index 个周期的日期，总是从锚点计算，不累积误差。"""
    if step == CALENDAR_MONTH:
        return add_months(anchor, index)
    return anchor + timedelta(days=step * index)


def advance(current: date, frequency) -> date:
    """前进一个周期。"""
    return occurrence_at(current, step_interval_days(frequency), 1)


def coarse_month_seek(anchor: date, target: date) -> int:
    """按每月 30 天估算到达 target 需要的月数，结果可能偏大或偏小。"""
    if target <= anchor:
        return 0
    return (target - anchor).days // _APPROX_MONTH_DAYS


def exact_month_seek(anchor: date, target: date, estimate: int = 0) -> int:
    """修正估算值：返回使 add_months(anchor, n) >= target 的最小 n。"""
    n = max(estimate, 0)
    while n > 0 and add_months(anchor, n - 1) >= target:
        n -= 1
    while add_months(anchor, n) < target:
        n += 1
    return n


def day_interval_seek(anchor: date, target: date, interval: int) -> int:
    """固定天数步长：整除跳过整段周期，再逐步前进到 target 或之后。"""
    if target <= anchor:
        return 0
    n = (target - anchor).days // interval
    while anchor + timedelta(days=interval * n) < target:
        n += 1
    return n


def first_index(anchor: date, target: date, step: Step) -> int:
    if step == CALENDAR_MONTH:
        return exact_month_seek(anchor, target, coarse_month_seek(anchor, target))
    return day_interval_seek(anchor, target, step)


def expand(
    rule: ReminderRule,
    window_start: Union[date, datetime],
    window_end: Union[date, datetime],
) -> List[date]:
    """返回窗口 [window_start, window_end] 内的发生日期（升序、无重复）。

    ``end_date`` 含当天。窗口颠倒时返回空列表；频率或起始时间无效时抛
    ``MalformedRuleError``，由调用方跳过该规则。
    """
    start = as_date(window_start)
    end = as_date(window_end)
    if start > end:
        LOGGER.debug("Empty window %s > %s for reminder %s", start, end, rule.id)
        return []

    try:
        frequency = Frequency(rule.frequency)
    except ValueError:
        raise MalformedRuleError(rule.id, f"unknown frequency {rule.frequency!r}") from None
    if not isinstance(rule.scheduled_at, datetime):
        raise MalformedRuleError(rule.id, f"invalid anchor {rule.scheduled_at!r}")

    anchor = rule.scheduled_at.date()
    effective_end = end if rule.end_date is None else min(end, as_date(rule.end_date))

    if frequency == Frequency.ONCE:
        return [anchor] if start <= anchor <= effective_end else []
    if anchor > effective_end:
        return []

    step = step_interval_days(frequency)
    index = first_index(anchor, start, step)
    dates = []
    current = occurrence_at(anchor, step, index)
    while current <= effective_end:
        dates.append(current)
        index += 1
        current = occurrence_at(anchor, step, index)
    return dates
