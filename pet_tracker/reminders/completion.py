"""完成状态：判断、切换、回滚与写回。

单次提醒使用 ``completed`` 字段；重复提醒按实例键记录在 ``completed_keys``
中，每个实例独立完成。
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from pet_tracker.config import LOGGER
from pet_tracker.errors import PersistenceError, StoreError
from pet_tracker.reminders.instances import instances, occurrence_key
from pet_tracker.reminders.models import ReminderRule
from pet_tracker.reminders.recurrence import expand

if TYPE_CHECKING:
    from pet_tracker.store.base import DocumentStore


@dataclass(frozen=True)
class Occurrence:
    """展开后的一次提醒实例（临时计算，不持久化）。"""
    rule_id: str
    occurrence_date: date
    instance_time: datetime
    instance_suffix: str
    completed: bool

    @property
    def key(self) -> str:
        return occurrence_key(self.occurrence_date, self.instance_suffix)


@dataclass(frozen=True)
class PersistenceRequest:
    """一次切换需要写回的内容。

    ``fields`` 为整体替换（``completed`` 或完整的 ``completed_keys``）；
    ``added_key`` / ``removed_key`` 以增量形式描述同一变化。
    """
    rule_id: str
    fields: Dict[str, Any] = field(default_factory=dict)
    added_key: Optional[str] = None
    removed_key: Optional[str] = None

    @property
    def is_delta(self) -> bool:
        return self.added_key is not None or self.removed_key is not None


@dataclass(frozen=True)
class ToggleResult:
    """切换结果：新规则、切换前规则、新状态与写回请求。"""
    rule: ReminderRule
    previous: ReminderRule
    completed: bool
    key: Optional[str]  # 单次提醒为 None
    request: PersistenceRequest


def is_completed(rule: ReminderRule, occurrence_date: date, suffix: str = "") -> bool:
    if not rule.is_recurring:
        return rule.completed
    return occurrence_key(occurrence_date, suffix) in rule.completed_keys


def toggle(rule: ReminderRule, occurrence_date: date, suffix: str = "") -> ToggleResult:
    """切换某个实例的完成状态，返回新规则（不修改传入的规则）。"""
    new_state = not is_completed(rule, occurrence_date, suffix)
    if not rule.is_recurring:
        updated = rule.model_copy(update={"completed": new_state})
        request = PersistenceRequest(rule.id, {"completed": new_state})
        return ToggleResult(updated, rule, new_state, None, request)

    key = occurrence_key(occurrence_date, suffix)
    if new_state:
        keys = list(rule.completed_keys) + [key]
        request = PersistenceRequest(rule.id, {"completed_keys": keys}, added_key=key)
    else:
        keys = [k for k in rule.completed_keys if k != key]
        request = PersistenceRequest(rule.id, {"completed_keys": keys}, removed_key=key)
    updated = rule.model_copy(update={"completed_keys": keys})
    return ToggleResult(updated, rule, new_state, key, request)


def revert(current: ReminderRule, result: ToggleResult) -> ReminderRule:
    """在当前内存规则上撤销这一次切换，其他实例的变化保持不变。"""
    if result.key is None:
        return current.model_copy(update={"completed": result.previous.completed})
    keys = [k for k in current.completed_keys if k != result.key]
    if not result.completed:
        keys.append(result.key)
    return current.model_copy(update={"completed_keys": keys})


def occurrences(
    rule: ReminderRule,
    window_start: Union[date, datetime],
    window_end: Union[date, datetime],
) -> List[Occurrence]:
    """展开窗口内的全部实例并标注完成状态。"""
    out = []
    for occurrence_date in expand(rule, window_start, window_end):
        for inst in instances(rule, occurrence_date):
            out.append(
                Occurrence(
                    rule_id=rule.id,
                    occurrence_date=occurrence_date,
                    instance_time=inst.time,
                    instance_suffix=inst.suffix,
                    completed=is_completed(rule, occurrence_date, inst.suffix),
                )
            )
    return out


class CompletionTracker:
    """把切换结果写回文档存储。

    存储支持原子增删键（``supports_key_delta``）时只发送增量，避免两次
    快速切换互相覆盖；否则整体替换 ``completed_keys``（后写者生效）。
    """

    def __init__(self, store: "DocumentStore"):
        self.store = store

    async def persist(self, user_id: str, request: PersistenceRequest) -> None:
        """写回一次切换，失败抛 PersistenceError。"""
        try:
            if request.is_delta and getattr(self.store, "supports_key_delta", False):
                ok = await self.store.update_completed_keys(
                    user_id,
                    request.rule_id,
                    add=request.added_key,
                    remove=request.removed_key,
                )
            else:
                ok = await self.store.update_reminder_rule(user_id, request.rule_id, request.fields)
        except PersistenceError:
            raise
        except StoreError as exc:
            raise PersistenceError(str(exc)) from exc
        if ok is False:
            raise PersistenceError(f"update of reminder {request.rule_id} was rejected")
        LOGGER.debug("Persisted completion change for reminder %s", request.rule_id)
