"""文档存储接口：提醒、就诊、宠物的读取与提醒更新。"""
from typing import Any, Dict, List, Optional, Protocol

from pet_tracker.health.models import VetVisit
from pet_tracker.pets.models import Pet
from pet_tracker.reminders.models import ReminderRule


class DocumentStore(Protocol):
    """时间线依赖的外部存储。

    读取失败抛 StoreError，写入失败抛 PersistenceError（或返回 False）。
    ``supports_key_delta`` 为 True 时还需实现 ``update_completed_keys``。
    """
    supports_key_delta: bool

    async def list_reminder_rules(self, user_id: str) -> List[ReminderRule]:
        ...

    async def list_visits(self, user_id: str) -> List[VetVisit]:
        ...

    async def list_pets(self, user_id: str) -> List[Pet]:
        ...

    async def update_reminder_rule(self, user_id: str, rule_id: str, fields: Dict[str, Any]) -> bool:
        ...

    async def update_completed_keys(
        self,
        user_id: str,
        rule_id: str,
        add: Optional[str] = None,
        remove: Optional[str] = None,
    ) -> bool:
        ...
