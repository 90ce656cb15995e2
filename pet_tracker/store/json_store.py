"""本地 JSON 文档存储，按 users/<user_id>/<集合>.json 组织。"""
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from pet_tracker.config import LOGGER, USERS_DIR, ensure_dirs
from pet_tracker.errors import PersistenceError, StoreError
from pet_tracker.health.models import VetVisit
from pet_tracker.pets.models import Pet
from pet_tracker.reminders.models import ReminderRule

M = TypeVar("M", bound=BaseModel)

REMINDERS = "reminders"
VISITS = "visits"
PETS = "pets"


def _doc_id(doc) -> Optional[str]:
    return doc.get("id") if isinstance(doc, dict) else None


class JsonDocumentStore:
    """文档存储（JSON 文件）。每个集合一个文件：``{"documents": [...]}``。"""
    supports_key_delta = True

    def __init__(self, base_dir: Optional[Path] = None):
        if base_dir is None:
            ensure_dirs()
        self.base_dir = base_dir or USERS_DIR

    def _collection_path(self, user_id: str, collection: str) -> Path:
        return self.base_dir / user_id / f"{collection}.json"

    def _load(self, user_id: str, collection: str) -> List[dict]:
        path = self._collection_path(user_id, collection)
        if not path.exists():
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise StoreError(f"cannot read {path}: {exc}") from exc
        if not isinstance(data, dict) or not isinstance(data.get("documents", []), list):
            raise StoreError(f"unexpected layout in {path}")
        return data.get("documents", [])

    def _save(self, user_id: str, collection: str, documents: List[dict]) -> None:
        path = self._collection_path(user_id, collection)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"documents": documents}, f, indent=2, ensure_ascii=False)
        except OSError as exc:
            raise PersistenceError(f"cannot write {path}: {exc}") from exc

    def _parse(self, model: Type[M], documents: List[dict], collection: str) -> List[M]:
        out = []
        for doc in documents:
            if not isinstance(doc, dict):
                LOGGER.warning("Skipping non-object %s document: %r", collection, doc)
                continue
            try:
                out.append(model.model_validate(doc))
            except ValidationError as exc:
                # 单条坏数据不影响其他记录
                LOGGER.warning("Skipping invalid %s document %s: %s", collection, doc.get("id"), exc)
        return out

    def _upsert(self, user_id: str, collection: str, document: BaseModel) -> None:
        documents = [d for d in self._load(user_id, collection) if _doc_id(d) != document.id]
        documents.append(document.model_dump(mode="json"))
        self._save(user_id, collection, documents)

    async def list_reminder_rules(self, user_id: str) -> List[ReminderRule]:
        """按 scheduled_at 升序。"""
        rules = self._parse(ReminderRule, self._load(user_id, REMINDERS), REMINDERS)
        return sorted(rules, key=lambda r: r.scheduled_at)

    async def list_visits(self, user_id: str) -> List[VetVisit]:
        return self._parse(VetVisit, self._load(user_id, VISITS), VISITS)

    async def list_pets(self, user_id: str) -> List[Pet]:
        return self._parse(Pet, self._load(user_id, PETS), PETS)

    def _update_document(self, user_id: str, rule_id: str, change) -> bool:
        try:
            documents = self._load(user_id, REMINDERS)
        except StoreError as exc:
            raise PersistenceError(str(exc)) from exc
        for doc in documents:
            if _doc_id(doc) == rule_id:
                change(doc)
                self._save(user_id, REMINDERS, documents)
                return True
        raise PersistenceError(f"reminder {rule_id} not found")

    async def update_reminder_rule(self, user_id: str, rule_id: str, fields: Dict[str, Any]) -> bool:
        """部分字段更新（列表字段整体替换）。"""
        return self._update_document(user_id, rule_id, lambda doc: doc.update(fields))

    async def update_completed_keys(
        self,
        user_id: str,
        rule_id: str,
        add: Optional[str] = None,
        remove: Optional[str] = None,
    ) -> bool:
        """在读写同一份文档时增删单个实例键。"""
        def change(doc: dict) -> None:
            keys = [k for k in doc.get("completed_keys") or [] if k != remove]
            if add is not None and add not in keys:
                keys.append(add)
            doc["completed_keys"] = keys

        return self._update_document(user_id, rule_id, change)

    def save_reminder(self, user_id: str, reminder: ReminderRule) -> None:
        """保存提醒（同 ID 覆盖）。"""
        self._upsert(user_id, REMINDERS, reminder)

    def save_visit(self, user_id: str, visit: VetVisit) -> None:
        self._upsert(user_id, VISITS, visit)

    def save_pet(self, user_id: str, pet: Pet) -> None:
        self._upsert(user_id, PETS, pet)

    def get_reminder(self, user_id: str, rule_id: str) -> Optional[ReminderRule]:
        for doc in self._load(user_id, REMINDERS):
            if _doc_id(doc) == rule_id:
                return ReminderRule.model_validate(doc)
        return None

    def delete_reminder(self, user_id: str, rule_id: str) -> bool:
        documents = self._load(user_id, REMINDERS)
        kept = [d for d in documents if _doc_id(d) != rule_id]
        if len(kept) == len(documents):
            return False
        self._save(user_id, REMINDERS, kept)
        return True
