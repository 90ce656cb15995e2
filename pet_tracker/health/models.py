"""兽医就诊数据模型：单次事件，无重复规则。"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pet_tracker.config import VISIT_DEFAULT_LABEL


class VetVisit(BaseModel):
    """一次兽医就诊。"""
    id: str = Field(..., description="就诊记录 ID")
    pet_id: Optional[str] = Field(None, description="宠物 ID")
    user_id: Optional[str] = Field(None, description="用户 ID")
    date: datetime = Field(..., description="就诊时间")
    reason: str = Field("", description="就诊原因")
    diagnosis: Optional[str] = Field(None, description="诊断")
    vet_name: Optional[str] = Field(None, description="兽医")
    clinic_name: Optional[str] = Field(None, description="诊所")

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("date")
    @classmethod
    def _to_local_wall_clock(cls, value: datetime) -> datetime:
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value

    @property
    def label(self) -> str:
        return self.reason or VISIT_DEFAULT_LABEL
