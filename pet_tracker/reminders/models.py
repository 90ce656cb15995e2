"""提醒规则数据模型。"""
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Frequency(str, Enum):
    """重复频率（固定枚举，不支持通用规则语法）。"""
    ONCE = "ONCE"
    EVERY_8_HOURS = "EVERY_8_HOURS"
    EVERY_12_HOURS = "EVERY_12_HOURS"
    DAILY = "DAILY"
    EVERY_TWO_DAYS = "EVERY_TWO_DAYS"
    EVERY_THREE_DAYS = "EVERY_THREE_DAYS"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


class ReminderType(str, Enum):
    """提醒类型，决定日历标记颜色与图标。"""
    MEDICATION = "MEDICATION"            # 用药
    VET_APPOINTMENT = "VET_APPOINTMENT"  # 兽医预约
    VACCINE = "VACCINE"                  # 疫苗
    ANTIPARASITIC = "ANTIPARASITIC"      # 驱虫
    HYGIENE = "HYGIENE"                  # 清洁（洗澡、剪指甲、清耳）
    GROOMING = "GROOMING"                # 美容
    FOOD = "FOOD"                        # 喂食
    WALK = "WALK"                        # 遛狗
    TRAINING = "TRAINING"                # 训练
    OTHER = "OTHER"                      # 其他


class ReminderRule(BaseModel):
    """单条提醒及其重复规则。

    ``completed`` 只对 ONCE 有意义，``completed_keys`` 只对重复提醒有意义；
    另一个字段即使存在也必须忽略。
    """
    id: str = Field(..., description="提醒 ID")
    user_id: Optional[str] = Field(None, description="用户 ID")
    pet_id: Optional[str] = Field(None, description="宠物 ID")
    title: str = Field("", description="标题")
    reminder_type: ReminderType = Field(ReminderType.OTHER, description="提醒类型")
    scheduled_at: datetime = Field(..., description="首次提醒时间；其时刻为所有实例的时刻")
    frequency: Frequency = Field(Frequency.ONCE, description="重复频率")
    end_date: Optional[date] = Field(None, description="最后一天（含当天）")
    completed: bool = Field(False, description="ONCE 提醒是否完成")
    completed_keys: List[str] = Field(default_factory=list, description="重复提醒已完成的实例键")
    notes: Optional[str] = Field(None, description="备注")
    created_at: Optional[str] = Field(None, description="创建时间 ISO")

    model_config = ConfigDict(use_enum_values=True)

    @field_validator("scheduled_at")
    @classmethod
    def _to_local_wall_clock(cls, value: datetime) -> datetime:
        # 带时区的时间换算为本地时间，与无时区数据统一比较
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value

    @field_validator("frequency", mode="before")
    @classmethod
    def _missing_frequency_is_once(cls, value):
        # 旧数据没有频率字段，按单次处理
        return Frequency.ONCE if value in (None, "") else value

    @property
    def is_recurring(self) -> bool:
        return self.frequency != Frequency.ONCE
