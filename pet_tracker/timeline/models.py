"""时间线条目与日历标记数据模型（供界面使用）。"""
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional


class ItemKind(str, Enum):
    """条目来源。"""
    REMINDER = "reminder"
    VISIT = "visit"


@dataclass(frozen=True)
class TimelineItem:
    """提醒实例或就诊的统一表示。"""
    id: str
    kind: ItemKind
    effective_at: datetime
    occurrence_date: date
    title: str
    category: str           # 提醒类型或 "VISIT"
    color: str
    icon: str
    subtitle: Optional[str] = None  # 宠物名
    completed: Optional[bool] = None  # 就诊为 None
    source_id: str = ""     # 提醒 ID 或就诊 ID
    instance_key: str = ""  # 子日实例后缀

    @property
    def is_reminder(self) -> bool:
        return self.kind == ItemKind.REMINDER


@dataclass(frozen=True)
class CalendarDot:
    key: str
    color: str


@dataclass
class CalendarDay:
    """某一天的日历标记。"""
    dots: List[CalendarDot] = field(default_factory=list)
    marked: bool = False
    selected: bool = False
    selected_color: Optional[str] = None

    @property
    def dot_colors(self) -> List[str]:
        return [d.color for d in self.dots]


CalendarIndex = Dict[str, CalendarDay]
