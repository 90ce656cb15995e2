"""全局配置、路径与日志。"""
import logging
import os
from pathlib import Path

LOGGER = logging.getLogger(__package__)

# 项目根目录（pet_tracker 包所在目录的上一级）
ROOT_DIR = Path(__file__).resolve().parent.parent
# 数据目录：可用环境变量 PET_TRACKER_HOME 覆盖
DATA_DIR = Path(os.getenv("PET_TRACKER_HOME", ROOT_DIR / "data")).expanduser()
USERS_DIR = DATA_DIR / "users"  # 按用户 ID 存文档集合

# 日历默认窗口（月）
CALENDAR_MONTHS_BACK = 3
CALENDAR_MONTHS_AHEAD = 6

# 日历每天最多显示的标记点
MAX_CALENDAR_DOTS = 3
SELECTED_DATE_COLOR = "#4F46E5"

# 提醒类型 → 标记颜色
REMINDER_COLORS = {
    "MEDICATION": "#4F46E5",       # 靛蓝
    "VET_APPOINTMENT": "#EF4444",  # 红
    "VACCINE": "#10B981",          # 翠绿
    "ANTIPARASITIC": "#8B5CF6",    # 紫
    "HYGIENE": "#06B6D4",          # 青
    "GROOMING": "#EC4899",         # 粉
    "FOOD": "#F59E0B",             # 琥珀
    "WALK": "#22C55E",             # 绿
    "TRAINING": "#F97316",         # 橙
}
DEFAULT_COLOR = "#6B7280"
VISIT_COLOR = "#EF4444"

# 提醒类型 → 图标名
REMINDER_ICONS = {
    "MEDICATION": "pill",
    "VET_APPOINTMENT": "hospital-building",
    "VACCINE": "needle",
    "ANTIPARASITIC": "bug",
    "HYGIENE": "shower",
    "GROOMING": "content-cut",
    "FOOD": "food",
    "WALK": "walk",
    "TRAINING": "dog-side",
}
DEFAULT_ICON = "bell"
VISIT_ICON = "medical-bag"
VISIT_DEFAULT_LABEL = "Vet visit"

# 用户可见提示
NOTICE_FETCH_FAILED = "Could not load calendar data"
NOTICE_UPDATE_FAILED = "Could not update the reminder"


def ensure_dirs() -> None:
    """确保数据目录存在。"""
    for d in (DATA_DIR, USERS_DIR):
        d.mkdir(parents=True, exist_ok=True)
