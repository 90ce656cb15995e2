"""错误类型。"""


class PetTrackerError(Exception):
    """所有错误的基类。"""


class StoreError(PetTrackerError):
    """文档存储不可用或读取失败。"""


class PersistenceError(StoreError):
    """提醒更新写入失败（完成状态需回滚）。"""


class MalformedRuleError(PetTrackerError):
    """提醒规则无法展开：未知频率或无效的起始时间。"""

    def __init__(self, rule_id: str, reason: str):
        super().__init__(f"reminder {rule_id}: {reason}")
        self.rule_id = rule_id
        self.reason = reason
