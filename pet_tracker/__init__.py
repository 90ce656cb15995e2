"""宠物照护记录：提醒、就诊、日历时间线。"""
__version__ = "0.1.0"
