"""就诊记录。"""
from pet_tracker.health.models import VetVisit

__all__ = ["VetVisit"]
