"""宠物档案。"""
from pet_tracker.pets.models import Pet

__all__ = ["Pet"]
