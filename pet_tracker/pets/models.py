"""宠物档案数据模型（仅用于时间线副标题）。"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Pet(BaseModel):
    """宠物档案（基础）。"""
    id: str = Field(..., description="宠物唯一 ID")
    user_id: Optional[str] = Field(None, description="主人用户 ID")
    name: str = Field(..., description="宠物名字")
    species: Optional[str] = Field(None, description="物种，如 dog / cat")
    breed: Optional[str] = Field(None, description="品种")

    model_config = ConfigDict(use_enum_values=True)
