from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from cookbook.models.user import ActivityLevel, Gender, Goal


class UserProfileRequest(BaseModel):
    age: int = Field(ge=15, le=100)
    gender: Gender
    weight: float = Field(ge=30, le=300, description="kg")
    height: float = Field(ge=100, le=250, description="cm")
    activity_level: ActivityLevel
    body_fat_percentage: Optional[float] = Field(default=None, ge=5, le=50)
    goal: Goal


class UserProfileRead(BaseModel):
    id: int
    user_id: int
    age: int
    gender: Gender
    weight: float
    height: float
    activity_level: ActivityLevel
    body_fat_percentage: Optional[float] = None
    goal: Goal
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MacronutrientRead(BaseModel):
    grams: float
    calories: float
    percentage: int

    model_config = {"from_attributes": True}


class MacroBreakdownRead(BaseModel):
    protein: MacronutrientRead
    carbs: MacronutrientRead
    fat: MacronutrientRead

    model_config = {"from_attributes": True}


class CalorieCalculationRead(BaseModel):
    id: int
    user_id: int
    profile: UserProfileRead
    bmr: float
    maintenance_calories: float
    weight_loss_calories: float
    weight_gain_calories: float
    bmi: float
    bmi_category: str
    ideal_weight_min: float
    ideal_weight_max: float
    macros: MacroBreakdownRead
    calculated_at: datetime


class CalorieHistoryRead(BaseModel):
    id: int
    bmr: float
    maintenance_calories: float
    weight_loss_calories: float
    weight_gain_calories: float
    bmi: float
    weight: float = Field(validation_alias="based_on_weight")
    goal: str = Field(validation_alias="based_on_goal")
    calculated_at: datetime

    model_config = {"from_attributes": True, "populate_by_name": True}
