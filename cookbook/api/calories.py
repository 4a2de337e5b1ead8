import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cookbook.core.auth import get_current_user
from cookbook.core.config import settings
from cookbook.core.database import get_db_session
from cookbook.models.calorie import CalorieCalculation
from cookbook.models.user import User, UserProfile
from cookbook.schemas.calorie import (
    CalorieCalculationRead,
    CalorieHistoryRead,
    MacroBreakdownRead,
    UserProfileRead,
    UserProfileRequest,
)
from cookbook.services.calorie_engine import Profile, bmi_category, calculate, macro_breakdown

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/calories", tags=["calories"])


async def _get_profile(user: User, db: AsyncSession) -> UserProfile | None:
    result = await db.execute(
        select(UserProfile).where(UserProfile.user_id == user.id)
    )
    return result.scalar_one_or_none()


async def _save_profile(user: User, data: UserProfileRequest, db: AsyncSession) -> UserProfile:
    """Create the user's profile, or overwrite the existing one in place."""
    profile = await _get_profile(user, db)
    if profile is None:
        profile = UserProfile(user_id=user.id, **data.model_dump())
        db.add(profile)
    else:
        for field, value in data.model_dump().items():
            setattr(profile, field, value)

    await db.flush()
    await db.refresh(profile)
    return profile


def _to_read(calculation: CalorieCalculation, profile: UserProfile) -> CalorieCalculationRead:
    """Category and macros are re-derived from the stored figures."""
    macros = macro_breakdown(calculation.maintenance_calories, calculation.based_on_goal)
    return CalorieCalculationRead(
        id=calculation.id,
        user_id=calculation.user_id,
        profile=UserProfileRead.model_validate(profile),
        bmr=calculation.bmr,
        maintenance_calories=calculation.maintenance_calories,
        weight_loss_calories=calculation.weight_loss_calories,
        weight_gain_calories=calculation.weight_gain_calories,
        bmi=calculation.bmi,
        bmi_category=bmi_category(calculation.bmi),
        ideal_weight_min=calculation.ideal_weight_min,
        ideal_weight_max=calculation.ideal_weight_max,
        macros=MacroBreakdownRead.model_validate(macros),
        calculated_at=calculation.calculated_at,
    )


@router.get("/profile", response_model=UserProfileRead)
async def get_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    profile = await _get_profile(current_user, db)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )
    return profile


@router.post("/calculate", response_model=CalorieCalculationRead, status_code=status.HTTP_201_CREATED)
async def calculate_calories(
    data: UserProfileRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    profile = await _save_profile(current_user, data, db)

    result = calculate(
        Profile(
            age=profile.age,
            gender=profile.gender,
            weight_kg=profile.weight,
            height_cm=profile.height,
            activity_level=profile.activity_level,
            goal=profile.goal,
            body_fat_percent=profile.body_fat_percentage,
        )
    )

    calculation = CalorieCalculation(
        user_id=current_user.id,
        profile_id=profile.id,
        bmr=result.bmr,
        maintenance_calories=result.maintenance_calories,
        weight_loss_calories=result.weight_loss_calories,
        weight_gain_calories=result.weight_gain_calories,
        bmi=result.bmi,
        ideal_weight_min=result.ideal_weight_min,
        ideal_weight_max=result.ideal_weight_max,
        protein_grams=result.macros.protein.grams,
        carbs_grams=result.macros.carbs.grams,
        fat_grams=result.macros.fat.grams,
        protein_calories=result.macros.protein.calories,
        carbs_calories=result.macros.carbs.calories,
        fat_calories=result.macros.fat.calories,
        based_on_weight=profile.weight,
        based_on_goal=profile.goal.value,
        calculated_at=result.calculated_at,
    )
    db.add(calculation)
    await db.flush()
    logger.info(
        "Stored calculation %s for user %s (maintenance %.0f kcal)",
        calculation.id,
        current_user.id,
        result.maintenance_calories,
    )

    return _to_read(calculation, profile)


@router.get("/latest", response_model=CalorieCalculationRead)
async def get_latest_calculation(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    result = await db.execute(
        select(CalorieCalculation)
        .options(selectinload(CalorieCalculation.profile))
        .where(CalorieCalculation.user_id == current_user.id)
        .order_by(CalorieCalculation.calculated_at.desc(), CalorieCalculation.id.desc())
        .limit(1)
    )
    calculation = result.scalar_one_or_none()
    if calculation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No calculations found",
        )
    return _to_read(calculation, calculation.profile)


@router.get("/history", response_model=list[CalorieHistoryRead])
async def get_calculation_history(
    limit: int = Query(default=settings.history_default_limit, ge=1, le=settings.history_max_limit),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    result = await db.execute(
        select(CalorieCalculation)
        .where(CalorieCalculation.user_id == current_user.id)
        .order_by(CalorieCalculation.calculated_at.desc(), CalorieCalculation.id.desc())
        .limit(limit)
    )
    return [CalorieHistoryRead.model_validate(c) for c in result.scalars().all()]


@router.delete("/calculations/{calculation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_calculation(
    calculation_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    result = await db.execute(
        select(CalorieCalculation).where(
            CalorieCalculation.id == calculation_id,
            CalorieCalculation.user_id == current_user.id,
        )
    )
    calculation = result.scalar_one_or_none()
    if calculation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Calculation not found",
        )

    await db.delete(calculation)
    await db.flush()
    logger.info("Deleted calculation %s for user %s", calculation_id, current_user.id)
