"""BMR / TDEE calorie targets, BMI and goal-based macro breakdown.

Every function here is pure: no I/O, no shared state. Inputs are trusted
to be inside the ranges enforced by the request schemas.

Arithmetic is done in ``Decimal`` so .x5 values round the same way every
time; results are quantized half-to-even and only then returned as float.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_EVEN

from cookbook.models.user import ActivityLevel, Gender, Goal

logger = logging.getLogger(__name__)

ACTIVITY_MULTIPLIER: dict[ActivityLevel, Decimal] = {
    ActivityLevel.SEDENTARY: Decimal("1.2"),      # little to no exercise
    ActivityLevel.LIGHT: Decimal("1.375"),        # 1-3 days/week
    ActivityLevel.MODERATE: Decimal("1.55"),      # 3-5 days/week
    ActivityLevel.ACTIVE: Decimal("1.725"),       # 6-7 days/week
    ActivityLevel.VERY_ACTIVE: Decimal("1.9"),    # physical job or twice-daily training
}

# (protein, fat, carbs) as whole percentages
GOAL_MACRO_SPLIT: dict[Goal, tuple[int, int, int]] = {
    Goal.LOSE: (30, 25, 45),
    Goal.GAIN: (25, 25, 50),
    Goal.MAINTAIN: (25, 30, 45),
}

CALORIE_ADJUSTMENT = 500

KCAL_PER_GRAM_PROTEIN = 4
KCAL_PER_GRAM_CARBS = 4
KCAL_PER_GRAM_FAT = 9

BMI_HEALTHY_MIN = Decimal("18.5")
BMI_HEALTHY_MAX = Decimal("24.9")


@dataclass(frozen=True)
class Profile:
    age: int
    gender: Gender | str
    weight_kg: float
    height_cm: float
    activity_level: ActivityLevel | str | None
    goal: Goal | str | None
    body_fat_percent: float | None = None


@dataclass(frozen=True)
class Macronutrient:
    grams: float
    calories: float
    percentage: int


@dataclass(frozen=True)
class MacroBreakdown:
    protein: Macronutrient
    carbs: Macronutrient
    fat: Macronutrient


@dataclass(frozen=True)
class CalculationResult:
    bmr: float
    maintenance_calories: float
    weight_loss_calories: float
    weight_gain_calories: float
    bmi: float
    bmi_category: str
    ideal_weight_min: float
    ideal_weight_max: float
    macros: MacroBreakdown
    calculated_at: datetime


def _d(value) -> Decimal:
    """Exact decimal for a number that arrived as int, float or Decimal."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _round(value: Decimal, places: int = 0) -> float:
    exponent = Decimal(1).scaleb(-places)
    return float(value.quantize(exponent, rounding=ROUND_HALF_EVEN))


def _activity_level(value: ActivityLevel | str | None) -> ActivityLevel:
    try:
        return ActivityLevel(value.lower() if isinstance(value, str) else value)
    except ValueError:
        logger.debug("Unknown activity level %r, using sedentary", value)
        return ActivityLevel.SEDENTARY


def _goal(value: Goal | str | None) -> Goal:
    try:
        return Goal(value.lower() if isinstance(value, str) else value)
    except ValueError:
        logger.debug("Unknown goal %r, using maintain split", value)
        return Goal.MAINTAIN


def calculate_bmr(
    weight_kg: float | Decimal,
    height_cm: float | Decimal,
    age_years: int,
    gender: Gender | str,
    body_fat_percent: float | Decimal | None = None,
) -> Decimal:
    """
    Unrounded BMR in kcal/day.

    With body fat, Katch-McArdle (age and gender are ignored):
        BMR = 370 + 21.6 × lean mass(kg)
    Otherwise Mifflin-St Jeor:
        Male:   BMR = 10 × weight(kg) + 6.25 × height(cm) − 5 × age + 5
        Female: BMR = 10 × weight(kg) + 6.25 × height(cm) − 5 × age − 161
    """
    weight = _d(weight_kg)
    if body_fat_percent is not None:
        lean_mass_kg = weight * (1 - _d(body_fat_percent) / 100)
        return Decimal("370") + Decimal("21.6") * lean_mass_kg

    base = 10 * weight + Decimal("6.25") * _d(height_cm) - 5 * _d(age_years)
    if isinstance(gender, str) and gender.lower() == Gender.MALE:
        return base + 5
    return base - 161


def calculate_tdee(bmr: float | Decimal, activity_level: ActivityLevel | str | None) -> Decimal:
    return _d(bmr) * ACTIVITY_MULTIPLIER[_activity_level(activity_level)]


def calculate_bmi(weight_kg: float | Decimal, height_cm: float | Decimal) -> Decimal:
    height_m = _d(height_cm) / 100
    return _d(weight_kg) / (height_m * height_m)


def bmi_category(bmi: float | Decimal) -> str:
    bmi = _d(bmi)
    if bmi < Decimal("18.5"):
        return "Underweight"
    if bmi < 25:
        return "Normal weight"
    if bmi < 30:
        return "Overweight"
    return "Obese"


def ideal_weight_range(height_cm: float | Decimal) -> tuple[float, float]:
    """Weight band (kg, 1 dp) that keeps BMI between 18.5 and 24.9."""
    height_m = _d(height_cm) / 100
    return (
        _round(BMI_HEALTHY_MIN * height_m * height_m, 1),
        _round(BMI_HEALTHY_MAX * height_m * height_m, 1),
    )


def _macro(total_calories: Decimal, percentage: int, kcal_per_gram: int) -> Macronutrient:
    calories = total_calories * percentage / 100
    return Macronutrient(
        grams=_round(calories / kcal_per_gram),
        calories=_round(calories),
        percentage=percentage,
    )


def macro_breakdown(maintenance_calories: float | Decimal, goal: Goal | str | None) -> MacroBreakdown:
    """
    Split a calorie figure into protein / carbs / fat by goal.

    lose → 30/25/45, gain → 25/25/50, anything else → 25/30/45
    (protein/fat/carbs percent).
    """
    total = _d(maintenance_calories)
    protein_pct, fat_pct, carbs_pct = GOAL_MACRO_SPLIT[_goal(goal)]
    return MacroBreakdown(
        protein=_macro(total, protein_pct, KCAL_PER_GRAM_PROTEIN),
        carbs=_macro(total, carbs_pct, KCAL_PER_GRAM_CARBS),
        fat=_macro(total, fat_pct, KCAL_PER_GRAM_FAT),
    )


def calculate(profile: Profile, now: datetime | None = None) -> CalculationResult:
    if now is None:
        now = datetime.now(timezone.utc)

    bmr = calculate_bmr(
        profile.weight_kg,
        profile.height_cm,
        profile.age,
        profile.gender,
        profile.body_fat_percent,
    )
    logger.debug(
        "BMR via %s: %s",
        "Katch-McArdle" if profile.body_fat_percent is not None else "Mifflin-St Jeor",
        bmr,
    )
    maintenance = calculate_tdee(bmr, profile.activity_level)
    maintenance_rounded = _round(maintenance)

    # never prescribe intake below BMR
    weight_loss = max(maintenance - CALORIE_ADJUSTMENT, bmr)

    bmi = _round(calculate_bmi(profile.weight_kg, profile.height_cm), 1)
    ideal_min, ideal_max = ideal_weight_range(profile.height_cm)

    return CalculationResult(
        bmr=_round(bmr),
        maintenance_calories=maintenance_rounded,
        weight_loss_calories=_round(weight_loss),
        weight_gain_calories=maintenance_rounded + CALORIE_ADJUSTMENT,
        bmi=bmi,
        bmi_category=bmi_category(bmi),
        ideal_weight_min=ideal_min,
        ideal_weight_max=ideal_max,
        macros=macro_breakdown(maintenance_rounded, profile.goal),
        calculated_at=now,
    )
