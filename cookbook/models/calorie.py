from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cookbook.core.database import Base


class CalorieCalculation(Base):
    """A stored engine result. Rows are appended, never updated."""

    __tablename__ = "calorie_calculations"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    profile_id: Mapped[int] = mapped_column(ForeignKey("user_profiles.id"), nullable=False)

    bmr: Mapped[float] = mapped_column(Float, nullable=False)
    maintenance_calories: Mapped[float] = mapped_column(Float, nullable=False)
    weight_loss_calories: Mapped[float] = mapped_column(Float, nullable=False)
    weight_gain_calories: Mapped[float] = mapped_column(Float, nullable=False)

    bmi: Mapped[float] = mapped_column(Float, nullable=False)
    ideal_weight_min: Mapped[float] = mapped_column(Float, nullable=False)
    ideal_weight_max: Mapped[float] = mapped_column(Float, nullable=False)

    protein_grams: Mapped[float] = mapped_column(Float, nullable=False)
    carbs_grams: Mapped[float] = mapped_column(Float, nullable=False)
    fat_grams: Mapped[float] = mapped_column(Float, nullable=False)
    protein_calories: Mapped[float] = mapped_column(Float, nullable=False)
    carbs_calories: Mapped[float] = mapped_column(Float, nullable=False)
    fat_calories: Mapped[float] = mapped_column(Float, nullable=False)

    # profile snapshot at calculation time
    based_on_weight: Mapped[float] = mapped_column(Float, nullable=False)
    based_on_goal: Mapped[str] = mapped_column(String(20), nullable=False)

    calculated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    user: Mapped["User"] = relationship(back_populates="calculations")
    profile: Mapped["UserProfile"] = relationship()

    __table_args__ = (
        Index("ix_calorie_calculations_user_calculated", "user_id", "calculated_at"),
    )
