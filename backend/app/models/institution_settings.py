from datetime import datetime

from sqlalchemy import DateTime, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class InstitutionSettings(Base):
    __tablename__ = "institution_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    working_start: Mapped[str] = mapped_column(String(16), nullable=False)
    working_end: Mapped[str] = mapped_column(String(16), nullable=False)
    period_duration: Mapped[int] = mapped_column(Integer, nullable=False, default=60)
    number_of_periods: Mapped[int] = mapped_column(Integer, nullable=False, default=6)
    break_times: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
