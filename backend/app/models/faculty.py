import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base import Base
from app.models.subject import Subject


class Faculty(Base):
    __tablename__ = "faculty"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # Roster order is insertion order; the assignment engine breaks ties on it.
    roster_position: Mapped[int] = mapped_column(Integer, index=True, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    subject_id: Mapped[str] = mapped_column(String(36), ForeignKey("subjects.id"), index=True, nullable=False)
    # Derived from the subject on every save; a faculty member never spans departments.
    department_id: Mapped[str] = mapped_column(String(36), ForeignKey("departments.id"), index=True, nullable=False)
    availability: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    subject: Mapped[Subject] = relationship(lazy="joined")
