from collections.abc import Generator

from fastapi import Depends, HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.schemas.timetable import DepartmentQuery


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def department_id_param(departmentId: str | None = Query(default=None)) -> str:
    if departmentId is None or not departmentId.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Department ID is required")
    try:
        return DepartmentQuery(departmentId=departmentId).departmentId
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=exc.errors(include_url=False, include_context=False),
        ) from exc


DepartmentId = Depends(department_id_param)
