from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.models.department import Department
from app.models.subject import Subject
from app.schemas.catalog import SubjectCreate, SubjectOut

router = APIRouter()


def subject_out(subject: Subject) -> SubjectOut:
    return SubjectOut(
        id=subject.id,
        code=subject.code,
        name=subject.name,
        departmentId=subject.department_id,
        departmentName=subject.department.name if subject.department else None,
    )


@router.get("/", response_model=list[SubjectOut])
def list_subjects(
    departmentId: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[SubjectOut]:
    query = select(Subject).order_by(Subject.code)
    if departmentId:
        query = query.where(Subject.department_id == departmentId)
    return [subject_out(item) for item in db.execute(query).scalars()]


@router.post("/", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
def create_subject(payload: SubjectCreate, db: Session = Depends(get_db)) -> SubjectOut:
    if db.get(Department, payload.departmentId) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    existing = db.execute(select(Subject).where(Subject.code == payload.code)).scalar_one_or_none()
    if existing is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Subject code already exists")
    subject = Subject(code=payload.code, name=payload.name, department_id=payload.departmentId)
    db.add(subject)
    db.commit()
    db.refresh(subject)
    return subject_out(subject)
