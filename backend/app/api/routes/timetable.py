import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import DepartmentId, get_db
from app.schemas.timetable import GenerateTimetableResponse, TimetableOut
from app.services.timetable_service import (
    delete_department_timetable,
    generate_all_timetables,
    generate_department_timetable,
    get_department,
    get_timetable_record,
    timetable_out,
)

router = APIRouter()
logger = logging.getLogger(__name__)

NO_FACULTY_MESSAGE = "No faculty found for this department. Please add faculty members first."


@router.post("/generate", response_model=GenerateTimetableResponse)
def generate_timetable_for_department(
    department_id: str = DepartmentId,
    db: Session = Depends(get_db),
) -> GenerateTimetableResponse:
    logger.info("Generate timetable request for department %s", department_id)
    outcome = generate_department_timetable(db, department_id)
    if not outcome.found:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NO_FACULTY_MESSAGE)

    layout = outcome.layout
    message = "Timetable generated successfully"
    shortfall_message = layout.shortfall_message()
    if shortfall_message:
        message = f"{message}. {shortfall_message}"
    return GenerateTimetableResponse(
        message=message,
        data=timetable_out(outcome.record),
        requestedPeriods=layout.requestedPeriods,
        emittedPeriods=layout.emittedPeriods,
        shortfall=layout.shortfall,
    )


@router.post("/generate-all", response_model=list[GenerateTimetableResponse])
def generate_all(db: Session = Depends(get_db)) -> list[GenerateTimetableResponse]:
    responses: list[GenerateTimetableResponse] = []
    for outcome in generate_all_timetables(db):
        if not outcome.found:
            logger.info("Skipped department %s: no faculty", outcome.department_id)
            continue
        layout = outcome.layout
        responses.append(
            GenerateTimetableResponse(
                message="Timetable generated successfully",
                data=timetable_out(outcome.record),
                requestedPeriods=layout.requestedPeriods,
                emittedPeriods=layout.emittedPeriods,
                shortfall=layout.shortfall,
            )
        )
    return responses


@router.get("", response_model=TimetableOut)
def get_timetable_by_department(
    department_id: str = DepartmentId,
    db: Session = Depends(get_db),
) -> TimetableOut:
    get_department(db, department_id)
    record = get_timetable_record(db, department_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No timetable found for this department. Please generate one first.",
        )
    return timetable_out(record)


@router.delete("")
def delete_timetable(
    department_id: str = DepartmentId,
    db: Session = Depends(get_db),
) -> dict:
    if not delete_department_timetable(db, department_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No timetable found to delete")
    return {"success": True, "message": "Timetable deleted successfully"}
