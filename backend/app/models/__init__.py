from app.models.department import Department  # noqa: F401
from app.models.faculty import Faculty  # noqa: F401
from app.models.institution_settings import InstitutionSettings  # noqa: F401
from app.models.subject import Subject  # noqa: F401
from app.models.timetable import DepartmentTimetable  # noqa: F401
