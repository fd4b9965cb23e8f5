class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when the scheduler encounters a logical error or invalid state."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class MalformedSettingsError(SchedulerError):
    """Raised when timetable settings cannot be turned into a slot layout."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, details=details)
        self.status_code = 422

class MalformedAvailabilityError(SchedulerError):
    """Raised when a faculty availability entry names an unknown day or an out-of-range period."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, details=details)
        self.status_code = 422

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)
