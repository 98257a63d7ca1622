"""
Custom exception classes for the application
"""
from typing import Optional, Dict, Any


class JobBoardException(Exception):
    """Base exception for the job board"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(JobBoardException):
    """Resource not found errors"""

    def __init__(self, resource: str, identifier: Optional[str] = None):
        message = f"{resource} not found"
        if identifier:
            message += f": {identifier}"
        super().__init__(message, status_code=404)


class InvalidTransitionError(JobBoardException):
    """Job status transition not allowed from the current status"""

    def __init__(self, current_status: str, target_status: str):
        super().__init__(
            f"Cannot move job from {current_status} to {target_status}",
            status_code=409,
            details={"current_status": current_status, "target_status": target_status},
        )


class DatabaseError(JobBoardException):
    """Persistence layer errors"""

    def __init__(self, message: str = "Database operation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status_code=500, details=details)
