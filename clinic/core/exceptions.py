from fastapi import status


class ClinicError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArgumentError(ClinicError):
    status_code = status.HTTP_400_BAD_REQUEST


class SlotConflictError(ClinicError):
    """Requested interval overlaps another appointment of the same doctor."""

    status_code = status.HTTP_409_CONFLICT
