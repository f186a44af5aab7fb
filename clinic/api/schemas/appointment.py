from pydantic import BaseModel


class NextAvailableResponse(BaseModel):
    next_available_time: str  # ISO-8601 local date-time, e.g. 2025-03-04T10:30:00


class PendingAppointment(BaseModel):
    id: int
    patient_name: str
    doctor: str
    appointment_type: str | None = None
    scheduled_time: str
    duration: int
    priority: str | None = None
    status: str
