from sqlmodel import SQLModel


class TimelineAppointment(SQLModel):
    id: int
    patient_name: str  # "" when no patient is linked yet
    start_time: str  # ISO-8601 local date-time
    duration: int
    type: str | None = None


class DoctorSchedule(SQLModel):
    id: int
    name: str
    appointments: list[TimelineAppointment]


class TimelineResponse(SQLModel):
    doctors: list[DoctorSchedule]
