from datetime import datetime, timedelta

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

# Upper bound for a single booking; longer values cannot be scheduled anyway
MAX_APPOINTMENT_MINUTES = 24 * 60


def _naive_now() -> datetime:
    return datetime.now().replace(microsecond=0)


class AppointmentBase(SQLModel):
    patient_id: int | None = Field(default=None, foreign_key="patients.id", ondelete="SET NULL", index=True)
    doctor_name: str = Field(index=True)  # "<first> <last>", matches Doctor.full_name
    required_time: int = Field(gt=0, le=MAX_APPOINTMENT_MINUTES)  # minutes
    appointment_type: str | None = None
    appointment_priority: str | None = None
    status: str = "pending"  # pending, confirmed, completed, cancelled
    # Naive wall-clock columns (TIMESTAMP WITHOUT TIME ZONE)
    scheduled_time: datetime | None = Field(default=None, index=True, sa_type=DateTime)  # None until scheduled
    notes: str | None = None


class Appointment(AppointmentBase, table=True):
    __tablename__ = "appointments"
    id: int | None = Field(default=None, primary_key=True)
    completion_time: datetime | None = Field(default=None, sa_type=DateTime)
    created_at: datetime = Field(default_factory=_naive_now, sa_type=DateTime)

    @property
    def scheduled_end(self) -> datetime | None:
        if self.scheduled_time is None:
            return None
        return self.scheduled_time + timedelta(minutes=self.required_time)


class AppointmentCreate(AppointmentBase):
    pass


class AppointmentUpdate(SQLModel):
    patient_id: int | None = None
    doctor_name: str | None = None
    required_time: int | None = Field(default=None, gt=0, le=MAX_APPOINTMENT_MINUTES)
    appointment_type: str | None = None
    appointment_priority: str | None = None
    status: str | None = None
    scheduled_time: datetime | None = None
    completion_time: datetime | None = None
    notes: str | None = None


class AppointmentPublic(AppointmentBase):
    id: int
    completion_time: datetime | None = None
    created_at: datetime
