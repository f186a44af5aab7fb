import logging
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.core.exceptions import SlotConflictError
from clinic.models.appointment import Appointment, AppointmentCreate, AppointmentUpdate
from clinic.models.patient import Patient

logger = logging.getLogger(__name__)

PENDING = "pending"
COMPLETED = "completed"


def _to_naive(dt: datetime | None) -> datetime | None:
    """Appointment times are naive clinic-local wall clock; drop any offset the client sent."""
    if dt is not None and dt.tzinfo is not None:
        return dt.replace(tzinfo=None)
    return dt


async def list_appointments(
    session: AsyncSession, status: str | None = None, patient_id: int | None = None
) -> list[Appointment]:
    q = select(Appointment).order_by(Appointment.id)
    if status:
        q = q.where(Appointment.status == status)
    if patient_id is not None:
        q = q.where(Appointment.patient_id == patient_id)
    result = await session.execute(q)
    return list(result.scalars().all())


async def get_appointment(session: AsyncSession, appointment_id: int) -> Appointment | None:
    result = await session.execute(select(Appointment).where(Appointment.id == appointment_id))
    return result.scalar_one_or_none()


async def list_appointments_for_doctor(session: AsyncSession, doctor_name: str) -> list[Appointment]:
    result = await session.execute(
        select(Appointment)
        .where(Appointment.doctor_name == doctor_name)
        .order_by(Appointment.scheduled_time, Appointment.id)
    )
    return list(result.scalars().all())


async def list_appointments_for_doctor_after(
    session: AsyncSession, doctor_name: str, start_inclusive: datetime
) -> list[Appointment]:
    result = await session.execute(
        select(Appointment)
        .where(
            Appointment.doctor_name == doctor_name,
            Appointment.scheduled_time >= _to_naive(start_inclusive),
        )
        .order_by(Appointment.scheduled_time)
    )
    return list(result.scalars().all())


async def list_appointments_for_doctor_between(
    session: AsyncSession, doctor_name: str, start_inclusive: datetime, end_inclusive: datetime
) -> list[Appointment]:
    result = await session.execute(
        select(Appointment)
        .where(
            Appointment.doctor_name == doctor_name,
            Appointment.scheduled_time >= _to_naive(start_inclusive),
            Appointment.scheduled_time <= _to_naive(end_inclusive),
        )
        .order_by(Appointment.scheduled_time)
    )
    return list(result.scalars().all())


async def list_pending_between(
    session: AsyncSession, start_inclusive: datetime, end_inclusive: datetime
) -> list[tuple[Appointment, Patient | None]]:
    result = await session.execute(
        select(Appointment, Patient)
        .outerjoin(Patient, Appointment.patient_id == Patient.id)
        .where(
            Appointment.status == PENDING,
            Appointment.scheduled_time.is_not(None),
            Appointment.scheduled_time >= _to_naive(start_inclusive),
            Appointment.scheduled_time <= _to_naive(end_inclusive),
        )
        .order_by(Appointment.scheduled_time)
    )
    return [(a, p) for a, p in result.all()]


async def find_overlapping(
    session: AsyncSession,
    doctor_name: str,
    start: datetime,
    required_time: int,
    exclude_id: int | None = None,
) -> Appointment | None:
    """First scheduled appointment of the doctor overlapping [start, start + required_time)."""
    end = start + timedelta(minutes=required_time)
    # Only appointments starting before `end` can overlap; the end check needs the
    # per-row duration so it is done here rather than in SQL.
    q = select(Appointment).where(
        Appointment.doctor_name == doctor_name,
        Appointment.scheduled_time.is_not(None),
        Appointment.scheduled_time < end,
    )
    if exclude_id is not None:
        q = q.where(Appointment.id != exclude_id)
    result = await session.execute(q.order_by(Appointment.scheduled_time))
    for existing in result.scalars().all():
        if existing.scheduled_end > start:
            return existing
    return None


async def create_appointment(session: AsyncSession, data: AppointmentCreate) -> Appointment | None:
    """Insert a new appointment. Returns None if its interval is already taken."""
    scheduled = _to_naive(data.scheduled_time)
    if scheduled is not None:
        conflict = await find_overlapping(session, data.doctor_name, scheduled, data.required_time)
        if conflict:
            logger.info(
                "Refused booking for %r at %s: overlaps appointment %s",
                data.doctor_name,
                scheduled,
                conflict.id,
            )
            return None
    appointment = Appointment.model_validate(data, update={"scheduled_time": scheduled})
    session.add(appointment)
    await session.flush()
    await session.refresh(appointment)
    return appointment


async def update_appointment(
    session: AsyncSession, appointment_id: int, data: AppointmentUpdate, now: datetime
) -> Appointment | None:
    """Apply a partial update. Returns None if the appointment does not exist.

    Raises SlotConflictError if the resulting interval overlaps another appointment.
    """
    appointment = await get_appointment(session, appointment_id)
    if not appointment:
        return None
    changes = data.model_dump(exclude_unset=True)
    # Required columns cannot be cleared
    for key in ("doctor_name", "required_time", "status"):
        if changes.get(key, "") is None:
            del changes[key]
    for key in ("scheduled_time", "completion_time"):
        if key in changes:
            changes[key] = _to_naive(changes[key])
    appointment.sqlmodel_update(changes)

    if appointment.scheduled_time is not None:
        conflict = await find_overlapping(
            session,
            appointment.doctor_name,
            appointment.scheduled_time,
            appointment.required_time,
            exclude_id=appointment.id,
        )
        if conflict:
            raise SlotConflictError(
                f"{appointment.doctor_name} already has appointment {conflict.id} at {conflict.scheduled_time.isoformat()}"
            )

    if (appointment.status or "").lower() == COMPLETED and appointment.completion_time is None:
        appointment.completion_time = now
    session.add(appointment)
    await session.flush()
    await session.refresh(appointment)
    return appointment


async def delete_appointment(session: AsyncSession, appointment_id: int) -> bool:
    appointment = await get_appointment(session, appointment_id)
    if not appointment:
        return False
    await session.delete(appointment)
    await session.flush()
    return True
