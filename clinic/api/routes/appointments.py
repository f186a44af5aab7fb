import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.api.deps import get_clock, get_session
from clinic.api.schemas.appointment import NextAvailableResponse, PendingAppointment
from clinic.core.clock import Clock
from clinic.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentPublic,
    AppointmentUpdate,
)
from clinic.models.timeline import TimelineResponse
from clinic.services.appointment_service import (
    create_appointment,
    delete_appointment,
    get_appointment,
    list_appointments,
    list_appointments_for_doctor,
    list_appointments_for_doctor_after,
    list_appointments_for_doctor_between,
    list_pending_between,
)
from clinic.services.appointment_service import update_appointment as update_appointment_record
from clinic.services.slot_service import find_next_available_slot
from clinic.services.timeline_service import build_timeline, patient_display_name

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/appointments", tags=["appointments"])


def _to_public(a: Appointment) -> AppointmentPublic:
    return AppointmentPublic.model_validate(a)


@router.get("/timeline", response_model=TimelineResponse)
async def timeline(
    day: date = Query(..., alias="date"),
    session: AsyncSession = Depends(get_session),
) -> TimelineResponse:
    """All doctors with their appointments scheduled on the given date."""
    return await build_timeline(session, day)


@router.get("/pending", response_model=list[PendingAppointment])
async def pending_appointments(
    start_date: datetime = Query(..., alias="startDate"),
    end_date: datetime = Query(..., alias="endDate"),
    session: AsyncSession = Depends(get_session),
) -> list[PendingAppointment]:
    rows = await list_pending_between(session, start_date, end_date)
    return [
        PendingAppointment(
            id=a.id,
            patient_name=patient_display_name(p),
            doctor=a.doctor_name,
            appointment_type=a.appointment_type,
            scheduled_time=a.scheduled_time.isoformat(timespec="seconds"),
            duration=a.required_time,
            priority=a.appointment_priority,
            status=a.status,
        )
        for a, p in rows
    ]


@router.get("/doctor/{doctor_name}/next-available", response_model=NextAvailableResponse)
async def next_available(
    doctor_name: str = Path(...),
    required_time: int = Query(..., alias="requiredTime"),
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> NextAvailableResponse:
    """Earliest free start for the doctor. Advisory: the slot is not reserved."""
    slot = await find_next_available_slot(session, doctor_name, required_time, clock.now())
    return NextAvailableResponse(next_available_time=slot.isoformat(timespec="seconds"))


@router.get("/doctor/{doctor_name}/after", response_model=list[AppointmentPublic])
async def doctor_appointments_after(
    doctor_name: str,
    start_time: datetime = Query(..., alias="startTime"),
    session: AsyncSession = Depends(get_session),
) -> list[AppointmentPublic]:
    appointments = await list_appointments_for_doctor_after(session, doctor_name, start_time)
    return [_to_public(a) for a in appointments]


@router.get("/doctor/{doctor_name}/daterange", response_model=list[AppointmentPublic])
async def doctor_appointments_between(
    doctor_name: str,
    start_time: datetime = Query(..., alias="startTime"),
    end_time: datetime = Query(..., alias="endTime"),
    session: AsyncSession = Depends(get_session),
) -> list[AppointmentPublic]:
    appointments = await list_appointments_for_doctor_between(session, doctor_name, start_time, end_time)
    return [_to_public(a) for a in appointments]


@router.get("/doctor/{doctor_name}", response_model=list[AppointmentPublic])
async def doctor_appointments(
    doctor_name: str,
    session: AsyncSession = Depends(get_session),
) -> list[AppointmentPublic]:
    appointments = await list_appointments_for_doctor(session, doctor_name)
    return [_to_public(a) for a in appointments]


@router.get("", response_model=list[AppointmentPublic])
async def all_appointments(
    status_filter: str | None = Query(None, alias="status"),
    patient_id: int | None = Query(None),
    session: AsyncSession = Depends(get_session),
) -> list[AppointmentPublic]:
    appointments = await list_appointments(session, status=status_filter, patient_id=patient_id)
    return [_to_public(a) for a in appointments]


@router.get("/{appointment_id}", response_model=AppointmentPublic)
async def read_appointment(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
) -> AppointmentPublic:
    appointment = await get_appointment(session, appointment_id)
    if not appointment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Appointment not found")
    return _to_public(appointment)


@router.post("", response_model=AppointmentPublic, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    body: AppointmentCreate,
    session: AsyncSession = Depends(get_session),
) -> AppointmentPublic:
    appointment = await create_appointment(session, body)
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Doctor already has an appointment in this time slot. Search for the next available slot and retry.",
        )
    return _to_public(appointment)


@router.put("/{appointment_id}", response_model=AppointmentPublic)
async def update_appointment(
    appointment_id: int,
    body: AppointmentUpdate,
    session: AsyncSession = Depends(get_session),
    clock: Clock = Depends(get_clock),
) -> AppointmentPublic:
    appointment = await update_appointment_record(session, appointment_id, body, clock.now())
    if not appointment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Appointment not found")
    return _to_public(appointment)


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_appointment(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
) -> None:
    ok = await delete_appointment(session, appointment_id)
    if not ok:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Appointment not found")
