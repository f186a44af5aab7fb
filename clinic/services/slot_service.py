import logging
from collections.abc import Iterable
from datetime import datetime, time, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from clinic.core.exceptions import InvalidArgumentError
from clinic.models.appointment import Appointment
from clinic.services.appointment_service import list_appointments_for_doctor_after

logger = logging.getLogger(__name__)

# Working hours apply every day, weekends included
WORK_START = time(9, 0)
WORK_END = time(17, 0)
SEARCH_HORIZON = timedelta(days=7)
WORKING_DAY_MINUTES = (WORK_END.hour * 60 + WORK_END.minute) - (WORK_START.hour * 60 + WORK_START.minute)


def _at_work_start(dt: datetime) -> datetime:
    return datetime.combine(dt.date(), WORK_START)


def round_start_time(now: datetime) -> datetime:
    """Round up to the next half hour: hh:00-hh:29 -> hh:30, hh:30-hh:59 -> next hh:00."""
    if now.minute < 30:
        return now.replace(minute=30, second=0, microsecond=0)
    return (now + timedelta(hours=1)).replace(minute=0, second=0, microsecond=0)


def search_start_time(now: datetime) -> datetime:
    """Rounded `now`, moved into working hours if it falls outside them."""
    start = round_start_time(now)
    if start.time() < WORK_START:
        return _at_work_start(start)
    if start.time() > WORK_END:
        return _at_work_start(start + timedelta(days=1))
    return start


def _fallback(horizon_end: datetime) -> datetime:
    fallback = _at_work_start(horizon_end + timedelta(days=1))
    logger.info("No free slot before %s; falling back to %s", horizon_end, fallback)
    return fallback


def find_next_slot(
    appointments: Iterable[Appointment], required_time: int, start_time: datetime
) -> datetime:
    """Earliest start at or after `start_time` that fits `required_time` minutes
    inside working hours without overlapping any of `appointments`.

    Greedy: on the first conflicting appointment the candidate jumps to that
    appointment's end and the scan starts over. If nothing fits before
    start_time + SEARCH_HORIZON, the day after the horizon at WORK_START is returned.
    """
    busy = sorted(
        (
            (a.scheduled_time, a.scheduled_time + timedelta(minutes=a.required_time))
            for a in appointments
            if a.scheduled_time is not None
        ),
        key=lambda interval: interval[0],
    )
    horizon_end = start_time + SEARCH_HORIZON
    if required_time > WORKING_DAY_MINUTES:
        # Can never fit inside one working day
        return _fallback(horizon_end)
    duration = timedelta(minutes=required_time)

    candidate = start_time
    while candidate < horizon_end:
        if candidate.time() < WORK_START:
            candidate = _at_work_start(candidate)
            continue
        candidate_end = candidate + duration
        if (
            candidate.time() > WORK_END
            or candidate_end.date() != candidate.date()
            or candidate_end.time() > WORK_END
        ):
            candidate = _at_work_start(candidate + timedelta(days=1))
            continue

        for existing_start, existing_end in busy:
            if not (candidate_end <= existing_start or candidate >= existing_end):
                candidate = existing_end
                break
        else:
            return candidate

    return _fallback(horizon_end)


def _validate(doctor_name: str, required_time: int) -> None:
    if not isinstance(doctor_name, str) or not doctor_name.strip():
        raise InvalidArgumentError("doctor name must not be empty")
    # bool is an int subclass; reject it explicitly
    if isinstance(required_time, bool) or not isinstance(required_time, int) or required_time <= 0:
        raise InvalidArgumentError("required time must be a positive number of minutes")


async def find_next_available_slot(
    session: AsyncSession, doctor_name: str, required_time: int, now: datetime
) -> datetime:
    """Propose the next free start time for `doctor_name`.

    Advisory only: nothing is reserved, so the caller must re-check for
    overlaps when it actually books the slot (see create_appointment).
    An unknown doctor has an empty calendar.
    """
    _validate(doctor_name, required_time)
    start = search_start_time(now)
    appointments = await list_appointments_for_doctor_after(session, doctor_name, start)
    slot = find_next_slot(appointments, required_time, start)
    logger.debug(
        "Slot search doctor=%r duration=%d start=%s scanned=%d -> %s",
        doctor_name,
        required_time,
        start,
        len(appointments),
        slot,
    )
    return slot
