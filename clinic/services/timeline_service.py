from datetime import date, datetime, time

from sqlalchemy.ext.asyncio import AsyncSession

from clinic.models.appointment import Appointment
from clinic.models.patient import Patient
from clinic.models.timeline import DoctorSchedule, TimelineAppointment, TimelineResponse
from clinic.services.appointment_service import list_appointments_for_doctor_between
from clinic.services.doctor_service import list_doctors
from clinic.services.patient_service import get_patients_by_ids


def patient_display_name(patient: Patient | None) -> str:
    if patient is None:
        return ""
    return patient.display_name


def _to_timeline_entry(a: Appointment, patients: dict[int, Patient]) -> TimelineAppointment:
    patient = patients.get(a.patient_id) if a.patient_id is not None else None
    return TimelineAppointment(
        id=a.id,
        patient_name=patient_display_name(patient),
        start_time=a.scheduled_time.isoformat(timespec="seconds"),
        duration=a.required_time,
        type=a.appointment_type,
    )


async def build_timeline(session: AsyncSession, day: date) -> TimelineResponse:
    """Every doctor with their appointments scheduled on `day`, in query order."""
    day_start = datetime.combine(day, time(0, 0, 0))
    day_end = datetime.combine(day, time(23, 59, 59))

    per_doctor: list[tuple[int, str, list[Appointment]]] = []
    for doctor in await list_doctors(session):
        appointments = await list_appointments_for_doctor_between(
            session, doctor.full_name, day_start, day_end
        )
        per_doctor.append((doctor.id, doctor.full_name, appointments))

    patient_ids = {a.patient_id for _, _, appts in per_doctor for a in appts if a.patient_id is not None}
    patients = await get_patients_by_ids(session, patient_ids)

    return TimelineResponse(
        doctors=[
            DoctorSchedule(
                id=doctor_id,
                name=name,
                appointments=[_to_timeline_entry(a, patients) for a in appointments],
            )
            for doctor_id, name, appointments in per_doctor
        ]
    )
