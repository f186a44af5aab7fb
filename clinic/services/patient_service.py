from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.models.patient import Patient, PatientCreate


async def create_patient(session: AsyncSession, data: PatientCreate) -> Patient:
    patient = Patient(
        first_name=data.first_name,
        last_name=data.last_name,
        contact_number=data.contact_number,
        email=str(data.email) if data.email else None,
    )
    session.add(patient)
    await session.flush()
    await session.refresh(patient)
    return patient


async def get_patient(session: AsyncSession, patient_id: int) -> Patient | None:
    result = await session.execute(select(Patient).where(Patient.id == patient_id))
    return result.scalar_one_or_none()


async def get_patients_by_ids(session: AsyncSession, patient_ids: set[int]) -> dict[int, Patient]:
    if not patient_ids:
        return {}
    result = await session.execute(select(Patient).where(Patient.id.in_(patient_ids)))
    return {p.id: p for p in result.scalars().all()}


async def list_patients(session: AsyncSession) -> list[Patient]:
    result = await session.execute(select(Patient).order_by(Patient.last_name, Patient.first_name))
    return list(result.scalars().all())
