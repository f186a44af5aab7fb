from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.models.doctor import Doctor, DoctorCreate, DoctorPublic


async def create_doctor(session: AsyncSession, data: DoctorCreate) -> Doctor:
    doctor = Doctor.model_validate(data)
    session.add(doctor)
    await session.flush()
    await session.refresh(doctor)
    return doctor


async def get_doctor(session: AsyncSession, doctor_id: int) -> Doctor | None:
    result = await session.execute(select(Doctor).where(Doctor.id == doctor_id))
    return result.scalar_one_or_none()


async def list_doctors(session: AsyncSession) -> list[Doctor]:
    result = await session.execute(select(Doctor).order_by(Doctor.id))
    return list(result.scalars().all())


def doctor_to_public(doctor: Doctor) -> DoctorPublic:
    return DoctorPublic(
        id=doctor.id,
        first_name=doctor.first_name,
        last_name=doctor.last_name,
        specialization=doctor.specialization,
        department=doctor.department,
        full_name=doctor.full_name,
    )
