from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.api.deps import get_session
from clinic.models.doctor import DoctorCreate, DoctorPublic
from clinic.services.doctor_service import create_doctor, doctor_to_public, get_doctor, list_doctors

router = APIRouter(prefix="/doctors", tags=["doctors"])


@router.get("", response_model=list[DoctorPublic])
async def all_doctors(session: AsyncSession = Depends(get_session)) -> list[DoctorPublic]:
    return [doctor_to_public(d) for d in await list_doctors(session)]


@router.get("/{doctor_id}", response_model=DoctorPublic)
async def read_doctor(doctor_id: int, session: AsyncSession = Depends(get_session)) -> DoctorPublic:
    doctor = await get_doctor(session, doctor_id)
    if not doctor:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Doctor not found")
    return doctor_to_public(doctor)


@router.post("", response_model=DoctorPublic, status_code=status.HTTP_201_CREATED)
async def register_doctor(body: DoctorCreate, session: AsyncSession = Depends(get_session)) -> DoctorPublic:
    doctor = await create_doctor(session, body)
    return doctor_to_public(doctor)
