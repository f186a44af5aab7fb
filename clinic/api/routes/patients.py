from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from clinic.api.deps import get_session
from clinic.models.patient import PatientCreate, PatientPublic
from clinic.services.patient_service import create_patient, get_patient, list_patients

router = APIRouter(prefix="/patients", tags=["patients"])


@router.get("", response_model=list[PatientPublic])
async def all_patients(session: AsyncSession = Depends(get_session)) -> list[PatientPublic]:
    return [PatientPublic.model_validate(p) for p in await list_patients(session)]


@router.get("/{patient_id}", response_model=PatientPublic)
async def read_patient(patient_id: int, session: AsyncSession = Depends(get_session)) -> PatientPublic:
    patient = await get_patient(session, patient_id)
    if not patient:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Patient not found")
    return PatientPublic.model_validate(patient)


@router.post("", response_model=PatientPublic, status_code=status.HTTP_201_CREATED)
async def register_patient(body: PatientCreate, session: AsyncSession = Depends(get_session)) -> PatientPublic:
    patient = await create_patient(session, body)
    return PatientPublic.model_validate(patient)
