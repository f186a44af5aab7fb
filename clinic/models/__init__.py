from clinic.models.doctor import Doctor, DoctorCreate, DoctorPublic
from clinic.models.patient import Patient, PatientCreate, PatientPublic
from clinic.models.appointment import (
    Appointment,
    AppointmentCreate,
    AppointmentPublic,
    AppointmentUpdate,
)

__all__ = [
    "Doctor",
    "DoctorCreate",
    "DoctorPublic",
    "Patient",
    "PatientCreate",
    "PatientPublic",
    "Appointment",
    "AppointmentCreate",
    "AppointmentPublic",
    "AppointmentUpdate",
]
