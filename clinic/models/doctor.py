from sqlmodel import Field, SQLModel


class DoctorBase(SQLModel):
    first_name: str
    last_name: str
    specialization: str | None = None
    department: str | None = None


class Doctor(DoctorBase, table=True):
    __tablename__ = "doctors"
    id: int | None = Field(default=None, primary_key=True)

    @property
    def full_name(self) -> str:
        """Lookup key used by appointments (Appointment.doctor_name)."""
        return f"{self.first_name} {self.last_name}"


class DoctorCreate(DoctorBase):
    pass


class DoctorPublic(DoctorBase):
    id: int
    full_name: str
