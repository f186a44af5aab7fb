from pydantic import EmailStr
from sqlmodel import Field, SQLModel


class PatientBase(SQLModel):
    first_name: str
    last_name: str
    contact_number: str | None = None


class Patient(PatientBase, table=True):
    __tablename__ = "patients"
    id: int | None = Field(default=None, primary_key=True)
    email: str | None = Field(default=None, index=True)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class PatientCreate(PatientBase):
    email: EmailStr | None = None


class PatientPublic(PatientBase):
    id: int
    email: str | None = None
