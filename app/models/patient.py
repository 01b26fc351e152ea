"""Patient contact details used as notification destinations."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin


class PatientContact(Base, TimestampMixin):
    """Email address and phone number on file for a patient."""

    __tablename__ = "patient_contacts"

    patient_id: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
        index=True,
    )
    email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    # E.164 format
    phone_number: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<PatientContact {self.patient_id}>"
