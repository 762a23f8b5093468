"""
Professional Model - Staff members of a clinic.
"""
import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, JSON, Numeric, String, func
from sqlalchemy.orm import relationship

from ..database import Base


class EmploymentType(str, enum.Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    FREELANCE = "FREELANCE"


class ProfessionalRole(str, enum.Enum):
    """
    Role of a professional inside the clinic.

    MEDICAL_STAFF is the only role allowed to perform treatments that
    require medical staff.
    """
    PROFESSIONAL = "PROFESSIONAL"
    MEDICAL_STAFF = "MEDICAL_STAFF"
    MANAGER = "MANAGER"


class Professional(Base):
    """
    Professional Model - Stores staff information

    Fields:
    - clinic_id: Owning clinic
    - email / password_hash: Credentials for the professional login
    - first_name, last_name, phone, bio: Profile
    - license_number: Professional license
    - specialties / certifications: Lists (JSON)
    - experience_years, employment_type, role
    - rating: Average customer rating
    - is_active: Whether the professional takes appointments
    """
    __tablename__ = "professionals"

    id = Column(Integer, primary_key=True, index=True)
    clinic_id = Column(Integer, ForeignKey("clinics.id", ondelete="CASCADE"), nullable=False, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    bio = Column(String, nullable=True)
    license_number = Column(String, nullable=True)
    specialties = Column(JSON, nullable=False, default=list)
    certifications = Column(JSON, nullable=False, default=list)
    experience_years = Column(Integer, nullable=False, default=0)
    employment_type = Column(Enum(EmploymentType), nullable=False, default=EmploymentType.FULL_TIME)
    role = Column(Enum(ProfessionalRole), nullable=False, default=ProfessionalRole.PROFESSIONAL)
    rating = Column(Numeric(3, 2), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    clinic = relationship("Clinic", back_populates="professionals")
    appointments = relationship("Appointment", back_populates="professional")

    def __repr__(self):
        return f"<Professional(id={self.id}, clinic_id={self.clinic_id})>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_medical_staff(self) -> bool:
        return self.role == ProfessionalRole.MEDICAL_STAFF
