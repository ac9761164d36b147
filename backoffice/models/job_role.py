"""
Job roles and the priority-ordered job titles that can fill them
"""
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from backoffice.database import Base
from backoffice.models.enums import Department


class JobRole(Base):
    __tablename__ = "job_roles"

    id = Column(Integer, primary_key=True, index=True)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False, index=True)
    name = Column(String, nullable=False)  # "Bartender", "Line Chef", ...
    department = Column(SQLEnum(Department, native_enum=False), nullable=False)
    is_active = Column(Boolean, default=True)

    location = relationship("Location")


class JobRoleMapping(Base):
    """A job title accepted for a role, ranked by priority (1 = first choice)"""
    __tablename__ = "job_role_mappings"

    id = Column(Integer, primary_key=True, index=True)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False, index=True)
    job_role_id = Column(Integer, ForeignKey("job_roles.id"), nullable=False, index=True)
    job_title = Column(String, nullable=False)
    priority = Column(Integer, nullable=False)

    job_role = relationship("JobRole")
