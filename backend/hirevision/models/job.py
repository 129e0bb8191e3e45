from sqlalchemy import JSON, Boolean, Column, Text
from sqlalchemy.orm import relationship
from hirevision.database import Base


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Text, primary_key=True)
    organization_id = Column(Text, nullable=False)
    created_by = Column(Text)
    title = Column(Text, nullable=False)
    company = Column(Text)
    department = Column(Text)
    location = Column(Text)
    is_remote = Column(Boolean, nullable=False, default=False)
    employment_type = Column(Text)
    salary_range = Column(Text)
    description = Column(Text, nullable=False)
    requirements = Column(Text)
    responsibilities = Column(Text)
    skills = Column(JSON, nullable=False, default=list)
    experience_required = Column(Text)
    status = Column(Text, nullable=False, default="open")
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    applications = relationship("Application", back_populates="job", cascade="all, delete-orphan")
