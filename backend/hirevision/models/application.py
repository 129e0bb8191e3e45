from sqlalchemy import Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from hirevision.database import Base


class Application(Base):
    __tablename__ = "applications"

    id = Column(Text, primary_key=True)
    job_id = Column(Text, ForeignKey("jobs.id"), nullable=False)
    candidate_id = Column(Text, ForeignKey("users.id"), nullable=False)
    status = Column(Text, nullable=False, default="applied")
    cover_letter = Column(Text)
    resume_key = Column(Text)
    fit_score = Column(Integer)
    fit_reasoning = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    job = relationship("Job", back_populates="applications")
    candidate = relationship("User")
    interviews = relationship("Interview", back_populates="application", cascade="all, delete-orphan")
