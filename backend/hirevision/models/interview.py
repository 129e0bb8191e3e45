from sqlalchemy import JSON, Column, ForeignKey, Integer, Text
from sqlalchemy.orm import relationship
from hirevision.database import Base


class Interview(Base):
    __tablename__ = "interviews"

    id = Column(Text, primary_key=True)
    application_id = Column(Text, ForeignKey("applications.id"), nullable=False)
    organization_id = Column(Text)
    scheduled_at = Column(Text, nullable=False)
    type = Column(Text, nullable=False, default="video")
    status = Column(Text, nullable=False, default="scheduled")
    duration_minutes = Column(Integer, nullable=False, default=60)
    location = Column(Text)
    notes = Column(Text)
    interviewer_ids = Column(JSON, nullable=False, default=list)
    # [{interviewer_id, interviewer_name, rating, recommendation, comments, created_at}]
    feedback = Column(JSON, nullable=False, default=list)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)

    application = relationship("Application", back_populates="interviews")
