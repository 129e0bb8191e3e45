from sqlalchemy import JSON, Column, ForeignKey, Integer, Text
from hirevision.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Text, primary_key=True)
    email = Column(Text, nullable=False, unique=True)
    display_name = Column(Text, nullable=False)
    role = Column(Text, nullable=False, default="Candidate")
    organization_id = Column(Text, ForeignKey("organizations.id", ondelete="SET NULL"))
    password_hash = Column(Text)
    sso_provider = Column(Text)
    sso_id = Column(Text)
    headline = Column(Text)
    bio = Column(Text)
    location = Column(Text)
    skills = Column(JSON, nullable=False, default=list)
    years_of_experience = Column(Integer)
    avatar_url = Column(Text)
    resume_key = Column(Text)
    resume_text = Column(Text)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=False)
