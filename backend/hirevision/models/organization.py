from sqlalchemy import JSON, Column, Text
from hirevision.database import Base


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(Text, primary_key=True)
    name = Column(Text, nullable=False)
    domains = Column(JSON, nullable=False, default=list)
    created_at = Column(Text, nullable=False)
