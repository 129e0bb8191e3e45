from sqlalchemy import JSON, Column, Text
from hirevision.database import Base


class Post(Base):
    __tablename__ = "posts"

    id = Column(Text, primary_key=True)
    author_id = Column(Text, nullable=False)
    author_name = Column(Text, nullable=False)
    author_username = Column(Text, nullable=False)
    author_avatar = Column(Text)
    content = Column(Text, nullable=False)
    image_key = Column(Text)
    hashtags = Column(JSON, nullable=False, default=list)
    likes = Column(JSON, nullable=False, default=list)  # liker user ids
    comments = Column(JSON, nullable=False, default=list)
    created_at = Column(Text, nullable=False)


class Connection(Base):
    __tablename__ = "connections"

    id = Column(Text, primary_key=True)
    requester_id = Column(Text, nullable=False)
    receiver_id = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="pending")
    created_at = Column(Text, nullable=False)
