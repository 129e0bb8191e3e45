from hirevision.models.organization import Organization
from hirevision.models.user import User
from hirevision.models.job import Job
from hirevision.models.application import Application
from hirevision.models.interview import Interview
from hirevision.models.conversation import Conversation, Message
from hirevision.models.post import Connection, Post

__all__ = [
    "Organization", "User", "Job", "Application", "Interview",
    "Conversation", "Message", "Post", "Connection",
]
