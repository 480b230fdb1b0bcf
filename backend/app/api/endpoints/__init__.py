# API endpoints
from . import announcements, assignments, auth, events, files, materials, users

__all__ = ["announcements", "assignments", "auth", "events", "files", "materials", "users"]
