from fastapi import APIRouter
from app.api.endpoints import announcements, assignments, auth, events, materials, users

api_router = APIRouter()

# Session endpoints sit at the API root: /api/register, /api/login, /api/logout, /api/user
api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(announcements.router, prefix="/announcements", tags=["Announcements"])
api_router.include_router(assignments.router, prefix="/assignments", tags=["Assignments"])
api_router.include_router(materials.router, prefix="/materials", tags=["Materials"])
api_router.include_router(events.router, prefix="/events", tags=["Events"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
