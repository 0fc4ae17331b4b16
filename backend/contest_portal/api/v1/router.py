from fastapi import APIRouter
from contest_portal.api.v1.endpoints import auth, users, competitions, registrations, awards, notifications
from contest_portal.api.v1.endpoints.admin import admin_router

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(competitions.router, prefix="/competitions", tags=["Competitions"])
api_router.include_router(registrations.router, prefix="/registrations", tags=["Registrations"])
api_router.include_router(awards.router, prefix="/awards", tags=["Awards"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(admin_router)
