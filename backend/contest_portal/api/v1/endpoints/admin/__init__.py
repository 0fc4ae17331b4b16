"""
Admin API endpoints.
All endpoints require the admin or super_admin role.
"""
from fastapi import APIRouter, Depends

from contest_portal.api.v1.endpoints.admin import users, registrations, awards, statistics, exports
from contest_portal.modules.auth.dependencies import get_current_admin

admin_router = APIRouter(prefix="/admin", dependencies=[Depends(get_current_admin)])

admin_router.include_router(users.router, prefix="/users", tags=["Admin Users"])
admin_router.include_router(registrations.router, prefix="/registrations", tags=["Admin Registrations"])
admin_router.include_router(awards.router, prefix="/awards", tags=["Admin Awards"])
admin_router.include_router(statistics.router, prefix="/statistics", tags=["Admin Statistics"])
admin_router.include_router(exports.router, prefix="/export", tags=["Admin Export"])
