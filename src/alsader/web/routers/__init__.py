from alsader.web.routers.admin import router as admin_router
from alsader.web.routers.auth import router as auth_router
from alsader.web.routers.documents import router as documents_router
from alsader.web.routers.metadata import router as metadata_router
from alsader.web.routers.profile import router as profile_router
from alsader.web.routers.references import router as references_router
from alsader.web.routers.reservations import router as reservations_router
from alsader.web.routers.stats import router as stats_router
from alsader.web.routers.users import router as users_router

__all__ = [
    "admin_router",
    "auth_router",
    "documents_router",
    "metadata_router",
    "profile_router",
    "references_router",
    "reservations_router",
    "stats_router",
    "users_router",
]
