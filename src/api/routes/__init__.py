from fastapi import FastAPI
from src.core.config import get_settings

from . import auth, bootcamps, courses, health, reviews, users


def register_routes(app: FastAPI) -> None:
    """Attach all API routers; resource routers live under the versioned prefix."""
    prefix = get_settings().api_prefix
    app.include_router(health.router)
    app.include_router(auth.router, prefix=prefix)
    app.include_router(bootcamps.router, prefix=prefix)
    app.include_router(courses.router, prefix=prefix)
    app.include_router(reviews.router, prefix=prefix)
    app.include_router(users.router, prefix=prefix)
