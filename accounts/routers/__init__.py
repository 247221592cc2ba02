"""
Account service API routers.

All routers are imported here for easy access from api.py.
"""

from accounts.routers.users import router as users_router

__all__ = [
    "users_router",
]
