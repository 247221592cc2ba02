"""
Account pipelines.

Stateless orchestration functions called by the routers.
"""

from accounts.pipelines import users

__all__ = ["users"]
