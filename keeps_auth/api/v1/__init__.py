"""
API v1 package.

Contains versioned API routes for the verification link issuer.
"""

from keeps_auth.api.v1.routes import router

__all__ = ["router"]
