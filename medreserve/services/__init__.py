# =============================================================================
# medreserve/services/__init__.py
# Service Layer for the MedReserve client core
# =============================================================================
"""
Service Layer

Usage Example:
-------------
    from medreserve.services import AuthService

    auth = AuthService(AuthAPI(client), store)
    auth.initialize()
    result = auth.safe_execute("Login", auth.login, credentials)
    if result.success:
        print(result.data["role"])
"""

from .base_service import BaseService, ServiceResult
from .auth_service import AuthService

__all__ = [
    "BaseService",
    "ServiceResult",
    "AuthService",
]
