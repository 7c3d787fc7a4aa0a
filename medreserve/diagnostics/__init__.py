"""Backend integration diagnostics"""

from .api_tester import APITester, EndpointCheck, CATEGORIES

__all__ = ["APITester", "EndpointCheck", "CATEGORIES"]
