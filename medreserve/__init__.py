"""
MedReserve client core.

    from medreserve.client import MedReserveClient

    client = MedReserveClient.from_settings()
    doctors = client.data.fetch("doctors")
"""

__version__ = "0.1.0"
