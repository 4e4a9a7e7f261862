"""
Clients for external APIs
"""

from .myfatoorah_client import MyFatoorahClient

__all__ = [
    "MyFatoorahClient",
]
