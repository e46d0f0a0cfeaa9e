"""
HTTP Client Module

requests-based HTTP client used by the snapshot collaborators.
"""

from .client import HttpClient, HttpError, HttpResponse

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpResponse",
]
