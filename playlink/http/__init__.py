# Playlink HTTP Module
# Outbound requests with uniform responses

from playlink.errors import NetworkError
from playlink.http.client import HttpClient, Response

__all__ = [
    "HttpClient",
    "NetworkError",
    "Response",
]
