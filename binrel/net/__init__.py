"""Network probes."""

from .http import HttpError, HttpProbe, MockHttpClient, RealHttpClient

__all__ = ["HttpError", "HttpProbe", "MockHttpClient", "RealHttpClient"]
