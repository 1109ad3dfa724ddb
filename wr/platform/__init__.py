"""Platform adapters: subprocesses, HTTP and signals."""

from .http import HttpClient, HttpError, MockHttpClient, RealHttpClient
from .process import ProcessError, run
from .signals import interrupt_sets

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "ProcessError",
    "RealHttpClient",
    "interrupt_sets",
    "run",
]
