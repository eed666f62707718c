"""
HTTP layer for the Pgyer API.

Exports:
- AsyncTransport: aiohttp based transport
- Envelope, RequestSpec: request/response models
- Success, Failure, to_outcome, capture: outcome mapping
- APIConfig and sub-configurations
"""
from .config import (
    APIConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    UploadSettings,
    DEFAULT_PASSWORD,
)
from .models import Envelope, RequestSpec
from .result import Success, Failure, Outcome, to_outcome, capture
from .transport import AsyncTransport

__all__ = [
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'UploadSettings',
    'DEFAULT_PASSWORD',
    'Envelope',
    'RequestSpec',
    'Success',
    'Failure',
    'Outcome',
    'to_outcome',
    'capture',
    'AsyncTransport',
]
