"""
pgyerpy - Async Python uploader for Pgyer app builds.

Usage:
    >>> from pgyerpy import PgyerClient
    >>> 
    >>> async with PgyerClient() as pgyer:
    ...     outcome = await pgyer.run("api-key", artifact_file="app-release.apk")
"""
import logging
from .client import PgyerClient

from .core.api import (
    APIConfig,
    ProxyConfig,
    SSLConfig,
    TimeoutConfig,
    UploadSettings,
    DEFAULT_PASSWORD,
    AsyncTransport,
    Envelope,
    RequestSpec,
    Success,
    Failure,
    Outcome,
    to_outcome,
)
from .core.upload import UploadFlow, UploadState, CredentialSet
from .core.exceptions import (
    PgyerException,
    InputError,
    EncodeError,
    TransportError,
    DecodeError,
    ApplicationError,
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for pgyerpy modules.
    
    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'pgyerpy',
        'pgyerpy.client',
        'pgyerpy.http',
        'pgyerpy.result',
        'pgyerpy.upload',
        'pgyerpy.upload.file',
        'pgyerpy.upload.artifact',
    ]
    
    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'PgyerClient',
    'APIConfig',
    'ProxyConfig',
    'SSLConfig',
    'TimeoutConfig',
    'UploadSettings',
    'DEFAULT_PASSWORD',
    'AsyncTransport',
    'Envelope',
    'RequestSpec',
    'Success',
    'Failure',
    'Outcome',
    'to_outcome',
    'UploadFlow',
    'UploadState',
    'CredentialSet',
    'PgyerException',
    'InputError',
    'EncodeError',
    'TransportError',
    'DecodeError',
    'ApplicationError',
    'setup_logging',
]
