"""
Custom exceptions for Pgyer upload operations.

Input and encode errors are raised before any request is sent. Transport,
decode and application errors are folded into a ``Failure`` outcome by
``pgyerpy.core.api.result.capture``.
"""
from typing import Optional


class PgyerException(Exception):
    """Base exception for all Pgyer-related errors."""
    
    def __init__(self, message: str, error_code: Optional[int] = None) -> None:
        """
        Initialize the exception.
        
        Args:
            message: Error message
            error_code: Numeric error code (if available)
        """
        self.error_code = error_code
        super().__init__(message)


class InputError(PgyerException):
    """Raised for invalid caller input: missing API key, zero or several artifacts."""
    pass


class EncodeError(PgyerException):
    """Raised when a request body cannot be encoded."""
    pass


class TransportError(PgyerException):
    """Raised when a request fails at the network level (refused, timeout, TLS)."""
    pass


class DecodeError(PgyerException):
    """Raised when a 200 response body does not match the expected envelope."""
    pass


class ApplicationError(PgyerException):
    """Raised when an envelope decoded fine but its code signals failure."""
    
    def __init__(self, code: int, message: str) -> None:
        """
        Initialize the exception.
        
        Args:
            code: Envelope code
            message: Envelope message
        """
        self.code = code
        self.message = message
        super().__init__(f"code={code}, message={message}", error_code=code)
