"""
Data models for the HTTP layer.

Uses frozen dataclasses: a RequestSpec is built once per call and an
Envelope is created once per completed request.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Generic, Mapping, Optional, TypeVar

from ..exceptions import DecodeError
from ..request import RequestBodyBuilder

T = TypeVar('T')

SUCCESS_CODES = (200, 204)


@dataclass(frozen=True)
class Envelope(Generic[T]):
    """
    Uniform ``{code, message, data}`` wrapper of every API response.
    
    Attributes:
        code: Application status code (or HTTP status for raw fallbacks)
        message: Human readable message
        data: Decoded payload
    """
    code: int
    message: str
    data: T
    
    @property
    def is_successful(self) -> bool:
        return self.code in SUCCESS_CODES
    
    @classmethod
    def from_payload(
        cls,
        payload: Any,
        data_parser: Optional[Callable[[Any], T]] = None
    ) -> 'Envelope[T]':
        """
        Decode a parsed JSON document into an envelope.
        
        ``data`` only goes through ``data_parser`` when the envelope is
        successful; failed envelopes keep the raw value (often missing).
        
        Raises:
            DecodeError: If the payload does not match the envelope schema
        """
        if not isinstance(payload, dict):
            raise DecodeError(
                f"Expected a JSON object envelope, got {type(payload).__name__}"
            )
        
        code = payload.get('code', 0)
        message = payload.get('message', '')
        if isinstance(code, bool) or not isinstance(code, int):
            raise DecodeError(f"Envelope 'code' must be an integer, got {code!r}")
        if message is None:
            message = ''
        if not isinstance(message, str):
            raise DecodeError(f"Envelope 'message' must be a string, got {message!r}")
        
        data = payload.get('data')
        if data_parser is not None and code in SUCCESS_CODES:
            try:
                data = data_parser(data)
            except DecodeError:
                raise
            except (KeyError, TypeError, ValueError) as e:
                raise DecodeError(f"Invalid envelope data: {e}") from e
        
        return cls(code=code, message=message, data=data)
    
    @classmethod
    def from_raw(cls, status: int, body: str) -> 'Envelope[str]':
        """String-typed fallback for responses whose HTTP status is not 200."""
        return Envelope(code=status, message=body, data=body)


@dataclass(frozen=True)
class RequestSpec:
    """
    A fully built HTTP request.
    
    Attributes:
        method: HTTP method
        url: Target URL
        headers: Extra headers applied as-is (read-only copy)
        body: Encoded body (None for body-less requests)
        content_type: Content-Type of the body
    """
    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    content_type: Optional[str] = None
    
    def __post_init__(self):
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
    
    @classmethod
    def with_body(
        cls,
        method: str,
        url: str,
        builder: RequestBodyBuilder,
        headers: Optional[Mapping[str, str]] = None
    ) -> 'RequestSpec':
        """Build a request whose body and content type come from ``builder``."""
        content_type = builder.content_type()
        return cls(
            method=method,
            url=url,
            headers=headers or {},
            body=builder.build(),
            content_type=content_type,
        )
    
    @classmethod
    def get(cls, url: str, headers: Optional[Mapping[str, str]] = None) -> 'RequestSpec':
        return cls(method='GET', url=url, headers=headers or {})
    
    def all_headers(self) -> Dict[str, str]:
        """Headers to send, Content-Type included when there is a body."""
        headers = dict(self.headers)
        if self.content_type:
            headers['Content-Type'] = self.content_type
        return headers
