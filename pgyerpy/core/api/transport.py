"""
Async HTTP transport.

Sends a RequestSpec through aiohttp and decodes the response into an
Envelope without blocking the event loop.
"""
import json
import asyncio
import logging
import time
from typing import Any, Callable, Mapping, Optional, TypeVar

import aiohttp

from .config import APIConfig
from .models import Envelope, RequestSpec
from ..exceptions import DecodeError, TransportError
from ..logging import get_logger
from ..request import FilePart, FormBodyBuilder, JsonBodyBuilder, MultipartBodyBuilder

T = TypeVar('T')


class AsyncTransport:
    """
    Asynchronous HTTP transport.
    
    Features:
    - One lazily created aiohttp session, reused across requests
    - Configurable proxy, SSL and timeouts
    - Envelope decoding on 200, raw string envelope otherwise
    
    Example:
        >>> async with AsyncTransport() as transport:
        ...     envelope = await transport.post_form(url, {'_api_key': key})
    """
    
    def __init__(self, config: Optional[APIConfig] = None):
        """
        Initialize transport.
        
        Args:
            config: API configuration (uses defaults if not provided)
        """
        self._config = config or APIConfig.default()
        self._session: Optional[aiohttp.ClientSession] = None
        self._logger = get_logger('pgyerpy.http')
        # Only set level if root logger has no handlers (basicConfig not called)
        if not logging.getLogger().handlers:
            self._logger.setLevel(self._config.log_level)
    
    @property
    def config(self) -> APIConfig:
        return self._config
    
    async def __aenter__(self) -> 'AsyncTransport':
        await self._ensure_session()
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
    
    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session is created and open."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(**self._config.get_connector_kwargs())
            self._session = aiohttp.ClientSession(
                connector=connector,
                version=aiohttp.HttpVersion11,
                **self._config.get_session_kwargs()
            )
        return self._session
    
    async def close(self):
        """Close the session and release connections."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
    
    async def send(
        self,
        spec: RequestSpec,
        data_parser: Optional[Callable[[Any], T]] = None
    ) -> Envelope:
        """
        Send a request and decode its response.
        
        Args:
            spec: Request to send
            data_parser: Decoder applied to ``data`` of a successful envelope
            
        Returns:
            Decoded envelope on HTTP 200, ``Envelope.from_raw`` otherwise
            
        Raises:
            TransportError: Connection, timeout or TLS failure
            DecodeError: HTTP 200 body is not a valid envelope
        """
        session = await self._ensure_session()
        proxy = self._config.proxy.to_aiohttp_proxy() if self._config.proxy else None
        
        start = time.perf_counter()
        try:
            async with session.request(
                spec.method,
                spec.url,
                data=spec.body,
                headers=spec.all_headers(),
                proxy=proxy,
                allow_redirects=True,
            ) as response:
                status = response.status
                raw = await response.read()
                body = raw.decode(response.get_encoding(), errors="replace")
        except asyncio.TimeoutError as e:
            elapsed = (time.perf_counter() - start) * 1000
            self._logger.error(f"{spec.method} {spec.url} timed out after {elapsed:.2f}ms")
            raise TransportError(f"Request to {spec.url} timed out") from e
        except aiohttp.ClientError as e:
            elapsed = (time.perf_counter() - start) * 1000
            self._logger.error(f"{spec.method} {spec.url} failed after {elapsed:.2f}ms: {e}")
            raise TransportError(f"{type(e).__name__}: {e}") from e
        
        elapsed = (time.perf_counter() - start) * 1000
        self._logger.info(f"{spec.method} {spec.url} -> {status} ({elapsed:.2f}ms)")
        
        if status != 200:
            return Envelope.from_raw(status, body)
        
        try:
            payload = json.loads(body)
        except ValueError as e:
            raise DecodeError(f"Response from {spec.url} is not valid JSON: {e}") from e
        return Envelope.from_payload(payload, data_parser)
    
    async def get(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        data_parser: Optional[Callable[[Any], T]] = None
    ) -> Envelope:
        return await self.send(RequestSpec.get(url, headers), data_parser)
    
    async def post_json(
        self,
        url: str,
        json_text: str,
        headers: Optional[Mapping[str, str]] = None,
        data_parser: Optional[Callable[[Any], T]] = None
    ) -> Envelope:
        spec = RequestSpec.with_body('POST', url, JsonBodyBuilder(json_text), headers)
        return await self.send(spec, data_parser)
    
    async def post_form(
        self,
        url: str,
        form: Mapping[str, str],
        headers: Optional[Mapping[str, str]] = None,
        data_parser: Optional[Callable[[Any], T]] = None
    ) -> Envelope:
        spec = RequestSpec.with_body('POST', url, FormBodyBuilder(form), headers)
        return await self.send(spec, data_parser)
    
    async def upload(
        self,
        url: str,
        file: FilePart,
        parameters: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        data_parser: Optional[Callable[[Any], T]] = None
    ) -> Envelope:
        """Multipart POST with ``file`` under the ``file`` field."""
        builder = MultipartBodyBuilder({'file': file}, parameters)
        spec = RequestSpec.with_body('POST', url, builder, headers)
        return await self.send(spec, data_parser)
