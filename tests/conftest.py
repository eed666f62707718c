"""Pytest fixtures for pgyerpy tests."""
import pytest
from pathlib import Path
from unittest.mock import AsyncMock, Mock

from pgyerpy.core.api import APIConfig, Envelope


@pytest.fixture
def apk_bytes():
    """Binary payload with NUL, CR and LF bytes inside."""
    return b"PK\x03\x04\x00\x00\r\n--not-a-boundary\r\n\x00\xff" * 16


@pytest.fixture
def apk_file(tmp_path, apk_bytes):
    """Writes a fake APK to a temporary directory."""
    path = tmp_path / "app-release.apk"
    path.write_bytes(apk_bytes)
    return path


@pytest.fixture
def token_payload():
    """Returns a successful getCOSToken response body."""
    return {
        'code': 200,
        'message': '',
        'data': {
            'endpoint': 'https://up.example/x',
            'key': 'abc123.apk',
            'params': {
                'key': 'abc123.apk',
                'signature': 'sig',
                'x-cos-security-token': 'tok',
            },
        },
    }


@pytest.fixture
def api_config():
    return APIConfig()


@pytest.fixture
def make_transport(api_config):
    """
    Builds a fake transport answering by URL.
    
    ``responses`` maps a URL to a JSON payload (decoded as an envelope) or to
    an exception instance (raised).
    """
    def factory(responses):
        def respond(spec, data_parser=None):
            answer = responses[spec.url]
            if isinstance(answer, BaseException):
                raise answer
            return Envelope.from_payload(answer, data_parser)
        
        transport = Mock()
        transport.config = api_config
        transport.send = AsyncMock(side_effect=respond)
        transport.close = AsyncMock()
        return transport
    
    return factory
