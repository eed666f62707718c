"""Tests for AsyncTransport against a local aiohttp server."""
import asyncio
import json
import logging
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp import test_utils

from pgyerpy.core.api import APIConfig, AsyncTransport, Envelope, RequestSpec, TimeoutConfig, capture
from pgyerpy.core.exceptions import DecodeError, TransportError
from pgyerpy.core.request import FilePart


async def token(request):
    form = await request.post()
    if form.get('_api_key') != 'good':
        return web.json_response({'code': 1001, 'message': 'bad key'})
    return web.json_response({
        'code': 200,
        'message': '',
        'data': {'echo': dict(form), 'content_type': request.content_type},
    })


async def upload(request):
    form = await request.post()
    field = form['file']
    return web.json_response({
        'code': 200,
        'message': '',
        'data': {
            'params': {k: v for k, v in form.items() if isinstance(v, str)},
            'filename': field.filename,
            'size': len(field.file.read()),
        },
    })


async def no_content(request):
    await request.read()
    return web.Response(status=204)


async def forbidden(request):
    return web.Response(status=403, text='AccessDenied')


async def not_json(request):
    return web.Response(status=200, text='<html>oops</html>')


async def headers(request):
    return web.json_response({
        'code': 200,
        'message': '',
        'data': {'x-test': request.headers.get('X-Test'), 'ua': request.headers.get('User-Agent')},
    })


async def slow(request):
    await asyncio.sleep(1)
    return web.json_response({'code': 200})


async def echo_json(request):
    return web.json_response({'code': 200, 'message': '', 'data': await request.json()})


async def garbled_error(request):
    return web.Response(
        status=500, body=b"\xff\xfe gateway \x80 error", content_type="text/plain", charset="utf-8"
    )


async def garbled_ok(request):
    return web.Response(body=b"\xff{\"code\": 200}", content_type="application/json", charset="utf-8")


@pytest_asyncio.fixture
async def server():
    app = web.Application()
    app.router.add_post('/token', token)
    app.router.add_post('/upload', upload)
    app.router.add_post('/cos', no_content)
    app.router.add_get('/forbidden', forbidden)
    app.router.add_get('/not-json', not_json)
    app.router.add_get('/headers', headers)
    app.router.add_get('/slow', slow)
    app.router.add_post('/json', echo_json)
    app.router.add_get('/garbled-error', garbled_error)
    app.router.add_get('/garbled-ok', garbled_ok)
    test_server = test_utils.TestServer(app)
    await test_server.start_server()
    yield test_server
    await test_server.close()


@pytest_asyncio.fixture
async def transport():
    async with AsyncTransport(APIConfig(user_agent='pgyerpy-tests')) as t:
        yield t


class TestAsyncTransport:
    """Test suite for AsyncTransport."""
    
    @pytest.mark.asyncio
    async def test_post_form_decodes_envelope(self, server, transport):
        envelope = await transport.post_form(
            str(server.make_url('/token')),
            {'_api_key': 'good', 'buildType': 'apk'},
        )
        
        assert envelope.code == 200
        assert envelope.data['echo'] == {'_api_key': 'good', 'buildType': 'apk'}
        assert envelope.data['content_type'] == 'application/x-www-form-urlencoded'
    
    @pytest.mark.asyncio
    async def test_application_failure_is_decoded(self, server, transport):
        envelope = await transport.post_form(str(server.make_url('/token')), {'_api_key': 'bad'})
        
        assert envelope == Envelope(1001, 'bad key', None)
    
    @pytest.mark.asyncio
    async def test_data_parser(self, server, transport):
        envelope = await transport.post_form(
            str(server.make_url('/token')),
            {'_api_key': 'good'},
            data_parser=lambda data: data['echo']['_api_key'],
        )
        
        assert envelope.data == 'good'
    
    @pytest.mark.asyncio
    async def test_upload_multipart(self, server, transport, apk_bytes):
        """Test the server's multipart parser accepts the body."""
        envelope = await transport.upload(
            str(server.make_url('/upload')),
            FilePart('app-release.apk', apk_bytes),
            {'key': 'abc123.apk', 'signature': 'sig'},
        )
        
        assert envelope.is_successful
        assert envelope.data == {
            'params': {'key': 'abc123.apk', 'signature': 'sig'},
            'filename': 'app-release.apk',
            'size': len(apk_bytes),
        }
    
    @pytest.mark.asyncio
    async def test_post_json(self, server, transport):
        envelope = await transport.post_json(str(server.make_url('/json')), json.dumps({'a': [1, 2]}))
        
        assert envelope.data == {'a': [1, 2]}
    
    @pytest.mark.asyncio
    async def test_no_content_fallback(self, server, transport):
        """Test a 204 upload response maps to a successful raw envelope."""
        envelope = await transport.upload(str(server.make_url('/cos')), FilePart('a.apk', b'1'))
        
        assert envelope == Envelope(204, '', '')
        assert envelope.is_successful
    
    @pytest.mark.asyncio
    async def test_non_200_fallback(self, server, transport):
        envelope = await transport.get(str(server.make_url('/forbidden')))
        
        assert envelope == Envelope(403, 'AccessDenied', 'AccessDenied')
    
    @pytest.mark.asyncio
    async def test_invalid_json_raises_decode_error(self, server, transport):
        with pytest.raises(DecodeError):
            await transport.get(str(server.make_url('/not-json')))
    
    @pytest.mark.asyncio
    async def test_headers_applied(self, server, transport):
        envelope = await transport.get(str(server.make_url('/headers')), {'X-Test': 'yes'})
        
        assert envelope.data == {'x-test': 'yes', 'ua': 'pgyerpy-tests'}
    
    @pytest.mark.asyncio
    async def test_connection_refused(self, transport):
        closed = test_utils.TestServer(web.Application())
        await closed.start_server()
        url = str(closed.make_url('/token'))
        await closed.close()
        
        with pytest.raises(TransportError) as exc_info:
            await transport.send(RequestSpec.get(url))
        
        assert exc_info.value.__cause__ is not None
    
    @pytest.mark.asyncio
    async def test_timeout(self, server):
        config = APIConfig(timeout=TimeoutConfig(total=0.2, connect=0.2, sock_read=0.2, sock_connect=0.2))
        async with AsyncTransport(config) as transport:
            with pytest.raises(TransportError):
                await transport.get(str(server.make_url('/slow')))
    
    @pytest.mark.asyncio
    async def test_cancellation_aborts_request(self, server, transport):
        task = asyncio.create_task(transport.get(str(server.make_url('/slow'))))
        await asyncio.sleep(0.1)
        task.cancel()
        
        with pytest.raises(asyncio.CancelledError):
            await task
    
    @pytest.mark.asyncio
    async def test_logs_one_line_per_request(self, server, caplog):
        caplog.set_level(logging.INFO, logger='pgyerpy.http')
        url = str(server.make_url('/forbidden'))
        
        async with AsyncTransport() as transport:
            await transport.get(url)
        
        records = [r for r in caplog.records if r.name == 'pgyerpy.http']
        assert len(records) == 1
        assert f"GET {url} -> 403" in records[0].getMessage()
        assert "ms)" in records[0].getMessage()
    
    @pytest.mark.asyncio
    async def test_close_is_idempotent(self):
        transport = AsyncTransport()
        await transport.close()
        await transport.close()
    
    @pytest.mark.asyncio
    async def test_invalid_utf8_error_body_is_replaced(self, server, transport):
        """Test undecodable bytes in a non-200 body still give a raw envelope."""
        envelope = await transport.get(str(server.make_url('/garbled-error')))
        
        assert envelope.code == 500
        assert 'gateway' in envelope.message
        assert '\ufffd' in envelope.message
        assert envelope.data == envelope.message
    
    @pytest.mark.asyncio
    async def test_invalid_utf8_error_body_outcome(self, server, transport, caplog):
        caplog.set_level(logging.INFO, logger='pgyerpy.http')
        
        outcome = await capture(transport.get(str(server.make_url('/garbled-error'))))
        
        assert outcome.is_failure
        assert outcome.cause.startswith('code=500, message=')
        assert any('-> 500' in r.getMessage() for r in caplog.records if r.name == 'pgyerpy.http')
    
    @pytest.mark.asyncio
    async def test_invalid_utf8_ok_body_raises_decode_error(self, server, transport):
        with pytest.raises(DecodeError):
            await transport.get(str(server.make_url('/garbled-ok')))
    
    def test_log_level_applied_without_handlers(self, monkeypatch):
        monkeypatch.setattr(logging.getLogger(), 'handlers', [])
        logger = logging.getLogger('pgyerpy.http')
        previous = logger.level
        try:
            AsyncTransport(APIConfig(log_level=logging.DEBUG))
            
            assert logger.level == logging.DEBUG
        finally:
            logger.setLevel(previous)
