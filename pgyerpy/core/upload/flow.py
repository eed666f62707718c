"""
Two-step upload flow: fetch COS credentials, then upload the artifact.

The second request is only built once the first one produced a Success, so
a failed credential call never leads to a partial upload.
"""
from pathlib import Path
from typing import Optional, Union

from ..api.config import APIConfig
from ..api.models import Envelope, RequestSpec
from ..api.result import Failure, Outcome, Success, capture
from ..api.transport import AsyncTransport
from ..exceptions import InputError
from ..logging import get_logger
from ..request import FormBodyBuilder, MultipartBodyBuilder
from .models import CredentialSet, UploadState
from .services import AsyncFileReader

BUILD_TYPE = 'apk'


class UploadFlow:
    """
    State machine for one artifact upload.
    
    IDLE -> FETCHING_CREDENTIALS -> UPLOADING -> DONE
    
    A flow runs once; create a new instance per artifact.
    
    Example:
        >>> flow = UploadFlow(transport)
        >>> outcome = await flow.start(api_key, password, Path('app-release.apk'))
        >>> outcome.is_success
        True
    """
    
    def __init__(
        self,
        transport: AsyncTransport,
        config: Optional[APIConfig] = None,
        reader: Optional[AsyncFileReader] = None
    ):
        self._transport = transport
        self._config = config or transport.config
        self._reader = reader or AsyncFileReader()
        self._state = UploadState.IDLE
        self._credentials: Optional[CredentialSet] = None
        self._outcome: Optional[Outcome[str]] = None
        self._logger = get_logger('pgyerpy.upload')
    
    @property
    def state(self) -> UploadState:
        return self._state
    
    @property
    def outcome(self) -> Optional[Outcome[str]]:
        """Terminal outcome, None until the flow is DONE."""
        return self._outcome
    
    @property
    def display_id(self) -> Optional[str]:
        """Build id derived from the credential key, once credentials are known."""
        return self._credentials.build_id if self._credentials else None
    
    def _transition(self, state: UploadState):
        self._logger.debug(f"{self._state.value} -> {state.value}")
        self._state = state
    
    def _finish(self, outcome: Outcome[str]) -> Outcome[str]:
        self._outcome = outcome
        self._transition(UploadState.DONE)
        return outcome
    
    def token_request(self, api_key: str, password: str) -> RequestSpec:
        """Form request asking for upload credentials."""
        form = {
            '_api_key': api_key,
            'buildType': BUILD_TYPE,
            'buildPassword': password,
        }
        return RequestSpec.with_body('POST', self._config.token_url, FormBodyBuilder(form))
    
    async def upload_request(self, file: Path, credentials: CredentialSet) -> RequestSpec:
        """Multipart request posting ``file`` to the credential endpoint."""
        part = await self._reader.read_part(file)
        builder = MultipartBodyBuilder(
            {'file': part},
            credentials.upload_parameters(file.stem),
        )
        return RequestSpec.with_body('POST', credentials.endpoint, builder)
    
    async def _upload(self, file: Path, credentials: CredentialSet) -> Envelope:
        spec = await self.upload_request(file, credentials)
        return await self._transport.send(spec)
    
    async def start(
        self,
        api_key: str,
        password: str,
        file: Union[str, Path]
    ) -> Outcome[str]:
        """
        Run the flow to completion.
        
        Returns:
            Success with the download URL, or Failure with the first error
            
        Raises:
            InputError: If the flow was already started
        """
        if self._state is not UploadState.IDLE:
            raise InputError(f"Upload flow already {self._state.value}")
        file = Path(file)
        
        self._transition(UploadState.FETCHING_CREDENTIALS)
        token = await capture(
            self._transport.send(self.token_request(api_key, password), CredentialSet.from_data)
        )
        if isinstance(token, Failure):
            self._logger.warning(f"Credential request failed: {token.cause}")
            return self._finish(token)
        
        self._credentials = token.value
        self._transition(UploadState.UPLOADING)
        uploaded = await capture(self._upload(file, self._credentials))
        if isinstance(uploaded, Failure):
            self._logger.warning(f"Upload of {file.name} failed: {uploaded.cause}")
            return self._finish(uploaded)
        
        url = self._config.download_url(self._credentials.build_id)
        self._logger.info(f"Uploaded {file.name} as {self._credentials.key}")
        return self._finish(Success(url))
