"""
High-level Pgyer client.

Example:
    >>> async with PgyerClient() as pgyer:
    ...     outcome = await pgyer.run(api_key, artifact_file=Path('app-release.apk'))
    ...     if outcome.is_success:
    ...         print(outcome.value)
"""
from pathlib import Path
from typing import Optional, Union

from .core.api import APIConfig, AsyncTransport, DEFAULT_PASSWORD, Outcome
from .core.exceptions import InputError
from .core.logging import get_logger
from .core.upload import ArtifactResolver, FileValidator, UploadFlow


class PgyerClient:
    """
    Uploads build artifacts to Pgyer.
    
    Owns one transport; each ``run`` uses a fresh UploadFlow, so several runs
    may be awaited concurrently on the same client.
    """
    
    def __init__(
        self,
        config: Optional[APIConfig] = None,
        transport: Optional[AsyncTransport] = None
    ):
        """
        Initialize client.
        
        Args:
            config: API configuration (defaults to APIConfig.default())
            transport: Transport to use instead of creating one
        """
        self._config = config or (transport.config if transport else APIConfig.default())
        self._transport = transport or AsyncTransport(self._config)
        self._validator = FileValidator()
        self._resolver = ArtifactResolver()
        self._logger = get_logger('pgyerpy.client')
    
    @property
    def config(self) -> APIConfig:
        return self._config
    
    async def __aenter__(self) -> 'PgyerClient':
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
    
    async def close(self):
        await self._transport.close()
    
    def resolve_artifact(self, path: Union[str, Path]) -> Path:
        """Resolve a file or build output directory to exactly one artifact."""
        return self._resolver.resolve(path)
    
    def create_flow(self) -> UploadFlow:
        return UploadFlow(self._transport, self._config)
    
    async def run(
        self,
        api_key: Optional[str],
        password: Optional[str] = DEFAULT_PASSWORD,
        artifact_file: Union[str, Path, None] = None
    ) -> Outcome[str]:
        """
        Upload one artifact.
        
        Args:
            api_key: Pgyer API key
            password: Download password, DEFAULT_PASSWORD when empty
            artifact_file: Resolved build output
            
        Returns:
            Success with the download URL, or Failure with the cause
            
        Raises:
            InputError: Missing API key or invalid artifact; raised before
                any request is sent
        """
        if not api_key:
            raise InputError("Missing API key (set PGY_API_KEY)")
        if artifact_file is None:
            raise InputError("No artifact to upload")
        path, size = self._validator.validate(artifact_file)
        
        self._logger.info(f"Uploading {path.name} ({size:,} bytes)")
        flow = self.create_flow()
        return await flow.start(api_key, password or DEFAULT_PASSWORD, path)
