"""Upload services module."""
from .file_service import FileValidator, AsyncFileReader, ArtifactResolver

__all__ = [
    'FileValidator',
    'AsyncFileReader',
    'ArtifactResolver',
]
