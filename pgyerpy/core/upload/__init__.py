"""
Upload module for Pgyer builds.

Fetches COS credentials for a build and posts the artifact with them.
"""
from .flow import UploadFlow
from .models import CredentialSet, UploadState
from .services import FileValidator, AsyncFileReader, ArtifactResolver

__all__ = [
    'UploadFlow',
    'CredentialSet',
    'UploadState',
    'FileValidator',
    'AsyncFileReader',
    'ArtifactResolver',
]
