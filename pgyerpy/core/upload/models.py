"""
Data models for upload module.

Uses dataclasses for immutable, type-safe data structures.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from ..exceptions import DecodeError

APK_SUFFIX = '.apk'


class UploadState(Enum):
    """Lifecycle of an UploadFlow."""
    IDLE = 'idle'
    FETCHING_CREDENTIALS = 'fetching_credentials'
    UPLOADING = 'uploading'
    DONE = 'done'


def _require_str(data: Dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise DecodeError(f"Missing or invalid '{key}' in {where}")
    return value


@dataclass(frozen=True)
class CredentialSet:
    """
    Time-limited COS upload credentials for one file.
    
    Attributes:
        endpoint: URL the multipart upload is posted to
        key: Object key assigned to the build (e.g. ``abc123.apk``)
        signature: Upload signature
        security_token: Value of the ``x-cos-security-token`` field
    
    Decoded from:
        {"endpoint": ..., "key": ...,
         "params": {"key": ..., "signature": ..., "x-cos-security-token": ...}}
    """
    endpoint: str
    key: str
    signature: str
    security_token: str
    
    @classmethod
    def from_data(cls, data: Any) -> 'CredentialSet':
        """
        Decode the ``data`` member of a token envelope.
        
        Raises:
            DecodeError: If a field is missing or not a string
        """
        if not isinstance(data, dict):
            raise DecodeError("Token response data must be an object")
        params = data.get('params')
        if not isinstance(params, dict):
            raise DecodeError("Missing or invalid 'params' in token response data")
        return cls(
            endpoint=_require_str(data, 'endpoint', 'token response data'),
            key=_require_str(data, 'key', 'token response data'),
            signature=_require_str(params, 'signature', 'token params'),
            security_token=_require_str(params, 'x-cos-security-token', 'token params'),
        )
    
    @property
    def build_id(self) -> str:
        """Key without its trailing ``.apk``, used in the download URL."""
        head, sep, _ = self.key.rpartition(APK_SUFFIX)
        return head if sep else self.key
    
    def upload_parameters(self, file_name: str) -> Dict[str, str]:
        """Multipart text fields sent alongside the file."""
        return {
            'key': self.key,
            'signature': self.signature,
            'x-cos-security-token': self.security_token,
            'x-cos-meta-file-name': file_name,
        }
