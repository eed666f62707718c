"""
Request body builders.

One builder per encoding (JSON, URL-encoded form, multipart/form-data).
Callers pick the builder; the transport only needs ``content_type()`` and
``build()``.
"""
import json
import mimetypes
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol, Union
from urllib.parse import urlencode

from ..exceptions import EncodeError

CRLF = "\r\n"
OCTET_STREAM = "application/octet-stream"


class RequestBodyBuilder(Protocol):
    """Protocol for request body encoders."""
    
    def content_type(self) -> str:
        """Returns the Content-Type header value for the built body."""
        ...
    
    def build(self) -> bytes:
        """Returns the encoded body."""
        ...


class JsonBodyBuilder:
    """Encodes a pre-serialized JSON string."""
    
    def __init__(self, json_text: str):
        self._json = json_text
    
    def content_type(self) -> str:
        return "application/json"
    
    def build(self) -> bytes:
        try:
            json.loads(self._json)
        except (TypeError, ValueError) as e:
            raise EncodeError(f"Invalid JSON body: {e}") from e
        return self._json.encode("utf-8")


class FormBodyBuilder:
    """Encodes an ordered mapping as application/x-www-form-urlencoded."""
    
    def __init__(self, form: Mapping[str, str]):
        self._form = dict(form)
    
    def content_type(self) -> str:
        return "application/x-www-form-urlencoded"
    
    def build(self) -> bytes:
        return urlencode(list(self._form.items()), encoding="utf-8").encode("utf-8")


@dataclass(frozen=True)
class FilePart:
    """
    A file embedded in a multipart body.
    
    Attributes:
        filename: Base name sent in the Content-Disposition header
        data: Raw file bytes, sent verbatim
        content_type: MIME type of the file
    """
    filename: str
    data: bytes
    content_type: str = OCTET_STREAM
    
    @staticmethod
    def detect_content_type(path: Union[str, Path]) -> str:
        """Guess a MIME type from the file name, falling back to octet-stream."""
        guessed, _ = mimetypes.guess_type(str(path))
        return guessed or OCTET_STREAM
    
    @classmethod
    def from_path(cls, path: Union[str, Path]) -> 'FilePart':
        """Read a file synchronously into a FilePart."""
        path = Path(path)
        return cls(
            filename=path.name,
            data=path.read_bytes(),
            content_type=cls.detect_content_type(path),
        )


@dataclass(frozen=True)
class TextField:
    """Plain text multipart field."""
    name: str
    value: str


@dataclass(frozen=True)
class FileField:
    """File multipart field."""
    name: str
    part: FilePart


MultipartField = Union[TextField, FileField]


class MultipartBodyBuilder:
    """
    Encodes text parameters and files as multipart/form-data.
    
    Parameters are emitted first, then files, each in mapping order. A single
    boundary is generated per builder and shared by every part and the
    closing marker.
    
    Example:
        >>> builder = MultipartBodyBuilder({'file': FilePart('a.apk', b'...')}, {'key': 'a.apk'})
        >>> builder.content_type()
        'multipart/form-data; boundary=Boundary-...'
    """
    
    def __init__(
        self,
        files: Optional[Mapping[str, FilePart]] = None,
        params: Optional[Mapping[str, str]] = None,
        boundary: Optional[str] = None
    ):
        self._files: Dict[str, FilePart] = dict(files or {})
        self._params: Dict[str, str] = dict(params or {})
        self._boundary = boundary or f"Boundary-{uuid.uuid4()}"
    
    @property
    def boundary(self) -> str:
        return self._boundary
    
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self._boundary}"
    
    def fields(self) -> List[MultipartField]:
        """Returns the fields in the order they are written."""
        fields: List[MultipartField] = [
            TextField(name, value) for name, value in self._params.items()
        ]
        fields.extend(FileField(name, part) for name, part in self._files.items())
        return fields
    
    def build(self) -> bytes:
        parts: List[bytes] = []
        
        for field in self.fields():
            if isinstance(field, TextField):
                header = (
                    f"--{self._boundary}{CRLF}"
                    f'Content-Disposition: form-data; name="{field.name}"{CRLF}'
                    f"{CRLF}"
                    f"{field.value}{CRLF}"
                )
                parts.append(header.encode("utf-8"))
            else:
                header = (
                    f"--{self._boundary}{CRLF}"
                    f'Content-Disposition: form-data; name="{field.name}"; '
                    f'filename="{field.part.filename}"{CRLF}'
                    f"Content-Type: {field.part.content_type or OCTET_STREAM}{CRLF}"
                    f"{CRLF}"
                )
                parts.append(header.encode("utf-8"))
                parts.append(field.part.data)
                parts.append(CRLF.encode("utf-8"))
        
        parts.append(f"--{self._boundary}--{CRLF}".encode("utf-8"))
        return b"".join(parts)
