"""Request body encoders using the Strategy pattern."""
from .body import (
    RequestBodyBuilder,
    JsonBodyBuilder,
    FormBodyBuilder,
    MultipartBodyBuilder,
    MultipartField,
    TextField,
    FileField,
    FilePart,
)

__all__ = [
    'RequestBodyBuilder',
    'JsonBodyBuilder',
    'FormBodyBuilder',
    'MultipartBodyBuilder',
    'MultipartField',
    'TextField',
    'FileField',
    'FilePart',
]
