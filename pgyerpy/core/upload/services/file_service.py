"""
File validation, reading and artifact discovery services.

Single Responsibility: Each class handles one specific task.
"""
import json
from pathlib import Path
from typing import List, Tuple, Union
import aiofiles

from ...logging import get_logger
from ...exceptions import InputError
from ...request import FilePart
from ..models import APK_SUFFIX


class FileValidator:
    """
    Validates files before upload.
    
    Responsibilities:
    - Check file existence
    - Verify file is not a directory
    - Reject empty files
    """
    
    def validate(self, file_path: Union[str, Path]) -> Tuple[Path, int]:
        """
        Validate a file for upload.
        
        Args:
            file_path: Path to the file
            
        Returns:
            Tuple of (validated Path, file size in bytes)
            
        Raises:
            InputError: If the file is missing, not a regular file, or empty
        """
        path = Path(file_path)
        
        if not path.exists():
            raise InputError(f"File not found: {path}")
        
        if not path.is_file():
            raise InputError(f"Path is not a file: {path}")
        
        file_size = path.stat().st_size
        if file_size == 0:
            raise InputError(f"Cannot upload empty file: {path}")
        
        return path, file_size


class AsyncFileReader:
    """
    Asynchronous file reader.
    
    Uses aiofiles so reading a large artifact does not block the event loop.
    """
    
    def __init__(self):
        self._logger = get_logger('pgyerpy.upload.file')
    
    async def read_file(self, file_path: Union[str, Path]) -> bytes:
        """Read an entire file."""
        async with aiofiles.open(file_path, 'rb') as f:
            data = await f.read()
        self._logger.debug(f"Read {len(data)} bytes from {file_path}")
        return data
    
    async def read_part(self, file_path: Union[str, Path]) -> FilePart:
        """Read a file into a multipart FilePart."""
        path = Path(file_path)
        return FilePart(
            filename=path.name,
            data=await self.read_file(path),
            content_type=FilePart.detect_content_type(path),
        )


class ArtifactResolver:
    """
    Resolves the single build output to upload.
    
    A file path is returned unchanged. A directory is inspected through the
    Android Gradle ``output-metadata.json`` listing when present, otherwise
    every ``*.apk`` file in it is a candidate.
    """
    
    METADATA_FILE = 'output-metadata.json'
    
    def __init__(self, suffix: str = APK_SUFFIX):
        self._suffix = suffix
        self._logger = get_logger('pgyerpy.upload.artifact')
    
    def candidates(self, directory: Path) -> List[Path]:
        """List artifact candidates in ``directory``."""
        metadata = directory / self.METADATA_FILE
        if metadata.is_file():
            try:
                listing = json.loads(metadata.read_text(encoding='utf-8'))
            except ValueError as e:
                raise InputError(f"Cannot load {metadata}: {e}") from e
            elements = listing.get('elements') if isinstance(listing, dict) else None
            if not isinstance(elements, list):
                raise InputError(f"Cannot load {metadata}: no 'elements' list")
            return [
                directory / element['outputFile']
                for element in elements
                if isinstance(element, dict) and element.get('outputFile')
            ]
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.name.lower().endswith(self._suffix)
        )
    
    def resolve(self, path: Union[str, Path]) -> Path:
        """
        Resolve exactly one artifact.
        
        Raises:
            InputError: If the path is missing or zero / several artifacts are found
        """
        path = Path(path)
        if path.is_file():
            return path
        if not path.is_dir():
            raise InputError(f"Artifact path not found: {path}")
        
        found = self.candidates(path)
        if len(found) != 1:
            names = ', '.join(p.name for p in found) or 'none'
            raise InputError(
                f"Expected exactly one artifact in {path}, found {len(found)} ({names})"
            )
        self._logger.debug(f"Resolved artifact {found[0]}")
        return found[0]
