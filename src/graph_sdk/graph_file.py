"""
File entities that can be sent as multipart request parameters
"""

import mimetypes
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

from .exceptions import ValidationError


@dataclass(frozen=True)
class GraphFile:
    """In-memory file part for a multipart upload"""
    file_name: str
    contents: bytes
    mimetype: str = 'application/octet-stream'

    @classmethod
    def from_path(cls, path: Union[str, Path], max_length: int = -1, offset: int = 0) -> 'GraphFile':
        """
        Read a file (or a slice of it) from disk

        Args:
            path: Path to the file
            max_length: Number of bytes to read, -1 for the remainder
            offset: Position to start reading from

        Raises:
            ValidationError: If the file is missing or not readable
        """
        path = Path(path)
        if not path.is_file() or not os.access(path, os.R_OK):
            raise ValidationError(f"Failed to open file: {path}")

        with open(path, 'rb') as f:
            f.seek(offset)
            contents = f.read() if max_length < 0 else f.read(max_length)

        mimetype = mimetypes.guess_type(path.name)[0] or 'application/octet-stream'
        return cls(file_name=path.name, contents=contents, mimetype=mimetype)

    @property
    def size(self) -> int:
        return len(self.contents)

    def as_multipart_field(self) -> Tuple[str, bytes, str]:
        return self.file_name, self.contents, self.mimetype


class GraphVideo(GraphFile):
    """A file that must be posted to the video upload host"""
    pass
