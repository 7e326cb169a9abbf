"""
=============================================================================
STATIC RESOURCES
=============================================================================

Locates the file a request points at and holds it open for the rest of
the request.

=============================================================================
ONE LOOKUP, ONE HANDLE
=============================================================================

The status line needs to know whether the file exists; the body needs
its bytes. Checking with one call and reading with another leaves a gap
in which the file can disappear:

    check exists ──► write "200 OK" ──► (file deleted) ──► open() fails

Resource.open() opens the file once. The same file object answers the
existence question AND supplies the body, so a 200 header is always
followed by the content that was found.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Resource.open(root, path)                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   path is None (no GET line)      → exists=False                     │
    │   nothing at root/path            → exists=False                     │
    │   root/path is a directory        → exists=False                     │
    │   root/path is a FIFO, device...  → exists=False                     │
    │   name too long for the OS        → exists=False                     │
    │   regular file                    → exists=True, file held open      │
    │   permission denied               → PermissionError propagates       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
NO SANDBOX
=============================================================================

The path is joined to the document root as-is. A request for
"GET //etc/hostname" resolves to "/etc/hostname" because joining an
absolute path discards the root. Only point the server at a machine and
root you are willing to expose.

=============================================================================
"""

import io
import os
import errno
import stat
import logging
from pathlib import Path
from typing import BinaryIO, Iterator, Optional


logger = logging.getLogger(__name__)


class ResourceNotFoundError(FileNotFoundError):
    """Raised when a body is requested from a resource that was not found."""


class Resource:
    """
    A filesystem resource requested by one connection.

    Use as a context manager so the file is always closed:

        with Resource.open(".", "index.html") as resource:
            if resource.exists:
                for line in resource.text_lines():
                    ...
    """

    def __init__(self, path: Optional[str], full_path: Optional[Path], file: Optional[BinaryIO] = None):
        self.path = path
        self.full_path = full_path
        self._file = file
        self.size = os.fstat(file.fileno()).st_size if file is not None else 0

    @classmethod
    def open(cls, root: str, path: Optional[str]) -> "Resource":
        """
        Look up a resource path under the document root.

        Args:
            root: Document root directory.
            path: Resource path from the request (leading "/" already removed),
                  or None if the request had no GET line.

        Returns:
            A Resource. Check .exists before reading.

        Raises:
            PermissionError: The file exists but cannot be opened.
        """
        if path is None:
            return cls(path=None, full_path=None)

        full_path = Path(root) / path

        try:
            file = open(full_path, "rb")
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError):
            logger.debug(f"No file at {full_path}")
            return cls(path=path, full_path=full_path)
        except OSError as e:
            if e.errno == errno.ENAMETOOLONG:
                logger.debug(f"Name too long: {str(full_path)[:64]}...")
                return cls(path=path, full_path=full_path)
            # Windows reports directories as EACCES; anything else is a real fault
            if full_path.is_dir():
                return cls(path=path, full_path=full_path)
            raise

        if not stat.S_ISREG(os.fstat(file.fileno()).st_mode):
            file.close()
            logger.debug(f"Not a regular file: {full_path}")
            return cls(path=path, full_path=full_path)

        return cls(path=path, full_path=full_path, file=file)

    @property
    def exists(self) -> bool:
        """True when a regular file was found and is held open."""
        return self._file is not None

    def _require_file(self) -> BinaryIO:
        if self._file is None:
            raise ResourceNotFoundError(f"Resource not found: {self.full_path or self.path}")
        return self._file

    def text_lines(self, encoding: str = "utf-8") -> Iterator[str]:
        """
        Iterate over the file as text, line terminators included.

        Undecodable bytes are carried as surrogates so that encoding the
        lines back with the same error handler reproduces the original bytes.
        """
        wrapper = io.TextIOWrapper(
            self._require_file(),
            encoding=encoding,
            errors="surrogateescape",
            newline="",  # Keep "\r\n" / "\n" exactly as stored
        )
        try:
            yield from wrapper
        finally:
            # Leave the underlying file to close()
            if not wrapper.closed:
                wrapper.detach()

    def iter_chunks(self, chunk_size: int = 8192) -> Iterator[bytes]:
        """Iterate over the raw bytes of the file."""
        file = self._require_file()
        while True:
            chunk = file.read(chunk_size)
            if not chunk:
                break
            yield chunk

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "Resource":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        return f"Resource(path={self.path!r}, exists={self.exists}, size={self.size})"
