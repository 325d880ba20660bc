from __future__ import annotations

import io
import logging
import os
from typing import BinaryIO

from pypdf import PasswordType, PdfReader
from pypdf.constants import UserAccessPermissions
from pypdf.generic import DictionaryObject

from extracttext.errors import LoadError

from .embedded import EmbeddedFiles, read_embedded_files

logger = logging.getLogger(__name__)


class PdfDocument:
    """A loaded PDF owning its reader and the underlying byte stream.

    Use as a context manager; `close()` is idempotent.
    """

    def __init__(self, reader: PdfReader, stream: BinaryIO, name: str, owner_access: bool = False) -> None:
        self.name = name
        self._reader = reader
        self._stream = stream
        self._owner_access = owner_access
        self.closed = False

    @property
    def pages(self):
        return self._reader.pages

    @property
    def page_count(self) -> int:
        return len(self._reader.pages)

    @property
    def title(self) -> str:
        meta = self._reader.metadata
        if meta is None or not meta.title:
            return ""
        return str(meta.title)

    @property
    def can_extract_content(self) -> bool:
        """AccessPermission: whether the rights metadata allows text extraction."""
        if not self._reader.is_encrypted or self._owner_access:
            return True
        encrypt = self._reader.trailer.get("/Encrypt")
        encrypt = encrypt.get_object() if encrypt is not None else None
        if not isinstance(encrypt, DictionaryObject) or "/P" not in encrypt:
            return True
        return bool(int(encrypt["/P"]) & UserAccessPermissions.EXTRACT)

    def embedded_files(self) -> EmbeddedFiles:
        return read_embedded_files(self._reader.trailer.get("/Root"))

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._stream.close()

    def __enter__(self) -> "PdfDocument":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _open_reader(stream: BinaryIO, name: str, password: str) -> PdfDocument:
    try:
        reader = PdfReader(stream)
        owner = False
        if reader.is_encrypted:
            result = reader.decrypt(password or "")
            if result == PasswordType.NOT_DECRYPTED:
                raise LoadError(name, "incorrect password")
            owner = result == PasswordType.OWNER_PASSWORD
        # Parse the page tree now so broken documents fail at load time
        _ = len(reader.pages)
    except LoadError:
        stream.close()
        raise
    except Exception as e:
        stream.close()
        raise LoadError(name, str(e) or type(e).__name__) from e
    return PdfDocument(reader, stream, name, owner_access=owner)


def load_pdf(path: str, password: str = "") -> PdfDocument:
    """Open and decrypt a PDF file.

    Args:
        path: Path to the PDF file.
        password: Password used to decrypt the document; empty for none.

    Returns:
        A PdfDocument that must be closed by the caller.

    Raises:
        LoadError: If the file is missing, malformed, or the password is wrong.
    """
    if not os.path.exists(path):
        raise LoadError(path, "file not found")
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise LoadError(path, str(e)) from e
    logger.debug("Read %d bytes from %s", len(data), path)
    return _open_reader(io.BytesIO(data), path, password)


def load_pdf_stream(stream: BinaryIO, name: str = "<stream>", password: str = "") -> PdfDocument:
    """Load a PDF from an open binary stream, taking ownership of the stream."""
    return _open_reader(stream, name, password)
