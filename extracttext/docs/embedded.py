"""Embedded-file name tree reading.

A PDF stores attachments in the catalog under /Names → /EmbeddedFiles as a
name tree: leaf nodes carry a flat /Names array of [key, filespec, ...] pairs
and intermediate nodes carry /Kids. This module flattens that tree into a
name → EmbeddedFileEntry mapping and defines the traversal order.
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Callable, Dict, Iterator, Optional, Set, Tuple

from pypdf.generic import ArrayObject, DictionaryObject, IndirectObject, StreamObject

logger = logging.getLogger(__name__)

# MIME subtype marking an attachment as another PDF
SAME_FORMAT_SUBTYPE = "application/pdf"

_NAME_ESCAPE = re.compile(r"#([0-9A-Fa-f]{2})")


@dataclass
class EmbeddedFileEntry:
    name: str
    mime_subtype: str
    byte_length: int
    content: Callable[[], bytes] = field(repr=False)
    filename: str = ""
    description: str = ""

    def open(self) -> BinaryIO:
        """Return a fresh binary stream over the decoded attachment bytes."""
        return io.BytesIO(self.content())


EmbeddedFiles = Dict[str, Optional[EmbeddedFileEntry]]


def _resolve(obj: Any) -> Any:
    if isinstance(obj, IndirectObject):
        return obj.get_object()
    return obj


def _key_text(key: Any) -> str:
    key = _resolve(key)
    if isinstance(key, bytes):
        return key.decode("latin-1")
    return str(key)


def _name_text(value: Any) -> str:
    # NameObject keeps its leading slash; older pypdf releases leave #xx escapes in place
    text = str(_resolve(value) or "")
    if text.startswith("/"):
        text = text[1:]
    return _NAME_ESCAPE.sub(lambda m: chr(int(m.group(1), 16)), text)


def _int_or_none(value: Any) -> Optional[int]:
    try:
        return int(_resolve(value))
    except (TypeError, ValueError):
        return None


def _entry_from_filespec(name: str, spec: Any) -> Optional[EmbeddedFileEntry]:
    spec = _resolve(spec)
    if not isinstance(spec, DictionaryObject):
        return None
    ef = _resolve(spec.get("/EF"))
    if not isinstance(ef, DictionaryObject):
        return None
    stream = _resolve(ef.get("/F"))
    if stream is None:
        stream = _resolve(ef.get("/UF"))
    if not isinstance(stream, StreamObject):
        return None

    params = _resolve(stream.get("/Params"))
    size = None
    if isinstance(params, DictionaryObject):
        size = _int_or_none(params.get("/Size"))
    if size is None:
        size = _int_or_none(stream.get("/DL"))
    if size is None:
        size = len(stream.get_data())

    filename = spec.get("/UF") or spec.get("/F") or ""
    return EmbeddedFileEntry(
        name=name,
        mime_subtype=_name_text(stream.get("/Subtype")),
        byte_length=size,
        content=stream.get_data,
        filename=str(_resolve(filename)),
        description=str(_resolve(spec.get("/Desc")) or ""),
    )


def _walk(node: Any, out: EmbeddedFiles, seen: Set[int]) -> None:
    node = _resolve(node)
    if not isinstance(node, DictionaryObject):
        return
    if id(node) in seen:
        logger.warning("Cycle in embedded files name tree, ignoring repeated node")
        return
    seen.add(id(node))

    names = _resolve(node.get("/Names"))
    if names is not None and not isinstance(names, ArrayObject):
        logger.warning("Malformed /Names entry in embedded files tree, ignoring it")
    elif names is not None:
        pairs = list(names)
        if len(pairs) % 2:
            logger.warning("Odd-length /Names array in embedded files tree, dropping last key")
        for i in range(0, len(pairs) - 1, 2):
            key = _key_text(pairs[i])
            out[key] = _entry_from_filespec(key, pairs[i + 1])

    kids = _resolve(node.get("/Kids"))
    if kids is not None and not isinstance(kids, ArrayObject):
        logger.warning("Malformed /Kids entry in embedded files tree, ignoring it")
    elif kids is not None:
        for kid in kids:
            _walk(kid, out, seen)


def read_embedded_files(catalog: Any) -> EmbeddedFiles:
    """Flatten the catalog's embedded-files name tree.

    Doxygen:
    - @param catalog: The document catalog (/Root) dictionary.
    - @return: Mapping entry name → EmbeddedFileEntry, or None where the file
      specification carries no embedded stream. Empty when the document has no
      name dictionary or no /EmbeddedFiles node.
    """
    catalog = _resolve(catalog)
    if not isinstance(catalog, DictionaryObject):
        return {}
    names = _resolve(catalog.get("/Names"))
    if not isinstance(names, DictionaryObject):
        return {}
    tree = names.get("/EmbeddedFiles")
    if tree is None:
        return {}
    out: EmbeddedFiles = {}
    _walk(tree, out, set())
    return out


def iter_entries(files: EmbeddedFiles) -> Iterator[Tuple[str, Optional[EmbeddedFileEntry]]]:
    """Yield entries in lexicographic order of their names."""
    for name in sorted(files):
        yield name, files[name]


def is_same_format(entry: Optional[EmbeddedFileEntry]) -> bool:
    return entry is not None and entry.mime_subtype == SAME_FORMAT_SUBTYPE
