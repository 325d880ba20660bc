"""Shared fixtures: a minimal raw PDF writer and in-memory fake documents."""

from __future__ import annotations

import io
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pytest

from extracttext.docs.embedded import EmbeddedFileEntry
from extracttext.errors import LoadError

# A page is either a single line of text or a list of (text, x, y) placements
PageSpec = Union[str, Sequence[Tuple[str, float, float]]]
# (entry name, MIME subtype or None, file bytes or None for a filespec without /EF)
AttachmentSpec = Tuple[str, Optional[str], Optional[bytes]]
Rect = Tuple[float, float, float, float]


def _pdf_string(text: str) -> bytes:
    escaped = text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
    return b"(" + escaped.encode("latin-1") + b")"


def _pdf_name(value: str) -> bytes:
    return b"/" + value.replace("#", "#23").replace("/", "#2F").replace(" ", "#20").encode("ascii")


class _Objects:
    def __init__(self) -> None:
        self.bodies: List[bytes] = []

    def reserve(self) -> int:
        self.bodies.append(b"")
        return len(self.bodies)

    def set(self, num: int, body: bytes) -> None:
        self.bodies[num - 1] = body

    def add(self, body: bytes) -> int:
        num = self.reserve()
        self.set(num, body)
        return num

    def stream(self, data: bytes, extra: bytes = b"") -> int:
        head = b"<< /Length %d %s>>\nstream\n" % (len(data), extra)
        return self.add(head + data + b"\nendstream")

    def render(self, root: int, info: Optional[int]) -> bytes:
        out = io.BytesIO()
        out.write(b"%PDF-1.7\n%\xe2\xe3\xcf\xd3\n")
        offsets = []
        for num, body in enumerate(self.bodies, start=1):
            offsets.append(out.tell())
            out.write(b"%d 0 obj\n" % num + body + b"\nendobj\n")
        xref_at = out.tell()
        out.write(b"xref\n0 %d\n" % (len(self.bodies) + 1))
        out.write(b"0000000000 65535 f \n")
        for off in offsets:
            out.write(b"%010d 00000 n \n" % off)
        trailer = b"<< /Size %d /Root %d 0 R" % (len(self.bodies) + 1, root)
        if info is not None:
            trailer += b" /Info %d 0 R" % info
        out.write(b"trailer\n" + trailer + b" >>\nstartxref\n%d\n%%%%EOF\n" % xref_at)
        return out.getvalue()


def _content(page: PageSpec) -> bytes:
    if isinstance(page, str):
        placements = [(line, 72.0, 720.0 - 14.0 * i) for i, line in enumerate(page.splitlines())]
    else:
        placements = list(page)
    ops = []
    for text, x, y in placements:
        ops.append(b"BT /F1 12 Tf %s %s Td %s Tj ET" % (
            str(x).encode("ascii"), str(y).encode("ascii"), _pdf_string(text)))
    return b"\n".join(ops)


def build_pdf(
    pages: Sequence[PageSpec],
    attachments: Sequence[AttachmentSpec] = (),
    title: Optional[str] = None,
    beads: Optional[Dict[int, List[Rect]]] = None,
    nested: bool = False,
    names_node: bool = True,
    raw_tree: Optional[bytes] = None,
) -> bytes:
    """Write a small but well-formed PDF.

    Attachments keep the given order in the name tree. With `nested`, each
    attachment sits in its own /Kids leaf. `names_node=False` writes a /Names
    dictionary without an /EmbeddedFiles entry. `raw_tree` is written verbatim
    as the /EmbeddedFiles node.
    """
    objs = _Objects()
    font = objs.add(b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>")
    pages_num = objs.reserve()

    kids = []
    for index, page in enumerate(pages):
        contents = objs.stream(_content(page))
        bead_part = b""
        rects = (beads or {}).get(index, [])
        if rects:
            refs = []
            for x0, y0, x1, y1 in rects:
                refs.append(objs.add(b"<< /Type /Bead /R [%s %s %s %s] >>" % tuple(
                    str(v).encode("ascii") for v in (x0, y0, x1, y1))))
            bead_part = b" /B [" + b" ".join(b"%d 0 R" % r for r in refs) + b"]"
        kids.append(objs.add(
            b"<< /Type /Page /Parent %d 0 R /MediaBox [0 0 612 792] "
            b"/Resources << /Font << /F1 %d 0 R >> >> /Contents %d 0 R%s >>"
            % (pages_num, font, contents, bead_part)
        ))
    objs.set(pages_num, b"<< /Type /Pages /Kids [%s] /Count %d >>" % (
        b" ".join(b"%d 0 R" % k for k in kids), len(kids)))

    pairs = []
    for name, subtype, data in attachments:
        if data is None:
            spec = objs.add(b"<< /Type /Filespec /F %s >>" % _pdf_string(name))
        else:
            extra = b"/Type /EmbeddedFile /Params << /Size %d >> " % len(data)
            if subtype is not None:
                extra += b"/Subtype " + _pdf_name(subtype) + b" "
            ef = objs.stream(data, extra)
            spec = objs.add(b"<< /Type /Filespec /F %s /UF %s /EF << /F %d 0 R >> >>" % (
                _pdf_string(name), _pdf_string(name), ef))
        pairs.append(_pdf_string(name) + b" %d 0 R" % spec)

    names = b""
    if raw_tree is not None:
        names = b" /Names << /EmbeddedFiles " + raw_tree + b" >>"
    elif attachments:
        if nested:
            leaves = [objs.add(b"<< /Names [" + pair + b"] >>") for pair in pairs]
            tree = b"<< /Kids [" + b" ".join(b"%d 0 R" % n for n in leaves) + b"] >>"
        else:
            tree = b"<< /Names [" + b" ".join(pairs) + b"] >>"
        names = b" /Names << /EmbeddedFiles " + tree + b" >>"
    elif not names_node:
        names = b" /Names << /Dests << /Names [] >> >>"

    root = objs.add(b"<< /Type /Catalog /Pages %d 0 R%s >>" % (pages_num, names))
    info = objs.add(b"<< /Title %s >>" % _pdf_string(title)) if title else None
    return objs.render(root, info)


@pytest.fixture
def pdf_bytes():
    return build_pdf


class FakeDocument:
    """In-memory stand-in for PdfDocument: one string per page."""

    open_documents: List["FakeDocument"] = []

    def __init__(self, name: str, pages: Sequence[str] = (), files=None, can_extract: bool = True, title: str = ""):
        self.name = name
        self.pages = list(pages)
        self.files = files
        self.can_extract_content = can_extract
        self.title = title
        self.closed = False
        self.embedded_calls = 0

    def embedded_files(self):
        self.embedded_calls += 1
        return dict(self.files or {})

    def close(self) -> None:
        self.closed = True
        if self in FakeDocument.open_documents:
            FakeDocument.open_documents.remove(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class FakeLoader:
    """Loads FakeDocuments registered under their byte content."""

    def __init__(self, registry: Dict[bytes, FakeDocument]):
        self.registry = registry
        self.loaded: List[str] = []
        self.max_open = 0

    def __call__(self, stream, name):
        data = stream.read()
        stream.close()
        self.loaded.append(name)
        if data not in self.registry:
            raise LoadError(name, "not a PDF")
        doc = self.registry[data]
        FakeDocument.open_documents.append(doc)
        self.max_open = max(self.max_open, len(FakeDocument.open_documents))
        return doc


def entry(name: str, data: bytes, subtype: str = "application/pdf") -> EmbeddedFileEntry:
    return EmbeddedFileEntry(name=name, mime_subtype=subtype, byte_length=len(data), content=lambda: data)


@pytest.fixture(autouse=True)
def _reset_open_documents():
    FakeDocument.open_documents.clear()
    yield
    FakeDocument.open_documents.clear()
