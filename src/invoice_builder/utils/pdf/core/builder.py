"""
PDF object builder: turns a laid-out Document into PDF 1.4 bytes
(catalog, page tree, info, fonts, image XObjects, one content stream per page).
"""

from __future__ import annotations

from typing import Dict

from invoice_builder.utils.pdf.core.drawing import render_ops
from invoice_builder.utils.pdf.core.fonts import build_font_objects
from invoice_builder.utils.pdf.core.images import EmbeddedImage
from invoice_builder.utils.pdf.core.ops import Document, ImageOp

CATALOG_ID, PAGES_ID, INFO_ID = 1, 2, 3


def _pdf_string(text: str) -> str:
    return "<FEFF" + str(text).encode("utf-16-be").hex().upper() + ">"


def _stream_obj(obj_id: int, dictionary: str, payload: bytes) -> bytes:
    return f"{obj_id} 0 obj << {dictionary} /Length {len(payload)} >> stream\n".encode("ascii") + payload + b"\nendstream endobj\n"


def build_pdf_bytes(document: Document) -> bytes:
    """
    Given a laid-out document, return ready-to-write PDF bytes.
    Content streams are rendered before the font objects so the embedded width tables cover every glyph used.
    """
    fonts = document.fonts
    images: Dict[int, EmbeddedImage] = {}
    for page in document.pages:
        for op in page.ops:
            if isinstance(op, ImageOp):
                images.setdefault(id(op.image), op.image)
    image_names = {key: f"/Im{n}" for n, key in enumerate(images, start=1)}

    streams = [
        render_ops(page.ops, fonts, document.height, image_names).encode("latin-1", "replace")
        for page in document.pages
    ]

    objects: Dict[int, bytes] = {}
    font_objs, font_ids, next_id = build_font_objects(fonts, first_id=INFO_ID + 1)
    for offset, obj in enumerate(font_objs):
        objects[INFO_ID + 1 + offset] = obj

    image_ids: Dict[int, int] = {}
    for key, image in images.items():
        image_ids[key] = next_id
        objects[next_id] = _stream_obj(
            next_id,
            f"/Type /XObject /Subtype /Image /Width {image.width} /Height {image.height} "
            "/ColorSpace /DeviceRGB /BitsPerComponent 8 /Filter /FlateDecode",
            image.data,
        )
        next_id += 1

    font_ref = " ".join(f"{name} {obj_id} 0 R" for name, obj_id in font_ids.items())
    xobject_ref = " ".join(f"{image_names[key]} {obj_id} 0 R" for key, obj_id in image_ids.items())
    resources = f"/Font << {font_ref} >>" + (f" /XObject << {xobject_ref} >>" if xobject_ref else "")

    kids: list[int] = []
    for stream in streams:
        content_id, page_id = next_id, next_id + 1
        next_id += 2
        kids.append(page_id)
        objects[content_id] = _stream_obj(content_id, "", stream)
        objects[page_id] = (
            f"{page_id} 0 obj << /Type /Page /Parent {PAGES_ID} 0 R "
            f"/MediaBox [0 0 {document.width:g} {document.height:g}] /Contents {content_id} 0 R "
            f"/Resources << {resources} >> >> endobj\n"
        ).encode("ascii")

    kids_ref = " ".join(f"{kid} 0 R" for kid in kids)
    objects[CATALOG_ID] = f"{CATALOG_ID} 0 obj << /Type /Catalog /Pages {PAGES_ID} 0 R >> endobj\n".encode("ascii")
    objects[PAGES_ID] = f"{PAGES_ID} 0 obj << /Type /Pages /Count {len(kids)} /Kids [{kids_ref}] >> endobj\n".encode("ascii")
    objects[INFO_ID] = (
        f"{INFO_ID} 0 obj << /Title {_pdf_string(document.title)} /Author {_pdf_string(document.author)} "
        f"/Creator {_pdf_string(document.creator)} /Producer (invoice_builder) >> endobj\n"
    ).encode("ascii")

    header = b"%PDF-1.4\n"
    body = bytearray()
    offsets: list[int] = []
    for obj_id in range(1, next_id):
        offsets.append(len(header) + len(body))
        body += objects[obj_id]

    xref = f"xref\n0 {next_id}\n".encode("ascii") + b"0000000000 65535 f \n"
    xref += "".join(_format_xref_entry(off) for off in offsets).encode("ascii")
    startxref = len(header) + len(body)
    trailer = (
        f"trailer << /Size {next_id} /Root {CATALOG_ID} 0 R /Info {INFO_ID} 0 R >>\n"
        f"startxref\n{startxref}\n%%EOF\n"
    ).encode("ascii")
    return header + bytes(body) + xref + trailer


def _format_xref_entry(offset: int) -> str:
    return f"{offset:010d} 00000 n \n"
