"""
Font metrics and embedding.

Two modes:
- built-in Type1 Helvetica / Helvetica-Bold (ASCII only, AFM widths below),
- a Unicode TrueType pair embedded as Type0/CIDFontType2 so Amharic and Arabic labels survive.

Fonts are loaded per render into a `FontSet`; there is no module-level font state.
"""

from __future__ import annotations

import logging
import os
import struct
from pathlib import Path
from typing import Dict, Iterable, Optional

from invoice_builder.core.services.settings import FONT_DIR_ENV, LayoutConfig

logger = logging.getLogger(__name__)

# AFM advance widths (1/1000 em) for printable ASCII 32..126.
_HELVETICA = (
    278, 278, 355, 556, 556, 889, 667, 191, 333, 333, 389, 584, 278, 333, 278, 278,
    556, 556, 556, 556, 556, 556, 556, 556, 556, 556, 278, 278, 584, 584, 584, 556,
    1015, 667, 667, 722, 722, 667, 611, 778, 722, 278, 500, 667, 556, 833, 722, 778,
    667, 778, 722, 667, 611, 722, 667, 944, 667, 667, 611, 278, 278, 278, 469, 556,
    333, 556, 556, 500, 556, 556, 278, 556, 556, 222, 222, 500, 222, 833, 556, 556,
    556, 556, 333, 500, 278, 556, 500, 722, 500, 500, 500, 334, 260, 334, 584,
)
_HELVETICA_BOLD = (
    278, 333, 474, 556, 556, 889, 722, 238, 333, 333, 389, 584, 278, 333, 278, 278,
    556, 556, 556, 556, 556, 556, 556, 556, 556, 556, 333, 333, 584, 584, 584, 611,
    975, 722, 722, 722, 722, 667, 611, 778, 722, 278, 556, 722, 611, 833, 722, 778,
    667, 778, 722, 667, 611, 722, 667, 944, 667, 667, 611, 333, 278, 333, 584, 556,
    333, 556, 611, 556, 611, 556, 333, 611, 611, 278, 278, 556, 278, 889, 611, 611,
    611, 611, 389, 556, 333, 611, 556, 778, 556, 556, 500, 389, 280, 389, 584,
)
_AVERAGE_WIDTH = 556


def helvetica_width(text: str, size: float, bold: bool = False) -> float:
    table = _HELVETICA_BOLD if bold else _HELVETICA
    units = 0
    for ch in str(text):
        code = ord(ch)
        units += table[code - 32] if 32 <= code <= 126 else _AVERAGE_WIDTH
    return units * size / 1000.0


class TrueTypeFont:
    """Just enough of a TTF reader for advance widths, cmap lookup and whole-file embedding."""

    REQUIRED_TABLES = ("cmap", "head", "hhea", "hmtx", "maxp")

    def __init__(self, path: Path, pdf_name: str):
        self.path = path
        self.pdf_name = pdf_name
        self.data = path.read_bytes()
        tables = self._read_directory(self.data)

        head = tables["head"]
        self.units_per_em = self._u16(head + 18) or 1000
        self.bbox = struct.unpack_from(">hhhh", self.data, head + 36)
        hhea = tables["hhea"]
        self.ascent, self.descent = struct.unpack_from(">hh", self.data, hhea + 4)
        metrics_count = self._u16(hhea + 34)
        self.num_glyphs = self._u16(tables["maxp"] + 4)

        self.advances = self._read_advances(tables["hmtx"], metrics_count)
        self.cmap = self._read_cmap(tables["cmap"])
        self.used_gids: set[int] = {self.glyph_id(ord(" "))}

    def _u16(self, offset: int) -> int:
        return struct.unpack_from(">H", self.data, offset)[0]

    @classmethod
    def _read_directory(cls, data: bytes) -> Dict[str, int]:
        if len(data) < 12:
            raise ValueError("Invalid TTF (too small)")
        (count,) = struct.unpack_from(">H", data, 4)
        offsets: Dict[str, int] = {}
        for index in range(count):
            entry = 12 + index * 16
            tag = data[entry : entry + 4].decode("ascii", "replace")
            offsets[tag] = struct.unpack_from(">I", data, entry + 8)[0]
        missing = [tag for tag in cls.REQUIRED_TABLES if tag not in offsets]
        if missing:
            raise ValueError(f"TTF missing tables: {', '.join(missing)}")
        return offsets

    def _read_advances(self, hmtx: int, metrics_count: int) -> list[int]:
        count = min(metrics_count, self.num_glyphs)
        advances = [self._u16(hmtx + i * 4) for i in range(count)] or [self.units_per_em]
        # Glyphs past numberOfHMetrics reuse the last advance.
        advances.extend([advances[-1]] * (self.num_glyphs - len(advances)))
        return advances

    def _read_cmap(self, cmap: int) -> Dict[int, int]:
        version, count = struct.unpack_from(">HH", self.data, cmap)
        if version != 0 or count <= 0:
            raise ValueError("Invalid cmap table")
        subtables = {}
        for index in range(count):
            platform, encoding, offset = struct.unpack_from(">HHI", self.data, cmap + 4 + index * 8)
            subtables[(platform, encoding)] = cmap + offset
        for key in ((3, 10), (3, 1), (0, 4), (0, 3), (0, 2), (0, 1)):
            if key in subtables:
                start = subtables[key]
                break
        else:
            start = next(iter(subtables.values()))
        fmt = self._u16(start)
        if fmt == 4:
            return self._cmap_format4(start)
        if fmt == 12:
            return self._cmap_format12(start)
        raise ValueError(f"Unsupported cmap format: {fmt}")

    def _cmap_format4(self, start: int) -> Dict[int, int]:
        segments = self._u16(start + 6) // 2
        ends_at = start + 14
        starts_at = ends_at + 2 * segments + 2
        deltas_at = starts_at + 2 * segments
        ranges_at = deltas_at + 2 * segments
        ends = struct.unpack_from(f">{segments}H", self.data, ends_at)
        starts = struct.unpack_from(f">{segments}H", self.data, starts_at)
        deltas = struct.unpack_from(f">{segments}h", self.data, deltas_at)
        ranges = struct.unpack_from(f">{segments}H", self.data, ranges_at)
        mapping: Dict[int, int] = {}
        for seg in range(segments):
            if starts[seg] == 0xFFFF:
                continue
            for code in range(starts[seg], ends[seg] + 1):
                if ranges[seg] == 0:
                    gid = (code + deltas[seg]) & 0xFFFF
                else:
                    addr = ranges_at + 2 * seg + ranges[seg] + 2 * (code - starts[seg])
                    if addr + 2 > len(self.data):
                        continue
                    gid = self._u16(addr)
                    if gid:
                        gid = (gid + deltas[seg]) & 0xFFFF
                if gid:
                    mapping[code] = gid
        return mapping

    def _cmap_format12(self, start: int) -> Dict[int, int]:
        (groups,) = struct.unpack_from(">I", self.data, start + 12)
        mapping: Dict[int, int] = {}
        for index in range(groups):
            first, last, gid = struct.unpack_from(">III", self.data, start + 16 + index * 12)
            for code in range(first, last + 1):
                mapping[code] = gid + (code - first)
        return mapping

    def glyph_id(self, codepoint: int) -> int:
        gid = self.cmap.get(codepoint, 0)
        return gid if 0 <= gid < self.num_glyphs else 0

    def width_1000(self, gid: int) -> int:
        if not 0 <= gid < len(self.advances):
            return 500
        return int(round(self.advances[gid] * 1000.0 / self.units_per_em))

    def measure(self, text: str, size: float) -> float:
        units = sum(self.width_1000(self.glyph_id(ord(ch))) for ch in str(text))
        return units * size / 1000.0

    def encode_text_hex(self, text: str) -> str:
        out = bytearray()
        for ch in str(text):
            gid = self.glyph_id(ord(ch))
            self.used_gids.add(gid)
            out += gid.to_bytes(2, "big")
        return out.hex().upper()


class FontSet:
    """Regular/bold pair used by one render; falls back to Helvetica metrics when empty."""

    def __init__(self, regular: Optional[TrueTypeFont] = None, bold: Optional[TrueTypeFont] = None):
        self.regular = regular
        self.bold = bold

    @property
    def unicode(self) -> bool:
        return self.regular is not None and self.bold is not None

    def font(self, bold: bool = False) -> Optional[TrueTypeFont]:
        return self.bold if bold else self.regular

    def measure(self, text: str, size: float, bold: bool = False) -> float:
        font = self.font(bold)
        if font is None:
            return helvetica_width(text, size, bold)
        return font.measure(text, size)


def _candidate_pairs(config: LayoutConfig) -> Iterable[tuple[Path, Path]]:
    for override in (config.font_dir, os.environ.get(FONT_DIR_ENV)):
        if override and Path(override).is_dir():
            yield Path(override) / "regular.ttf", Path(override) / "bold.ttf"
    if not config.use_system_fonts:
        return
    yield (
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
    )
    yield (
        Path("/usr/share/fonts/truetype/noto/NotoSans-Regular.ttf"),
        Path("/usr/share/fonts/truetype/noto/NotoSans-Bold.ttf"),
    )
    yield Path(r"C:\Windows\Fonts\segoeui.ttf"), Path(r"C:\Windows\Fonts\segoeuib.ttf")
    yield Path(r"C:\Windows\Fonts\arial.ttf"), Path(r"C:\Windows\Fonts\arialbd.ttf")


def load_fonts(config: LayoutConfig) -> FontSet:
    """First readable TrueType pair wins; broken files are skipped."""
    for regular_path, bold_path in _candidate_pairs(config):
        if not regular_path.exists() or not bold_path.exists():
            continue
        try:
            regular = TrueTypeFont(regular_path, pdf_name="/UnicodeRegular")
            bold = TrueTypeFont(bold_path, pdf_name="/UnicodeBold")
        except (OSError, ValueError, struct.error) as exc:
            logger.warning("Skipping font pair %s: %s", regular_path.parent, exc)
            continue
        return FontSet(regular, bold)
    return FontSet()


def _format_cid_widths(font: TrueTypeFont) -> str:
    gids = sorted(font.used_gids)
    parts: list[str] = []
    i = 0
    while i < len(gids):
        run = [gids[i]]
        while i + 1 < len(gids) and gids[i + 1] == run[-1] + 1:
            i += 1
            run.append(gids[i])
        parts.append(f"{run[0]} [{' '.join(str(font.width_1000(g)) for g in run)}]")
        i += 1
    return " ".join(parts)


def _scaled(value: int, font: TrueTypeFont) -> int:
    return int(round(value * 1000.0 / font.units_per_em))


def build_font_objects(fonts: FontSet, first_id: int) -> tuple[list[bytes], Dict[str, int], int]:
    """
    Return (objects, {"/F1": id, "/F2": id}, next_free_id).
    Must run after all text is encoded so `used_gids` is complete for the /W arrays.
    """
    if not fonts.unicode:
        return (
            [
                f"{first_id} 0 obj << /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >> endobj\n".encode("ascii"),
                f"{first_id + 1} 0 obj << /Type /Font /Subtype /Type1 /BaseFont /Helvetica-Bold /Encoding /WinAnsiEncoding >> endobj\n".encode("ascii"),
            ],
            {"/F1": first_id, "/F2": first_id + 1},
            first_id + 2,
        )

    objects: list[bytes] = []
    ids: Dict[str, int] = {}
    next_id = first_id
    for resource, font in (("/F1", fonts.regular), ("/F2", fonts.bold)):
        file_id, desc_id, cid_id, type0_id = next_id, next_id + 1, next_id + 2, next_id + 3
        next_id += 4
        x_min, y_min, x_max, y_max = (_scaled(v, font) for v in font.bbox)
        ascent = _scaled(font.ascent, font)
        descent = _scaled(font.descent, font)
        default_width = font.width_1000(font.glyph_id(ord(" "))) or 500
        widths = _format_cid_widths(font)
        w_part = f" /W [{widths}]" if widths else ""
        objects.append(
            f"{file_id} 0 obj << /Length {len(font.data)} /Length1 {len(font.data)} >> stream\n".encode("ascii")
            + font.data
            + b"\nendstream endobj\n"
        )
        objects.append(
            (
                f"{desc_id} 0 obj << /Type /FontDescriptor /FontName {font.pdf_name} /Flags 32 "
                f"/FontBBox [{x_min} {y_min} {x_max} {y_max}] /ItalicAngle 0 /Ascent {ascent} "
                f"/Descent {descent} /CapHeight {ascent} /StemV 80 /FontFile2 {file_id} 0 R >> endobj\n"
            ).encode("ascii")
        )
        objects.append(
            (
                f"{cid_id} 0 obj << /Type /Font /Subtype /CIDFontType2 /BaseFont {font.pdf_name} "
                f"/CIDSystemInfo << /Registry (Adobe) /Ordering (Identity) /Supplement 0 >> "
                f"/FontDescriptor {desc_id} 0 R /CIDToGIDMap /Identity /DW {default_width}{w_part} >> endobj\n"
            ).encode("ascii")
        )
        objects.append(
            (
                f"{type0_id} 0 obj << /Type /Font /Subtype /Type0 /BaseFont {font.pdf_name}-Identity-H "
                f"/Encoding /Identity-H /DescendantFonts [{cid_id} 0 R] >> endobj\n"
            ).encode("ascii")
        )
        ids[resource] = type0_id
    return objects, ids, next_id
