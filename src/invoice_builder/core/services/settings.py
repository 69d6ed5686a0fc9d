from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path

logger = logging.getLogger(__name__)

LAYOUT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "data" / "layout.json"
FONT_DIR_ENV = "INVOICE_BUILDER_PDF_FONT"


@dataclass(frozen=True)
class LayoutConfig:
    """Page geometry (PDF points) and rendering switches for one render call."""

    page_width: float = 595.0
    page_height: float = 842.0
    margin_mm: float = 20.0
    bottom_margin_mm: float = 30.0
    font_dir: str | None = None
    use_system_fonts: bool = True
    app_name: str = "InvoiceGen.et"
    accent_color: str = "0.23 0.51 0.96"  # PDF rgb operands

    def with_changes(self, **changes) -> "LayoutConfig":
        return replace(self, **changes)


DEFAULT_CONFIG = LayoutConfig()


def load_layout_config(path: Path | None = None) -> LayoutConfig:
    """Read overrides from JSON; missing or unreadable files yield the defaults."""
    target = path or LAYOUT_CONFIG_PATH
    if not target.exists():
        return DEFAULT_CONFIG
    try:
        raw = json.loads(target.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable layout config %s: %s", target, exc)
        return DEFAULT_CONFIG
    known = {f.name for f in fields(LayoutConfig)}
    overrides = {k: v for k, v in (raw or {}).items() if k in known}
    return replace(DEFAULT_CONFIG, **overrides)


def save_layout_config(config: LayoutConfig, path: Path | None = None) -> Path:
    target = path or LAYOUT_CONFIG_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(asdict(config), ensure_ascii=False, indent=2), encoding="utf-8")
    return target
