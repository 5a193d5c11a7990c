"""Unicode font support for ReportLab PDF generation.

The built-in Helvetica has no glyph for ₦, so generated contracts are set
in a TrueType font when one can be found.

Font resolution order:
1. Bundled DejaVu Sans fonts (leasedocs/fonts/)
2. Linux system fonts (/usr/share/fonts/)
3. macOS / Windows system fonts
"""

import logging
from pathlib import Path

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

logger = logging.getLogger(__name__)

_fonts_registered = False

_BUNDLED_FONTS_DIR = Path(__file__).resolve().parent.parent / "fonts"

# (registered_name, candidate paths); first existing path wins
_FONT_CANDIDATES = {
    "Unicode": [
        _BUNDLED_FONTS_DIR / "DejaVuSans.ttf",
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
        Path("/usr/share/fonts/dejavu/DejaVuSans.ttf"),
        Path("/usr/share/fonts/TTF/DejaVuSans.ttf"),
        Path("/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf"),
        Path("/Library/Fonts/Arial Unicode.ttf"),
        Path("C:/Windows/Fonts/arial.ttf"),
    ],
    "Unicode-Bold": [
        _BUNDLED_FONTS_DIR / "DejaVuSans-Bold.ttf",
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
        Path("/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf"),
        Path("/usr/share/fonts/TTF/DejaVuSans-Bold.ttf"),
        Path("/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf"),
        Path("C:/Windows/Fonts/arialbd.ttf"),
    ],
    "Unicode-Italic": [
        _BUNDLED_FONTS_DIR / "DejaVuSans-Oblique.ttf",
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-Oblique.ttf"),
        Path("/usr/share/fonts/dejavu/DejaVuSans-Oblique.ttf"),
        Path("/usr/share/fonts/TTF/DejaVuSans-Oblique.ttf"),
        Path("/usr/share/fonts/truetype/liberation/LiberationSans-Italic.ttf"),
        Path("C:/Windows/Fonts/ariali.ttf"),
    ],
    "Unicode-BoldItalic": [
        _BUNDLED_FONTS_DIR / "DejaVuSans-BoldOblique.ttf",
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-BoldOblique.ttf"),
        Path("/usr/share/fonts/dejavu/DejaVuSans-BoldOblique.ttf"),
        Path("/usr/share/fonts/TTF/DejaVuSans-BoldOblique.ttf"),
        Path("/usr/share/fonts/truetype/liberation/LiberationSans-BoldItalic.ttf"),
        Path("C:/Windows/Fonts/arialbi.ttf"),
    ],
}

_registered_names = {"normal": None, "bold": None, "italic": None, "bold_italic": None}

_ROLES = {
    "Unicode": "normal",
    "Unicode-Bold": "bold",
    "Unicode-Italic": "italic",
    "Unicode-BoldItalic": "bold_italic",
}


def register_unicode_fonts() -> bool:
    """Register Unicode-capable fonts with ReportLab."""
    global _fonts_registered

    if _fonts_registered:
        return True

    for style_key, candidates in _FONT_CANDIDATES.items():
        for path in candidates:
            if path.exists():
                try:
                    pdfmetrics.registerFont(TTFont(style_key, str(path)))
                    _registered_names[_ROLES[style_key]] = style_key
                    break
                except Exception as e:
                    logger.warning(f"Could not register font {style_key} from {path}: {e}")

    normal = _registered_names["normal"]
    if normal:
        bold = _registered_names["bold"] or normal
        italic = _registered_names["italic"] or normal
        pdfmetrics.registerFontFamily(
            normal,
            normal=normal,
            bold=bold,
            italic=italic,
            boldItalic=_registered_names["bold_italic"] or bold,
        )
        _fonts_registered = True
        return True

    logger.warning("No Unicode fonts found. Currency symbols may not render in PDFs.")
    return False


def get_font_name(bold: bool = False, italic: bool = False) -> str:
    """Get the appropriate registered font name."""
    register_unicode_fonts()

    normal = _registered_names["normal"]
    if not normal:
        if bold and italic:
            return "Helvetica-BoldOblique"
        if bold:
            return "Helvetica-Bold"
        if italic:
            return "Helvetica-Oblique"
        return "Helvetica"

    bold_name = _registered_names["bold"] or normal
    italic_name = _registered_names["italic"] or normal
    if bold and italic:
        return _registered_names["bold_italic"] or bold_name
    if bold:
        return bold_name
    if italic:
        return italic_name
    return normal
