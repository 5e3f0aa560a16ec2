# qurbani/utils/helpers.py
import re
from xml.sax.saxutils import escape


def sanitize_filename(filename: str) -> str:
    """
    Limpia nombres de archivo para que sean seguros en cualquier SO.
    """
    return re.sub(r'[\\/*?:"<>|\s]', "_", filename)


def paragraph_text(text: str) -> str:
    """Escapa texto libre (nombres) antes de pasarlo a un Paragraph de reportlab."""
    return escape(text or "")
