"""Document import into the archive."""
from .converter import DocumentImporter, text_to_html, title_from_filename
from .service import ImportService

__all__ = ["DocumentImporter", "ImportService", "text_to_html", "title_from_filename"]
