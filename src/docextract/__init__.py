"""
Document extraction by orchestration of external engines.

Inputs are first made PDFs (office documents through LibreOffice, images
through GraphicsMagick), then handed to one engine per artifact:
- pages: pdftk
- text: pdftotext, with tesseract OCR for scanned pages
- images: GraphicsMagick (or PDFium in-process)
- metadata: pdfinfo

Every external call goes through `ProcessRunner`; any non-zero exit surfaces
as `ExtractionFailed` carrying the engine's own output.
"""

from .contracts import (
    Dependencies,
    ExtractConfig,
    ExtractionOptions,
    ImageBackend,
    ImageFormat,
    MetadataKey,
    TextFormat,
)
from .dependencies import probe_dependencies
from .module import (
    DocExtractor,
    clean_text,
    extract_author,
    extract_creator,
    extract_date,
    extract_images,
    extract_info,
    extract_keywords,
    extract_length,
    extract_metadata,
    extract_pages,
    extract_pdf,
    extract_producer,
    extract_subject,
    extract_text,
    extract_title,
)
from .runner import ExtractionFailed, ProcessRunner
from .text_cleaner import TextCleaner
from .transparent_pdfs import FormatNormalizer
from .values import normalize_value, page_list

__all__ = [
    "Dependencies",
    "DocExtractor",
    "ExtractConfig",
    "ExtractionFailed",
    "ExtractionOptions",
    "FormatNormalizer",
    "ImageBackend",
    "ImageFormat",
    "MetadataKey",
    "ProcessRunner",
    "TextCleaner",
    "TextFormat",
    "clean_text",
    "extract_author",
    "extract_creator",
    "extract_date",
    "extract_images",
    "extract_info",
    "extract_keywords",
    "extract_length",
    "extract_metadata",
    "extract_pages",
    "extract_pdf",
    "extract_producer",
    "extract_subject",
    "extract_text",
    "extract_title",
    "normalize_value",
    "page_list",
    "probe_dependencies",
]
