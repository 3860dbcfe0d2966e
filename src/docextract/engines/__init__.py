"""
Extraction engines, one abstract base per engine family.

Every CLI engine shells out through `docextract.runner.ProcessRunner`.
"""

from .base import (
    ImageConverter,
    ImageExtractor,
    InfoExtractor,
    OfficeConverter,
    PageExtractor,
    TextExtractor,
)
from .graphicsmagick import GraphicsMagickImageConverter, GraphicsMagickImageExtractor
from .libreoffice import LibreOfficeConverter
from .pdfinfo import PdfinfoInfoExtractor
from .pdftk import PdftkPageExtractor
from .pdftotext import PdftotextTextExtractor
from .pypdfium2_engine import Pypdfium2ImageExtractor

__all__ = [
    "GraphicsMagickImageConverter",
    "GraphicsMagickImageExtractor",
    "ImageConverter",
    "ImageExtractor",
    "InfoExtractor",
    "LibreOfficeConverter",
    "OfficeConverter",
    "PageExtractor",
    "PdfinfoInfoExtractor",
    "PdftkPageExtractor",
    "PdftotextTextExtractor",
    "Pypdfium2ImageExtractor",
    "TextExtractor",
]
