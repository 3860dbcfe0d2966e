from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Sequence


class MetadataKey(str, Enum):
    """
    Document attributes readable through the metadata engine.
    """

    AUTHOR = "author"
    DATE = "date"
    CREATOR = "creator"
    KEYWORDS = "keywords"
    PRODUCER = "producer"
    SUBJECT = "subject"
    TITLE = "title"
    LENGTH = "length"


class ImageFormat(str, Enum):
    """
    Raster formats understood by GraphicsMagick, both as conversion inputs
    and as rasterization outputs.
    """

    PNG = "png"
    GIF = "gif"
    JPG = "jpg"
    JPEG = "jpeg"
    TIF = "tif"
    TIFF = "tiff"
    BMP = "bmp"
    PNM = "pnm"
    PPM = "ppm"
    SVG = "svg"
    EPS = "eps"


class TextFormat(str, Enum):
    TXT = "txt"
    HTML = "html"


class ImageBackend(str, Enum):
    """
    Rasterization backend identifiers.
    """

    GRAPHICSMAGICK = "gm"
    PYPDFIUM2 = "pypdfium2"


def _as_tuple(value: Any) -> tuple[Any, ...]:
    if value is None:
        return ()
    if isinstance(value, (str, Enum)) or not isinstance(value, Sequence):
        return (value,)
    return tuple(value)


@dataclass(frozen=True, slots=True)
class ExtractionOptions:
    """
    Per-call extraction options.

    Every extractor reads the subset it understands and ignores the rest.
    `pages` accepts an int, a `range`, a sequence of ints/ranges, a selection
    string like "1-3,7" or "all"; None means every page / whole document.
    """

    output: Path = Path(".")
    pages: Any = None
    format: tuple[str, ...] = ()
    size: tuple[str, ...] = ()
    rotate: int | None = None
    density: int | None = None
    quality: int | None = None
    language: str = "eng"
    ocr: bool | None = None  # True => force, False => forbid, None => auto
    clean: bool = True  # clean OCR'd text

    def __post_init__(self) -> None:
        # Loose inputs ("png", ["png", "jpg"], Path-like strings) are coerced once here.
        object.__setattr__(self, "output", Path(self.output))
        object.__setattr__(
            self, "format", tuple(f.value if isinstance(f, Enum) else str(f).lower() for f in _as_tuple(self.format))
        )
        object.__setattr__(self, "size", tuple(str(s) for s in _as_tuple(self.size)))
        if self.density is not None and int(self.density) <= 0:
            raise ValueError("density must be a positive integer")
        if self.quality is not None and not 0 <= int(self.quality) <= 100:
            raise ValueError("quality must be within [0, 100]")

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None) -> "ExtractionOptions":
        """
        Build options from a loose mapping; unrecognized keys are ignored.
        """

        if options is None:
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in options.items() if k in known and v is not None})

    @classmethod
    def coerce(cls, options: "ExtractionOptions | Mapping[str, Any] | None") -> "ExtractionOptions":
        if isinstance(options, cls):
            return options
        return cls.from_mapping(options)


@dataclass(frozen=True, slots=True)
class Dependencies:
    """
    Which external engines were found on the search path.

    Advisory only: a missing engine surfaces later as ExtractionFailed when it
    is actually invoked.
    """

    pdftk: bool = False
    pdftotext: bool = False
    pdffonts: bool = False
    pdfinfo: bool = False
    gm: bool = False
    tesseract: bool = False
    soffice: bool = False

    def missing(self) -> list[str]:
        return [f.name for f in fields(self) if not getattr(self, f.name)]


@dataclass(frozen=True, slots=True)
class ExtractConfig:
    """
    Engine configuration shared by every extraction call.

    Binaries are looked up on PATH, with `search_path` prepended. Library
    modules never read environment variables; callers build this explicitly.
    """

    pdftk_bin: str = "pdftk"
    pdftotext_bin: str = "pdftotext"
    pdffonts_bin: str = "pdffonts"
    pdfinfo_bin: str = "pdfinfo"
    gm_bin: str = "gm"
    tesseract_bin: str = "tesseract"
    soffice_bin: str = "soffice"
    search_path: tuple[Path, ...] = ()
    timeout_s: float | None = 600.0  # None => wait indefinitely
    default_density: int = 150
    ocr_density: int = 400
    min_text_per_page: int = 100  # bytes; sparser pages are OCR'd in auto mode
    memory_limit: str = "256MiB"
    map_limit: str = "512MiB"
    image_backend: ImageBackend = ImageBackend.GRAPHICSMAGICK
    conversion_dir: Path | None = None  # None => converted PDFs land next to their source
    extra_env: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.timeout_s is not None and self.timeout_s <= 0:
            raise ValueError("timeout_s must be positive (or None)")
        if self.default_density <= 0 or self.ocr_density <= 0:
            raise ValueError("densities must be positive integers")
        if self.min_text_per_page < 0:
            raise ValueError("min_text_per_page must be >= 0")
        object.__setattr__(self, "search_path", tuple(Path(p) for p in self.search_path))
        object.__setattr__(self, "image_backend", ImageBackend(self.image_backend))
        if self.conversion_dir is not None:
            object.__setattr__(self, "conversion_dir", Path(self.conversion_dir))
