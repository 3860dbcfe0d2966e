from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import structlog

from .contracts import Dependencies, ExtractConfig, ExtractionOptions, ImageBackend, MetadataKey
from .dependencies import probe_dependencies
from .engines import (
    GraphicsMagickImageConverter,
    GraphicsMagickImageExtractor,
    ImageConverter,
    ImageExtractor,
    InfoExtractor,
    LibreOfficeConverter,
    OfficeConverter,
    PageExtractor,
    PdfinfoInfoExtractor,
    PdftkPageExtractor,
    PdftotextTextExtractor,
    Pypdfium2ImageExtractor,
    TextExtractor,
)
from .runner import ProcessRunner
from .text_cleaner import TextCleaner
from .transparent_pdfs import DocInput, FormatNormalizer
from .values import normalize_value

logger = structlog.get_logger()

Options = Optional[Union[ExtractionOptions, Mapping[str, Any]]]


def _get_image_engine(
    backend: ImageBackend, *, runner: ProcessRunner, info: InfoExtractor, config: ExtractConfig
) -> ImageExtractor:
    if backend == ImageBackend.GRAPHICSMAGICK:
        return GraphicsMagickImageExtractor(runner=runner, info=info, config=config)
    if backend == ImageBackend.PYPDFIUM2:
        return Pypdfium2ImageExtractor(config)
    raise ValueError(f"Unsupported image backend: {backend}")


class DocExtractor:
    """
    Entry point: one operation per artifact type.

    Every operation first makes its inputs PDFs (see FormatNormalizer), then
    hands them to the engine for that artifact. Engines default to the CLI
    implementations and can be swapped for any object honoring the engine
    base classes.
    """

    def __init__(
        self,
        config: ExtractConfig | None = None,
        dependencies: Dependencies | None = None,
        *,
        runner: ProcessRunner | None = None,
        pages: PageExtractor | None = None,
        text: TextExtractor | None = None,
        images: ImageExtractor | None = None,
        info: InfoExtractor | None = None,
        office: OfficeConverter | None = None,
        image_converter: ImageConverter | None = None,
        cleaner: TextCleaner | None = None,
    ) -> None:
        self.config = config or ExtractConfig()
        self.dependencies = dependencies if dependencies is not None else probe_dependencies(self.config)
        self.runner = runner or ProcessRunner(self.config)
        self.cleaner = cleaner or TextCleaner()
        self.info = info or PdfinfoInfoExtractor(runner=self.runner, config=self.config)
        self.pages = pages or PdftkPageExtractor(runner=self.runner, config=self.config)
        self.text = text or PdftotextTextExtractor(
            runner=self.runner,
            info=self.info,
            config=self.config,
            dependencies=self.dependencies,
            cleaner=self.cleaner,
        )
        self.images = images or _get_image_engine(
            self.config.image_backend, runner=self.runner, info=self.info, config=self.config
        )
        self.normalizer = FormatNormalizer(
            office=office or LibreOfficeConverter(runner=self.runner, config=self.config),
            image=image_converter or GraphicsMagickImageConverter(runner=self.runner, config=self.config),
        )

    def _ensure_pdfs(self, docs: DocInput) -> list[Path]:
        return self.normalizer.ensure_pdfs(docs, out_dir=self.config.conversion_dir)

    def extract_pages(self, docs: DocInput, options: Options = None) -> None:
        opts = ExtractionOptions.coerce(options)
        pdfs = self._ensure_pdfs(docs)
        logger.info("Extracting pages", documents=[str(p) for p in pdfs], output=str(opts.output))
        self.pages.extract(pdfs=pdfs, options=opts)

    def extract_text(self, docs: DocInput, options: Options = None) -> None:
        opts = ExtractionOptions.coerce(options)
        pdfs = self._ensure_pdfs(docs)
        logger.info("Extracting text", documents=[str(p) for p in pdfs], output=str(opts.output), ocr=opts.ocr)
        self.text.extract(pdfs=pdfs, options=opts)

    def extract_images(self, docs: DocInput, options: Options = None) -> None:
        opts = ExtractionOptions.coerce(options)
        if opts.pages is not None:
            opts = replace(opts, pages=normalize_value(opts.pages))
        pdfs = self._ensure_pdfs(docs)
        logger.info(
            "Extracting images",
            documents=[str(p) for p in pdfs],
            output=str(opts.output),
            formats=list(opts.format),
            sizes=list(opts.size),
        )
        self.images.extract(pdfs=pdfs, options=opts)

    def extract_pdf(self, docs: DocInput, options: Options = None) -> list[Path]:
        opts = ExtractionOptions.coerce(options)
        return self.normalizer.extract_pdf(docs, out_dir=opts.output)

    def extract_metadata(self, key: MetadataKey | str, docs: DocInput, options: Options = None) -> str | int | None:
        key = MetadataKey(key)
        opts = ExtractionOptions.coerce(options)
        pdfs = self._ensure_pdfs(docs)
        return self.info.extract(key=key, pdfs=pdfs, options=opts)

    def extract_info(self, docs: DocInput, options: Options = None) -> dict[str, str | int | None]:
        """
        Every metadata key of the first document, from a single engine call.

        `options` is validated like everywhere else; pdfinfo reads none of it.
        """

        ExtractionOptions.coerce(options)
        pdfs = self._ensure_pdfs(docs)
        return {key.value: value for key, value in self.info.extract_all(pdfs=pdfs).items()}

    def extract_author(self, docs: DocInput, options: Options = None) -> str | None:
        return self.extract_metadata(MetadataKey.AUTHOR, docs, options)

    def extract_date(self, docs: DocInput, options: Options = None) -> str | None:
        return self.extract_metadata(MetadataKey.DATE, docs, options)

    def extract_creator(self, docs: DocInput, options: Options = None) -> str | None:
        return self.extract_metadata(MetadataKey.CREATOR, docs, options)

    def extract_keywords(self, docs: DocInput, options: Options = None) -> str | None:
        return self.extract_metadata(MetadataKey.KEYWORDS, docs, options)

    def extract_producer(self, docs: DocInput, options: Options = None) -> str | None:
        return self.extract_metadata(MetadataKey.PRODUCER, docs, options)

    def extract_subject(self, docs: DocInput, options: Options = None) -> str | None:
        return self.extract_metadata(MetadataKey.SUBJECT, docs, options)

    def extract_title(self, docs: DocInput, options: Options = None) -> str | None:
        return self.extract_metadata(MetadataKey.TITLE, docs, options)

    def extract_length(self, docs: DocInput, options: Options = None) -> int | None:
        return self.extract_metadata(MetadataKey.LENGTH, docs, options)

    def clean_text(self, text: str) -> str:
        return self.cleaner.clean(text)


_default: DocExtractor | None = None


def default_extractor() -> DocExtractor:
    """
    Lazily built DocExtractor with default config; dependencies probed once.
    """

    global _default
    if _default is None:
        _default = DocExtractor()
    return _default


def extract_pages(docs: DocInput, options: Options = None) -> None:
    default_extractor().extract_pages(docs, options)


def extract_text(docs: DocInput, options: Options = None) -> None:
    default_extractor().extract_text(docs, options)


def extract_images(docs: DocInput, options: Options = None) -> None:
    default_extractor().extract_images(docs, options)


def extract_pdf(docs: DocInput, options: Options = None) -> list[Path]:
    return default_extractor().extract_pdf(docs, options)


def extract_metadata(key: MetadataKey | str, docs: DocInput, options: Options = None) -> str | int | None:
    return default_extractor().extract_metadata(key, docs, options)


def extract_info(docs: DocInput, options: Options = None) -> dict[str, str | int | None]:
    return default_extractor().extract_info(docs, options)


def extract_author(docs: DocInput, options: Options = None) -> str | None:
    return default_extractor().extract_author(docs, options)


def extract_date(docs: DocInput, options: Options = None) -> str | None:
    return default_extractor().extract_date(docs, options)


def extract_creator(docs: DocInput, options: Options = None) -> str | None:
    return default_extractor().extract_creator(docs, options)


def extract_keywords(docs: DocInput, options: Options = None) -> str | None:
    return default_extractor().extract_keywords(docs, options)


def extract_producer(docs: DocInput, options: Options = None) -> str | None:
    return default_extractor().extract_producer(docs, options)


def extract_subject(docs: DocInput, options: Options = None) -> str | None:
    return default_extractor().extract_subject(docs, options)


def extract_title(docs: DocInput, options: Options = None) -> str | None:
    return default_extractor().extract_title(docs, options)


def extract_length(docs: DocInput, options: Options = None) -> int | None:
    return default_extractor().extract_length(docs, options)


def clean_text(text: str) -> str:
    return TextCleaner().clean(text)
