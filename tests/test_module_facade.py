from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from docextract.contracts import Dependencies, ExtractConfig, ExtractionOptions, ImageBackend, MetadataKey
from docextract.engines import (
    GraphicsMagickImageExtractor,
    ImageConverter,
    ImageExtractor,
    InfoExtractor,
    OfficeConverter,
    PageExtractor,
    Pypdfium2ImageExtractor,
    TextExtractor,
)
from docextract.module import DocExtractor


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[tuple[list[Path], ExtractionOptions]] = []


class _FakePages(PageExtractor, _Recorder):
    def __init__(self) -> None:
        _Recorder.__init__(self)

    def extract(self, *, pdfs, options):
        self.calls.append((list(pdfs), options))


class _FakeText(TextExtractor, _Recorder):
    def __init__(self) -> None:
        _Recorder.__init__(self)

    def extract(self, *, pdfs, options):
        self.calls.append((list(pdfs), options))


class _FakeImages(ImageExtractor, _Recorder):
    def __init__(self) -> None:
        _Recorder.__init__(self)

    def extract(self, *, pdfs, options):
        self.calls.append((list(pdfs), options))


class _FakeInfo(InfoExtractor):
    def __init__(self, values: dict[MetadataKey, str | int | None]) -> None:
        self.values = values
        self.seen: list[list[Path]] = []

    def extract(self, *, key, pdfs, options):
        self.seen.append(list(pdfs))
        return self.values.get(key)

    def extract_all(self, *, pdfs):
        self.seen.append(list(pdfs))
        return {key: self.values.get(key) for key in MetadataKey}


class _FakeConverter(OfficeConverter, ImageConverter):
    def __init__(self) -> None:
        self.converted: list[Path] = []

    def convert(self, *, document, out_dir):
        self.converted.append(document)
        target = out_dir / f"{document.stem}.pdf"
        target.write_bytes(b"%PDF-FAKE%")
        return target


class TestDocExtractor(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.pages = _FakePages()
        self.text = _FakeText()
        self.images = _FakeImages()
        self.info = _FakeInfo({MetadataKey.TITLE: "Annual Report", MetadataKey.LENGTH: 12})
        self.office = _FakeConverter()
        self.image_converter = _FakeConverter()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _extractor(self, config: ExtractConfig | None = None) -> DocExtractor:
        return DocExtractor(
            config,
            Dependencies(),
            pages=self.pages,
            text=self.text,
            images=self.images,
            info=self.info,
            office=self.office,
            image_converter=self.image_converter,
        )

    def test_inputs_become_pdfs_before_the_engine_runs(self) -> None:
        self._extractor().extract_pages([self.root / "memo.docx", self.root / "a.pdf"], {"output": self.root / "out"})

        pdfs, options = self.pages.calls[0]
        self.assertEqual(pdfs, [self.root / "memo.pdf", self.root / "a.pdf"])
        self.assertTrue((self.root / "memo.pdf").exists())
        self.assertEqual(options.output, self.root / "out")
        self.assertEqual(self.office.converted, [self.root / "memo.docx"])

    def test_images_receive_flattened_page_selection(self) -> None:
        self._extractor().extract_images(
            self.root / "a.pdf", {"pages": [range(1, 4), 7], "size": "1000x", "format": ["png", "gif"]}
        )
        _, options = self.images.calls[0]
        self.assertEqual(options.pages, "1-3,7")
        self.assertEqual(options.size, ("1000x",))
        self.assertEqual(options.format, ("png", "gif"))

    def test_text_options_pass_through(self) -> None:
        options = ExtractionOptions(output=self.root, pages=range(2, 4), ocr=False, language="fra")
        self._extractor().extract_text([self.root / "scan.png"], options)

        pdfs, received = self.text.calls[0]
        self.assertEqual(pdfs, [self.root / "scan.pdf"])
        self.assertIs(received, options)
        self.assertEqual(self.image_converter.converted, [self.root / "scan.png"])

    def test_unknown_option_keys_are_ignored(self) -> None:
        self._extractor().extract_text(self.root / "a.pdf", {"output": self.root, "bogus": 1})
        self.assertEqual(self.text.calls[0][1].output, self.root)

    def test_metadata_accessors(self) -> None:
        extractor = self._extractor()
        doc = self.root / "a.pdf"

        self.assertEqual(extractor.extract_title(doc), "Annual Report")
        self.assertEqual(extractor.extract_length(doc), 12)
        self.assertEqual(extractor.extract_metadata("title", doc), "Annual Report")
        self.assertIsNone(extractor.extract_author(doc))
        self.assertIsNone(extractor.extract_keywords(doc))

        with self.assertRaises(ValueError):
            extractor.extract_metadata("pages", doc)

    def test_extract_info_is_keyed_by_name(self) -> None:
        info = self._extractor().extract_info([self.root / "a.pdf", self.root / "b.pdf"])
        self.assertEqual(set(info), {k.value for k in MetadataKey})
        self.assertEqual(info["title"], "Annual Report")
        self.assertIsNone(info["subject"])
        self.assertEqual(self.info.seen, [[self.root / "a.pdf", self.root / "b.pdf"]])

    def test_extract_info_validates_options(self) -> None:
        with self.assertRaises(ValueError):
            self._extractor().extract_info(self.root / "a.pdf", {"quality": 150})
        self.assertEqual(self.info.seen, [])

    def test_conversion_dir_overrides_source_directory(self) -> None:
        converted = self.root / "converted"
        extractor = self._extractor(ExtractConfig(conversion_dir=converted))
        extractor.extract_pages([self.root / "memo.rtf"], {"output": self.root})
        self.assertEqual(self.pages.calls[0][0], [converted / "memo.pdf"])

    def test_extract_pdf_returns_paths_in_output(self) -> None:
        out = self._extractor().extract_pdf([self.root / "slides.ppt"], {"output": self.root / "pdf"})
        self.assertEqual(out, [self.root / "pdf" / "slides.pdf"])

    def test_clean_text(self) -> None:
        self.assertEqual(self._extractor().clean_text("Budget ~~~~ approved"), "Budget approved")

    def test_injected_dependencies_skip_probing(self) -> None:
        with patch("docextract.module.probe_dependencies") as probe:
            self._extractor()
        probe.assert_not_called()

    def test_missing_dependencies_are_probed(self) -> None:
        with patch("docextract.module.probe_dependencies", return_value=Dependencies(pdftk=True)) as probe:
            extractor = DocExtractor(ExtractConfig())
        probe.assert_called_once()
        self.assertTrue(extractor.dependencies.pdftk)
        self.assertIsInstance(extractor.images, GraphicsMagickImageExtractor)

    def test_image_backend_selection(self) -> None:
        extractor = DocExtractor(ExtractConfig(image_backend=ImageBackend.PYPDFIUM2), Dependencies())
        self.assertIsInstance(extractor.images, Pypdfium2ImageExtractor)


if __name__ == "__main__":
    unittest.main()
