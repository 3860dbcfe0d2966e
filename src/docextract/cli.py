from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .artifacts import serialize_metadata, write_metadata_json
from .contracts import ExtractConfig, ExtractionOptions, ImageBackend, MetadataKey
from .logging_config import configure_logging
from .module import DocExtractor
from .runner import ExtractionFailed
from .text_cleaner import TextCleaner


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("docs", nargs="+", type=Path, help="Input documents (PDF, office or image files).")
    p.add_argument("-o", "--output", type=Path, default=Path("."), help="Output directory (default: .).")


def _add_pages(p: argparse.ArgumentParser) -> None:
    p.add_argument("-p", "--pages", default=None, help='Page selection like "1,3-5" or "all".')


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="docextract",
        description="Split documents into pages, text, images and metadata using external engines.",
    )
    p.add_argument("--timeout-s", type=float, default=600.0, help="Per-engine timeout in seconds.")
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for diagnostics on stderr.",
    )
    p.add_argument("--json-logs", action="store_true", help="Emit logs as JSON lines.")
    sub = p.add_subparsers(dest="command", required=True)

    pages = sub.add_parser("pages", help="Burst documents into one PDF per page.")
    _add_common(pages)
    _add_pages(pages)

    text = sub.add_parser("text", help="Extract text, with OCR where needed.")
    _add_common(text)
    _add_pages(text)
    ocr = text.add_mutually_exclusive_group()
    ocr.add_argument("--ocr", dest="ocr", action="store_const", const=True, help="Force OCR.")
    ocr.add_argument("--no-ocr", dest="ocr", action="store_const", const=False, help="Never OCR.")
    text.add_argument("--no-clean", action="store_true", help="Keep OCR output uncleaned.")
    text.add_argument("-l", "--language", default="eng", help="OCR language (default: eng).")
    text.add_argument("-f", "--format", action="append", default=None, choices=["txt", "html"])

    images = sub.add_parser("images", help="Rasterize pages to images.")
    _add_common(images)
    _add_pages(images)
    images.add_argument("-f", "--format", action="append", default=None, help="Image format (repeatable).")
    images.add_argument("-s", "--size", action="append", default=None, help='Geometry like "1000x" (repeatable).')
    images.add_argument("-r", "--rotate", type=int, default=None, help="Rotation in degrees.")
    images.add_argument("-d", "--density", type=int, default=None, help="Render density in DPI.")
    images.add_argument("-q", "--quality", type=int, default=None, help="Output quality (0..100).")
    images.add_argument(
        "--backend",
        choices=[b.value for b in ImageBackend],
        default=ImageBackend.GRAPHICSMAGICK.value,
        help="Rasterization backend.",
    )

    pdf = sub.add_parser("pdf", help="Convert documents to PDF.")
    _add_common(pdf)

    info = sub.add_parser("info", help="Print document metadata as JSON.")
    info.add_argument("docs", nargs="+", type=Path)
    info.add_argument("--key", choices=[k.value for k in MetadataKey], default=None, help="Only this key.")
    info.add_argument("--out", type=Path, default=None, help="Write JSON here instead of stdout.")

    clean = sub.add_parser("clean", help="Clean OCR garbage from a text file; prints to stdout.")
    clean.add_argument("file", type=Path)

    return p


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.log_level, json=args.json_logs)

    config = ExtractConfig(
        timeout_s=args.timeout_s,
        image_backend=ImageBackend(getattr(args, "backend", ImageBackend.GRAPHICSMAGICK.value)),
    )

    if args.command == "clean":
        text = args.file.read_text(encoding="utf-8", errors="replace")
        sys.stdout.write(TextCleaner().clean(text))
        return 0

    extractor = DocExtractor(config)

    try:
        options = ExtractionOptions.from_mapping(
            {
                "output": getattr(args, "output", None),
                "pages": getattr(args, "pages", None),
                "format": getattr(args, "format", None),
                "size": getattr(args, "size", None),
                "rotate": getattr(args, "rotate", None),
                "density": getattr(args, "density", None),
                "quality": getattr(args, "quality", None),
                "language": getattr(args, "language", None),
                "ocr": getattr(args, "ocr", None),
                "clean": not getattr(args, "no_clean", False),
            }
        )
        if args.command == "pages":
            extractor.extract_pages(args.docs, options)
        elif args.command == "text":
            extractor.extract_text(args.docs, options)
        elif args.command == "images":
            extractor.extract_images(args.docs, options)
        elif args.command == "pdf":
            for path in extractor.extract_pdf(args.docs, options):
                print(path)
        elif args.command == "info":
            if args.key is not None:
                info = {args.key: extractor.extract_metadata(args.key, args.docs)}
            else:
                info = extractor.extract_info(args.docs)
            if args.out is not None:
                write_metadata_json(info=info, out_file=args.out)
            else:
                sys.stdout.write(serialize_metadata(info))
    except ExtractionFailed as e:
        print(str(e), file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"docextract: {e}", file=sys.stderr)
        return 2

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
