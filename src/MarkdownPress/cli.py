from __future__ import annotations

import argparse
import sys
import logging
from pathlib import Path

from . import converter
from .errors import ParseError, RenderError
from .utils import configure_logging, read_markdown, resolve_output_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="markdownpress",
        description="Convert Markdown files or strings into a styled DOCX document.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("-p", "--path", type=str, help="Path to the Markdown file")
    source.add_argument("-s", "--string", type=str, help="Markdown content as a string")
    parser.add_argument("-o", "--output", type=str, help="Output DOCX path")
    parser.add_argument("--style", type=str, help="YAML file with style overrides")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)

    input_path = Path(args.path).expanduser() if args.path else None
    output_path = resolve_output_path(input_path, args.output)

    try:
        if input_path is not None:
            logging.info("Reading %s", input_path)
            markdown_text = read_markdown(input_path)
        else:
            markdown_text = args.string
    except OSError as exc:
        print(f"[X] Error reading file: {exc}", file=sys.stderr)
        return 1

    logging.info("Rendering DOCX to %s", output_path)
    try:
        converter.convert_markdown(
            markdown_text,
            output_path,
            style_path=args.style,
            asset_root=input_path.parent if input_path is not None else None,
        )
    except (ParseError, RenderError) as exc:
        logging.debug("Conversion failed", exc_info=True)
        print(f"[X] Conversion error: {exc}", file=sys.stderr)
        return 1

    print(f"[✓] Successfully saved DOCX to {output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
