from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

DEFAULT_OUTPUT_NAME = "output.docx"


def configure_logging(verbose: bool = False) -> None:
    """Configure a simple console logger."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
    )


def resolve_output_path(input_path: Optional[Path], output: Optional[str]) -> Path:
    stem = input_path.stem if input_path is not None else Path(DEFAULT_OUTPUT_NAME).stem
    if output:
        out_path = Path(output).expanduser()
        if out_path.is_dir():
            out_path = out_path / f"{stem}.docx"
        return out_path
    if input_path is not None:
        return input_path.with_suffix(".docx")
    return Path.cwd() / DEFAULT_OUTPUT_NAME


def read_markdown(path: Path) -> str:
    return path.read_text(encoding="utf-8")
