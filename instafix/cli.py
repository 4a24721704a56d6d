# instafix/cli.py
# One-shot command line front end: decode, apply a profile, write a JPEG.

from __future__ import annotations

import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional

from instafix.config import load_config, load_default_config
from instafix.errors import InstafixError
from instafix.imaging.codec import decode_image, encode_jpeg
from instafix.imaging.pipeline import Processor
from instafix.models.profiles import Config
from instafix.utils.logging_utils import build_logger, log_section

OUTPUT_SUFFIX = "_instafix"


def default_output_path(input_path: Path) -> Path:
    return input_path.parent / f"{input_path.stem}{OUTPUT_SUFFIX}.jpg"


def _load(config_path: Optional[str], log: logging.Logger) -> Config:
    if config_path and config_path.strip():
        return load_config(config_path)
    cfg, path = load_default_config()
    log.info("Using config: %s", path)
    return cfg


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="instafix", description="Fit a photo onto a profile canvas.")
    ap.add_argument("input", help="Path to source image")
    ap.add_argument("--config", help="Path to profiles.toml (optional)")
    ap.add_argument("--profile", default="default", help="Profile name to apply")
    ap.add_argument("--watermark", default="", help="Watermark text (optional)")
    ap.add_argument("--out", help="Output image path (default: <input>_instafix.jpg)")
    ap.add_argument("--log-file", help="Also write logs to this file")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    log = build_logger(
        "instafix",
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=Path(args.log_file) if args.log_file else None,
    )

    input_path = Path(args.input)
    output_path = Path(args.out) if args.out else default_output_path(input_path)

    try:
        processor = Processor(_load(args.config, log))
        try:
            data = input_path.read_bytes()
        except OSError as e:
            raise InstafixError(f"open input: {e}") from e

        with log_section(f"INSTAFIX {input_path.name} [{args.profile}]", log):
            src = decode_image(data, input_path.name)
            result, quality = processor.process(src, args.profile, args.watermark)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(encode_jpeg(result, quality))
        except OSError as e:
            raise InstafixError(f"write output: {e}") from e
    except InstafixError as e:
        print(f"instafix: {e}", file=sys.stderr)
        return 1

    log.info(f"Output: {output_path} ({result.width}x{result.height}, q={quality})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
