#!/usr/bin/env python
"""Erase watermarks from every image in a folder.

Results are written under the same file names to the output folder, which is
recreated on each run. Proxy settings are read from the DEWATERMARK_PROXY_*
environment variables.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import shutil
import sys
from pathlib import Path

from dewatermark import DeWatermark, DeWatermarkError
from dewatermark.config import get_settings

logger = logging.getLogger("erase_images")

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp"}


async def erase_one(client: DeWatermark, src: Path, dst: Path, semaphore: asyncio.Semaphore) -> bool:
    async with semaphore:
        logger.info("Processing %s...", src)
        try:
            result = await client.erase_watermark(src.read_bytes())
        except DeWatermarkError as exc:
            logger.error("Failed %s: %s", src, exc)
            return False
        dst.write_bytes(result)
        logger.info(" -> Saved result to %s", dst)
        return True


async def run(input_dir: Path, output_dir: Path, concurrency: int) -> int:
    images = sorted(p for p in input_dir.iterdir() if p.suffix.lower() in IMAGE_SUFFIXES)
    if not images:
        logger.error("No images found in '%s'", input_dir)
        return 1

    if output_dir.exists():
        shutil.rmtree(output_dir)
    output_dir.mkdir(parents=True)

    semaphore = asyncio.Semaphore(concurrency)
    async with DeWatermark(get_settings().proxy) as client:
        outcomes = await asyncio.gather(
            *(erase_one(client, src, output_dir / src.name, semaphore) for src in images)
        )
    failed = outcomes.count(False)
    logger.info("Done: %d succeeded, %d failed", len(outcomes) - failed, failed)
    return 1 if failed else 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Erase watermarks from a folder of images")
    parser.add_argument("--input", type=Path, default=Path("images"))
    parser.add_argument("--output", type=Path, default=Path("results"))
    parser.add_argument("--concurrency", type=int, default=4)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    if not args.input.is_dir():
        parser.error(f"input folder not found: {args.input}")
    sys.exit(asyncio.run(run(args.input, args.output, max(1, args.concurrency))))


if __name__ == "__main__":
    main()
