"""CLI script to sample item frames from a directory of extracted clips.

Each sub-directory of the source holds the frames of one clip, named
``00000.jpg``, ``00001.jpg``, ... A few frames are sampled per clip and copied
into the frames directory under sequential names (``0.jpg``, ``1.jpg``, ...),
which become the drill's item images.

Usage:
    python -m scripts.import_frames /Volumes/frames/frames-512
    python -m scripts.import_frames ~/clips --per-clip 5 --first 300 --last 400
"""

import argparse
import logging
import random
import shutil
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from backend.config import settings

logger = logging.getLogger(__name__)


def import_frames(
    source: Path,
    output: Path,
    per_clip: int = 3,
    first: int = 400,
    last: int = 500,
    rng: random.Random | None = None,
) -> int:
    """Copy sampled frames from every clip directory under ``source``.

    Returns:
        Number of frames copied. Sampled frames missing on disk are skipped.
    """
    rng = rng or random.Random()
    output.mkdir(parents=True, exist_ok=True)

    copied = 0
    index = 0
    for clip in sorted(p for p in source.iterdir() if p.is_dir()):
        frames = rng.sample(range(first, last), per_clip)
        for frame in frames:
            target = output / f"{index}.jpg"
            index += 1
            try:
                shutil.copyfile(clip / f"{frame:05d}.jpg", target)
                copied += 1
            except FileNotFoundError:
                logger.debug("Missing frame %05d in %s", frame, clip.name)
        logger.info("%s: sampled frames %s", clip.name, frames)
    return copied


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Sample clip frames into the drill's frames directory",
    )
    parser.add_argument("source", type=Path, help="Directory of clip frame directories")
    parser.add_argument(
        "--output",
        type=Path,
        default=settings.frames_dir,
        help=f"Frames directory (default: {settings.frames_dir})",
    )
    parser.add_argument("--per-clip", type=int, default=3, help="Frames sampled per clip")
    parser.add_argument("--first", type=int, default=400, help="First frame number to sample from")
    parser.add_argument("--last", type=int, default=500, help="Frame number to stop before")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.source.is_dir():
        logger.error("Source not found: %s", args.source)
        sys.exit(1)

    copied = import_frames(args.source, args.output, args.per_clip, args.first, args.last)
    logger.info("Copied %d frames into %s", copied, args.output)


if __name__ == "__main__":
    main()
