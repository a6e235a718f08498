"""
Batch command line interface for tile pair hints.

Analyzes board screenshots, writes a hint overlay per image and a CSV summary
of the proposed pairs.

Usage examples
--------------

Analyze every capture in ``captures/`` and drop the results in ``hints/``::

    python -m tilematch.cli captures --output-dir hints

Stricter matching for a skin with busy icons, best three pairs only::

    python -m tilematch.cli board.png --preset strict --max-pairs 3
"""

import argparse
import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .config import STRICTNESS_PRESETS, MatchConfig
from .detector import analyze_image
from .overlay import save_overlay

logger = logging.getLogger("tilematch")

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".webp"}

CSV_FIELDS = [
    "image",
    "status",
    "tiles",
    "pairs_found",
    "rank",
    "tile_a",
    "tile_b",
    "a_x",
    "a_y",
    "b_x",
    "b_y",
    "score",
    "overlay_path",
]


@dataclass
class BatchConfig:
    """Runtime configuration derived from CLI arguments."""

    inputs: Sequence[Path]
    output_dir: Path
    match: MatchConfig
    save_overlays: bool
    summary_path: Optional[Path]


def _setup_logging(debug: bool = False):
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _gather_images(sources: Sequence[Path], recursive: bool) -> List[Path]:
    """Collect candidate image files from the provided locations."""
    seen: set = set()
    images: List[Path] = []

    for source in sources:
        if source.is_dir():
            iterator: Iterable[Path]
            iterator = source.rglob("*") if recursive else source.iterdir()
            for candidate in iterator:
                if not candidate.is_file():
                    continue
                if candidate.suffix.lower() not in IMAGE_EXTENSIONS:
                    continue
                resolved = candidate.resolve()
                if resolved not in seen:
                    seen.add(resolved)
                    images.append(resolved)
        elif source.is_file():
            if source.suffix.lower() not in IMAGE_EXTENSIONS:
                logger.warning("Skipping unsupported file: %s", source)
                continue
            resolved = source.resolve()
            if resolved not in seen:
                seen.add(resolved)
                images.append(resolved)
        else:
            logger.warning("Input path not found: %s", source)

    images.sort()
    return images


def _process_single_image(image_path: Path, cfg: BatchConfig) -> Optional[List[dict]]:
    """Analyze one capture, persist its overlay and return its CSV rows."""
    try:
        frame, result = analyze_image(image_path, cfg.match)
    except (OSError, ValueError) as exc:
        logger.warning("Failed to analyze %s: %s", image_path.name, exc)
        return None

    overlay_path: Optional[Path] = None
    if cfg.save_overlays:
        overlay_path = save_overlay(
            frame, result, cfg.output_dir / f"{image_path.stem}_hints.png"
        )

    logger.info("%s: %s", image_path.name, result.summary())

    base = {
        "image": image_path.name,
        "status": result.status,
        "tiles": result.tile_count,
        "pairs_found": result.total_pairs,
        "overlay_path": str(overlay_path) if overlay_path else "",
    }
    if not result.pairs:
        return [base]

    rows = []
    for pair in result.pairs:
        rows.append({
            **base,
            "rank": pair.rank,
            "tile_a": pair.a.id,
            "tile_b": pair.b.id,
            "a_x": round(pair.a.center.x, 1),
            "a_y": round(pair.a.center.y, 1),
            "b_x": round(pair.b.center.x, 1),
            "b_y": round(pair.b.center.y, 1),
            "score": round(pair.score, 2),
        })
    return rows


def _write_summary_csv(rows: List[dict], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="") as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=CSV_FIELDS)
        writer.writeheader()
        writer.writerows(rows)
    logger.info("Pair summary written to %s", path)


def build_match_config(args: argparse.Namespace) -> MatchConfig:
    """Preset first, then the individually given thresholds on top."""
    config = MatchConfig.from_preset(args.preset)
    return config.with_overrides(
        zonal_threshold=args.zonal_threshold,
        hist_threshold=args.hist_threshold,
        size_ratio_threshold=args.size_ratio,
        path_thickness=args.path_thickness,
        max_display_pairs=args.max_pairs,
        crop_margin_frac=args.crop_margin,
        crop_margin_px=args.crop_margin_px,
        workers=args.workers,
    )


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Suggest eliminable tile pairs on board screenshots."
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        type=Path,
        help="Image files or directories to analyze.",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=Path("hints"),
        help="Directory for hint overlays and the summary (default: ./hints).",
    )
    parser.add_argument(
        "--preset",
        choices=sorted(STRICTNESS_PRESETS),
        default="normal",
        help="Strictness tier for the similarity thresholds.",
    )
    parser.add_argument("--zonal-threshold", type=float,
                        help="Maximum worst-quadrant mismatch (0-4096).")
    parser.add_argument("--hist-threshold", type=float,
                        help="Minimum colour histogram correlation (-1 to 1).")
    parser.add_argument("--size-ratio", type=float,
                        help="Maximum relative area difference of a pair.")
    parser.add_argument("--path-thickness", type=float,
                        help="Path band width in pixels (default: half the tile size).")
    parser.add_argument("--max-pairs", type=int,
                        help="Number of pairs to display (default: 5).")
    parser.add_argument("--crop-margin", type=float,
                        help="Bezel crop per side as a fraction of the tile size.")
    parser.add_argument("--crop-margin-px", type=int,
                        help="Fixed bezel crop per side in pixels.")
    parser.add_argument("--workers", type=int,
                        help="Threads for descriptor extraction.")
    parser.add_argument(
        "--skip-overlays",
        action="store_true",
        help="Do not export hint overlay images.",
    )
    parser.add_argument(
        "--summary-path",
        type=Path,
        help="Write the CSV summary here (defaults to <output>/pairs.csv).",
    )
    parser.add_argument(
        "--no-summary",
        action="store_true",
        help="Do not emit the CSV summary.",
    )
    parser.add_argument(
        "--recursive",
        action="store_true",
        help="When inputs include directories, walk them recursively.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    _setup_logging(args.debug)

    try:
        match_config = build_match_config(args)
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 2
    logger.debug("Match config: %s", match_config.to_dict())

    images = _gather_images(args.inputs, recursive=args.recursive)
    if not images:
        logger.error("No matching images found in %s", [str(p) for p in args.inputs])
        return 1

    output_dir = args.output_dir.resolve()
    output_dir.mkdir(parents=True, exist_ok=True)

    summary_path: Optional[Path]
    if args.no_summary:
        summary_path = None
    else:
        summary_path = args.summary_path.resolve() if args.summary_path else output_dir / "pairs.csv"

    cfg = BatchConfig(
        inputs=images,
        output_dir=output_dir,
        match=match_config,
        save_overlays=not args.skip_overlays,
        summary_path=summary_path,
    )

    logger.info("Found %d image(s) to analyze -> %s", len(images), output_dir)

    rows: List[dict] = []
    for image_path in images:
        image_rows = _process_single_image(image_path, cfg)
        if image_rows is not None:
            rows.extend(image_rows)

    if rows and cfg.summary_path:
        _write_summary_csv(rows, cfg.summary_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
