"""
Smoke tests for the batch CLI.

Runs the whole capture -> regions -> pairs -> overlay chain on a small
synthetic board so regressions in wiring or filesystem layout are caught early.
"""

from __future__ import annotations

import csv
from pathlib import Path

import numpy as np
from PIL import Image

from tilematch.cli import main as cli_main


def _save_board(path: Path, mode: str = "RGB") -> None:
    """Two rows of four light tiles; the first two and the last two are twins."""
    icons = [
        [(220, 40, 40), (220, 40, 40), (40, 160, 40), (40, 40, 220)],
        [(40, 160, 40), (40, 40, 220), (240, 200, 40), (240, 200, 40)],
    ]
    pixels = np.full((200, 300, 3), 30, dtype=np.uint8)
    for j, row in enumerate(icons):
        for i, icon in enumerate(row):
            x, y = 20 + 60 * i, 20 + 60 * j
            pixels[y:y + 40, x:x + 40] = (235, 235, 235)
            pixels[y + 12:y + 28, x + 12:x + 28] = icon
    image = Image.fromarray(pixels)
    image.convert(mode).save(path)


def _read_rows(path: Path):
    with path.open(newline="") as handle:
        return list(csv.DictReader(handle))


def test_cli_smoke(tmp_path):
    input_dir = tmp_path / "input"
    output_dir = tmp_path / "output"
    input_dir.mkdir()

    source = input_dir / "board.png"
    _save_board(source)

    exit_code = cli_main(
        [
            str(source),
            "--output-dir",
            str(output_dir),
        ]
    )

    overlay = output_dir / "board_hints.png"
    summary_path = output_dir / "pairs.csv"

    assert exit_code == 0
    assert overlay.exists(), "CLI did not write the hint overlay"
    assert summary_path.exists(), "CLI did not persist pairs.csv"

    with Image.open(overlay) as img:
        assert img.size[0] == 300
        assert img.size[1] > 200, "status bar missing"

    rows = _read_rows(summary_path)
    assert rows, "pairs.csv is empty"
    assert rows[0]["image"] == "board.png"
    assert rows[0]["status"] == "ok"
    assert rows[0]["tiles"] == "8"
    pairs = {(r["tile_a"], r["tile_b"]) for r in rows}
    assert {("0", "1"), ("6", "7")} <= pairs
    assert rows[0]["overlay_path"].endswith("board_hints.png")


def test_cli_directory_without_overlays(tmp_path):
    input_dir = tmp_path / "captures"
    input_dir.mkdir()
    _save_board(input_dir / "a.png")
    _save_board(input_dir / "b.png", mode="RGBA")
    (input_dir / "notes.txt").write_text("not an image")
    summary_path = tmp_path / "summary.csv"

    exit_code = cli_main(
        [
            str(input_dir),
            "--output-dir",
            str(tmp_path / "out"),
            "--skip-overlays",
            "--summary-path",
            str(summary_path),
            "--max-pairs",
            "1",
        ]
    )

    assert exit_code == 0
    assert not list((tmp_path / "out").glob("*.png"))
    rows = _read_rows(summary_path)
    assert sorted({r["image"] for r in rows}) == ["a.png", "b.png"]
    assert all(r["rank"] == "0" for r in rows), "only the best pair per image"
    assert all(r["overlay_path"] == "" for r in rows)


def test_cli_rejects_bad_thresholds(tmp_path):
    source = tmp_path / "board.png"
    _save_board(source)
    assert cli_main([str(source), "--hist-threshold", "3.0"]) == 2


def test_cli_without_images(tmp_path):
    assert cli_main([str(tmp_path / "missing.png")]) == 1
