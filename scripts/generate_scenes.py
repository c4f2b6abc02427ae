#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from repoverse.config.runtime_config import merged_environment, resolve_token, resolve_username, validate_setup  # noqa: E402
from repoverse.scene_core import SceneBuildError, SeededRandomSource, build_scene, evaluate_scene  # noqa: E402
from repoverse.scene_core.models import SCENE_STYLES  # noqa: E402
from repoverse.scene_core.nodes import serialize  # noqa: E402
from repoverse.sources.github import DEFAULT_REPO_LIMIT, SourceError, load_scene_inputs  # noqa: E402

logger = logging.getLogger("repoverse.cli")

DEFAULT_OUT_DIR = "public"
LIMIT_KEY = "REPOVERSE_REPO_LIMIT"
OUT_DIR_KEY = "REPOVERSE_OUTPUT_DIR"

OUTPUT_FILES = {
    "orbital": "universe-3d.svg",
    "cityscape": "cityscape.svg",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="generate_scenes",
        description="Render a GitHub user's repositories as animated SVG scenes.",
    )
    parser.add_argument("username", nargs="?", help="GitHub user (defaults to REPOVERSE_GITHUB_USERNAME, then a demo user)")
    parser.add_argument("--out-dir", default=None, help=f"directory for the generated SVG files (default: {OUT_DIR_KEY} or {DEFAULT_OUT_DIR})")
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help=f"number of top repositories to draw (default: {LIMIT_KEY} or {DEFAULT_REPO_LIMIT})",
    )
    parser.add_argument(
        "--style",
        action="append",
        choices=list(SCENE_STYLES),
        help="scene style to render; repeat for several (default: all)",
    )
    parser.add_argument("--seed", type=int, default=None, help="seed for windows, beacons and stars")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug detail")
    return parser


def write_scenes(viewer, entities, styles: list[str], out_dir: Path, seed: int | None = None) -> list[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for style in styles:
        source = SeededRandomSource(seed) if seed is not None else None
        built = build_scene(style, viewer, entities, source=source)
        report = evaluate_scene(built)
        for failure in report["failures"]:
            logger.warning("CLI: %s scene check failed: %s", style, failure)
        target = out_dir / OUTPUT_FILES[style]
        target.write_text(serialize(built.root), encoding="utf-8")
        logger.info("CLI: wrote %s (%d entities)", target, built.entity_count)
        written.append(target)
    return written


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    values = merged_environment()
    setup = validate_setup(values)
    for warning in setup["warnings"]:
        logger.warning("CLI: %s", warning)
    if not setup["ok"]:
        for error in setup["errors"]:
            logger.error("CLI: %s", error)
        return 1

    limit = args.limit if args.limit is not None else int(values.get(LIMIT_KEY) or DEFAULT_REPO_LIMIT)
    out_dir = Path(args.out_dir or values.get(OUT_DIR_KEY) or DEFAULT_OUT_DIR)
    if limit < 1:
        logger.error("CLI: --limit must be >= 1")
        return 1

    username = resolve_username(args.username, values)
    styles = list(dict.fromkeys(args.style or SCENE_STYLES))
    logger.info("CLI: generating %s for '%s'", ", ".join(styles), username)

    try:
        viewer, entities = asyncio.run(load_scene_inputs(username, resolve_token(values), limit, values))
        written = write_scenes(viewer, entities, styles, out_dir, args.seed)
    except (SourceError, SceneBuildError, OSError) as exc:
        logger.error("CLI: scene generation failed: %s", exc)
        return 1

    for path in written:
        print(f"generate-scenes: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
