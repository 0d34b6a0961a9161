#!/usr/bin/env python3
"""Headless entry point for the golden rhombohedron generator."""

from __future__ import annotations

import logging
from pathlib import Path
import sys
from typing import List, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from freecad_rhombohedron import parameters
from freecad_rhombohedron.pipeline import PipelineContext, RhombohedronPipeline


def configure_logging() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def main(argv: Sequence[str] | None = None) -> PipelineContext | None:
    configure_logging()
    overrides, cli = parameters.parse_cli_overrides(_sanitized_args(argv))
    params = parameters.load_parameters(_resolve_config_path(cli.config), overrides)
    if not cli.no_gui:
        params = parameters.prompt_parameters_dialog(params)
        if params is None:
            logging.info("Parameter dialog cancelled; nothing generated")
            return None
    logging.info(
        "Parameters: scale=%.3f variants=%s rotation_speed=%.3f",
        params.scale,
        ",".join(params.variants),
        params.rotation_speed,
    )

    ctx = PipelineContext(
        params=params,
        out_dir=Path(cli.out_dir),
        manifest_name=cli.manifest_name,
        obj_name=cli.obj_name,
        stl_name=cli.stl_name,
    )
    RhombohedronPipeline().run(ctx)
    failed = [name for name, report in ctx.validation.items() if not report.get("ok")]
    if failed:
        logging.error("Validation failed for: %s", ", ".join(failed))
    return ctx


def _sanitized_args(argv: Sequence[str] | None) -> List[str]:
    # FreeCAD passes its own argv (script path, flags) when running macros.
    args = list(sys.argv[1:] if argv is None else argv)
    return [a for a in args if not a.endswith((".FCMacro", ".FCStd"))]


def _resolve_config_path(path: str | None) -> Path | None:
    if path:
        return Path(path)
    default = REPO_ROOT / "configs" / "default.json"
    return default if default.exists() else None


if __name__ == "__main__":
    main()
