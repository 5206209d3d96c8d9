#!/usr/bin/env python3
"""Headless entry point: build a hexasphere and run Life on it."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import List, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from hexasphere import parameters
from hexasphere.errors import HexasphereError, InvalidArgument
from hexasphere.pipeline import LifePipeline, PipelineContext


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )


def main(argv: Sequence[str] | None = None) -> int:
    overrides, cli = parameters.parse_cli_overrides(_sanitized_args(argv))
    configure_logging(cli.verbose)
    try:
        params = parameters.load_parameters(cli.config, overrides)
    except (HexasphereError, KeyError, FileNotFoundError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return 2
    logging.info(
        "Parameters: radius=%.3f divisions=%d hex_size=%.3f generations=%d",
        params.radius,
        params.num_divisions,
        params.hex_size,
        params.generations,
    )

    try:
        ctx = LifePipeline().run(PipelineContext(params=params))
    except InvalidArgument as exc:
        logging.error("Invalid configuration: %s", exc)
        return 2
    print(json.dumps(ctx.summary(), indent=2))
    return 0


def _sanitized_args(argv: Sequence[str] | None) -> List[str]:
    args = list(sys.argv[1:] if argv is None else argv)
    # Drop the "--" separator some launchers insert before script arguments.
    return [arg for arg in args if arg != "--"]


if __name__ == "__main__":
    raise SystemExit(main())
