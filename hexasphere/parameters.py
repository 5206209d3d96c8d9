"""Configuration stack for building a hexasphere and running Life on it.

Parameters are layered from lowest to highest precedence:

1. JSON file: persistent run configuration, flat or split into
   ``geometry`` / ``simulation`` sections.
2. CLI overrides: runtime tweaks for headless runs.
"""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from .errors import InvalidArgument
from .topology import validate_build_arguments

__all__ = [
    "HexasphereParameters",
    "load_json_config",
    "apply_overrides",
    "parse_cli_overrides",
    "load_parameters",
]

_SECTIONS = ("geometry", "simulation")


@dataclass(slots=True)
class HexasphereParameters:
    """Canonical set of adjustable parameters."""

    radius: float = 1.0
    num_divisions: int = 8  # Subdivisions per icosahedron edge
    hex_size: float = 1.0  # Fraction of the way from tile centre to face centroid
    generations: int = 10
    seed_fraction: float = 0.3  # Share of tiles alive in a random seed
    seed: int | None = None
    segments: int | None = None  # Parallel segments per step; None = round(sqrt(N))
    max_workers: int | None = None

    def validate(self) -> None:
        validate_build_arguments(self.radius, self.num_divisions, self.hex_size)
        if not _is_int(self.generations) or self.generations < 0:
            raise InvalidArgument(
                f"generations must be a non-negative integer, got {self.generations!r}"
            )
        if not _is_number(self.seed_fraction) or not 0 <= self.seed_fraction <= 1:
            raise InvalidArgument(
                f"seed_fraction must be within [0, 1], got {self.seed_fraction!r}"
            )
        if self.seed is not None and not _is_int(self.seed):
            raise InvalidArgument(f"seed must be an integer, got {self.seed!r}")
        if self.segments is not None and (
            not _is_int(self.segments) or not 1 <= self.segments <= self.tile_count()
        ):
            raise InvalidArgument(
                f"segments must be an integer within [1, {self.tile_count()}], got {self.segments!r}"
            )
        if self.max_workers is not None and (not _is_int(self.max_workers) or self.max_workers < 1):
            raise InvalidArgument(
                f"max_workers must be a positive integer, got {self.max_workers!r}"
            )

    def tile_count(self) -> int:
        return 10 * self.num_divisions * self.num_divisions + 2

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HexasphereParameters":
        base = cls()
        merged = {**asdict(base), **_flatten_sections(data)}
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(merged) - known)
        if unknown:
            raise InvalidArgument(f"Unknown parameter(s): {', '.join(unknown)}")
        params = cls(**merged)
        params.validate()
        return params


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _flatten_sections(data: Mapping[str, Any]) -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        if key in _SECTIONS and isinstance(value, Mapping):
            flat.update(value)
        else:
            flat[key] = value
    return flat


def load_json_config(path: Path | str | None) -> Dict[str, Any]:
    """Load the JSON config file or return an empty dict if no path is given."""

    if path is None:
        return {}
    json_path = Path(path)
    if not json_path.exists():
        raise FileNotFoundError(f"Config file not found: {json_path}")
    try:
        data = json.loads(json_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise InvalidArgument(f"Config file {json_path} is not valid JSON: {exc}") from exc
    if not isinstance(data, Mapping):
        raise InvalidArgument("Top-level JSON config must be an object")
    return dict(data)


def apply_overrides(
    base: HexasphereParameters, overrides: Mapping[str, Any]
) -> HexasphereParameters:
    """Return a copy of ``base`` with overrides applied."""

    merged = base.to_dict()
    for key, value in overrides.items():
        if key not in merged:
            raise KeyError(f"Unknown parameter '{key}'")
        merged[key] = value
    return HexasphereParameters.from_dict(merged)


def parse_cli_overrides(
    args: Optional[Iterable[str]] = None,
) -> Tuple[Dict[str, Any], Any]:
    """Parse CLI-style overrides using argparse conventions."""

    parser = argparse.ArgumentParser(description="Game of Life on a geodesic hexasphere")
    parser.add_argument("--config", type=str, help="Path to JSON config", default=None)
    parser.add_argument("--radius", type=float, help="Sphere radius")
    parser.add_argument("--divisions", type=int, help="Subdivisions per icosahedron edge")
    parser.add_argument("--hex-size", type=float, help="Tile size as a fraction (0-1]")
    parser.add_argument("--generations", type=int, help="Number of generations to run")
    parser.add_argument(
        "--seed-fraction", type=float, help="Share of tiles alive in the random seed"
    )
    parser.add_argument("--seed", type=int, help="Random seed for the initial live set")
    parser.add_argument("--segments", type=int, help="Parallel segments per generation")
    parser.add_argument("--workers", type=int, help="Thread pool size per generation")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log build progress")

    parsed, unknown = parser.parse_known_args(args=args)
    if unknown:
        logging.info("Ignoring unknown CLI args: %s", " ".join(unknown))
    overrides: Dict[str, Any] = {}
    if parsed.radius is not None:
        overrides["radius"] = parsed.radius
    if parsed.divisions is not None:
        overrides["num_divisions"] = parsed.divisions
    if parsed.hex_size is not None:
        overrides["hex_size"] = parsed.hex_size
    if parsed.generations is not None:
        overrides["generations"] = parsed.generations
    if parsed.seed_fraction is not None:
        overrides["seed_fraction"] = parsed.seed_fraction
    if parsed.seed is not None:
        overrides["seed"] = parsed.seed
    if parsed.segments is not None:
        overrides["segments"] = parsed.segments
    if parsed.workers is not None:
        overrides["max_workers"] = parsed.workers

    return overrides, parsed


def load_parameters(
    config_path: Path | str | None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> HexasphereParameters:
    """Load parameters using the JSON → CLI precedence chain."""

    data = load_json_config(config_path)
    params = HexasphereParameters.from_dict(data)
    if cli_overrides:
        params = apply_overrides(params, cli_overrides)
    return params
