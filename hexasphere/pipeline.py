"""Pipeline for a headless build-then-play run.

Each step receives a shared ``PipelineContext`` and can read/write its fields.
Steps declare their own ``should_run`` predicate so the runner skips stages
that have nothing to do.

Usage::

    from hexasphere.pipeline import LifePipeline, PipelineContext

    ctx = PipelineContext(params=my_params)
    LifePipeline().run(ctx)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional

import numpy as np

from . import life, topology as topology_mod
from .mesh import StatusFn
from .parameters import HexasphereParameters
from .topology import Topology

__all__ = [
    "PipelineContext",
    "PipelineStep",
    "LifePipeline",
    "TopologyStep",
    "SeedStep",
    "SimulationStep",
    "default_steps",
    "random_seed",
]


@dataclass
class PipelineContext:
    """Mutable state bag passed through every pipeline step."""

    params: HexasphereParameters
    status: Optional[StatusFn] = None

    # Caller-supplied seed; SeedStep picks a random one when left empty.
    initial_live: Optional[FrozenSet[int]] = None

    # Populated by TopologyStep.
    topology: Optional[Topology] = None
    validation: Dict[str, Any] = field(default_factory=dict)

    # Populated by SeedStep / SimulationStep.
    state: Optional[life.SimulationState] = None
    history: List[int] = field(default_factory=list)  # live count per generation

    def summary(self) -> Dict[str, Any]:
        return {
            "tiles": len(self.topology) if self.topology is not None else 0,
            "num_divisions": self.params.num_divisions,
            "generation": self.state.generation if self.state is not None else None,
            "live": len(self.state.live) if self.state is not None else 0,
            "history": list(self.history),
        }


class PipelineStep(ABC):
    """A single composable stage of the run."""

    name: str = "unnamed"

    def should_run(self, ctx: PipelineContext) -> bool:
        """Return ``False`` to skip this step for the current context."""
        return True

    @abstractmethod
    def execute(self, ctx: PipelineContext) -> None:
        """Perform the step's work, mutating *ctx* as needed."""
        ...


class TopologyStep(PipelineStep):
    """Build the tile set and neighbour graph, then check it."""

    name = "topology"

    def should_run(self, ctx: PipelineContext) -> bool:
        return ctx.topology is None

    def execute(self, ctx: PipelineContext) -> None:
        params = ctx.params
        ctx.topology = topology_mod.build(
            params.radius, params.num_divisions, params.hex_size, status=ctx.status
        )
        ctx.validation = topology_mod.validate_topology(ctx.topology)


class SeedStep(PipelineStep):
    """Create generation 0 from the supplied or a random live set."""

    name = "seed"

    def execute(self, ctx: PipelineContext) -> None:
        if ctx.initial_live is None:
            ctx.initial_live = random_seed(
                len(ctx.topology), ctx.params.seed_fraction, ctx.params.seed
            )
            logging.info(
                "Random seed: %d of %d tiles alive (fraction=%.3f)",
                len(ctx.initial_live),
                len(ctx.topology),
                ctx.params.seed_fraction,
            )
        ctx.state = life.initial_state(ctx.topology, ctx.initial_live)
        ctx.history = [len(ctx.state.live)]


class SimulationStep(PipelineStep):
    """Advance the seeded state by the configured number of generations."""

    name = "simulation"

    def should_run(self, ctx: PipelineContext) -> bool:
        return ctx.params.generations > 0

    def execute(self, ctx: PipelineContext) -> None:
        state = ctx.state
        for _ in range(ctx.params.generations):
            state = state.next_state(
                segments=ctx.params.segments, max_workers=ctx.params.max_workers
            )
            ctx.history.append(len(state.live))
            logging.info("Generation %d: %d live", state.generation, len(state.live))
        ctx.state = state


def random_seed(tile_count: int, fraction: float, seed: int | None = None) -> FrozenSet[int]:
    """Pick ``round(tile_count * fraction)`` distinct tile IDs at random."""
    rng = np.random.default_rng(seed)
    size = int(round(tile_count * fraction))
    chosen = rng.choice(tile_count, size=size, replace=False)
    return frozenset(int(i) for i in chosen)


def default_steps() -> List[PipelineStep]:
    return [TopologyStep(), SeedStep(), SimulationStep()]


class LifePipeline:
    """Orchestrates build, seed and simulation.

    Users can supply a custom step list to re-order, insert, or remove stages.
    """

    def __init__(self, steps: List[PipelineStep] | None = None) -> None:
        self.steps = steps if steps is not None else default_steps()

    def run(self, ctx: PipelineContext) -> PipelineContext:
        """Execute all enabled steps in order."""
        for step in self.steps:
            if step.should_run(ctx):
                logging.info("[pipeline] %s", step.name)
                step.execute(ctx)
        return ctx

    def remove(self, step_name: str) -> None:
        """Remove the step with the given name, if present."""
        self.steps = [s for s in self.steps if s.name != step_name]

    def replace(self, step_name: str, new_step: PipelineStep) -> None:
        """Replace an existing step with *new_step*."""
        for i, existing in enumerate(self.steps):
            if existing.name == step_name:
                self.steps[i] = new_step
                return
        self.steps.append(new_step)
