"""Generation-stepped cellular automaton over a hexasphere topology.

A :class:`SimulationState` is an immutable value: the shared topology, the
frozen set of live tile IDs and a generation counter. Stepping never touches
the previous state. Each step splits the tile order into contiguous segments
and evaluates them on a thread pool against the same frozen live set, then
unions the per-segment results, so the outcome does not depend on how many
segments are used.
"""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import (
    Callable,
    FrozenSet,
    Iterable,
    Iterator,
    List,
    Optional,
    Protocol,
    Set,
    Tuple,
)

from .errors import InvalidArgument
from .topology import Topology

__all__ = [
    "Rule",
    "LandClassifier",
    "SimulationState",
    "life_rule",
    "initial_state",
    "next_state",
    "generations",
    "partition",
    "default_segment_count",
    "seed_from_classifier",
    "initial_state_from_classifier",
]

log = logging.getLogger(__name__)

Rule = Callable[[int, FrozenSet[int], FrozenSet[int]], bool]


class LandClassifier(Protocol):
    """Anything that can say whether a latitude/longitude is land."""

    def is_land(self, latitude: float, longitude: float) -> bool: ...


def life_rule(cell_id: int, neighbors: FrozenSet[int], live: FrozenSet[int]) -> bool:
    """Life on a hexasphere.

    The cell and its live neighbours are counted together. A pentagon (five
    neighbours) is alive next generation at a count of 3 or 4, a hexagon at
    3, 4 or 5.
    """

    count = 1 if cell_id in live else 0
    count += sum(1 for n in neighbors if n in live)
    if len(neighbors) == 5:
        return 2 < count < 5
    return 2 < count < 6


def default_segment_count(cell_count: int) -> int:
    return max(1, int(round(math.sqrt(cell_count))))


def partition(cell_count: int, segments: int) -> List[range]:
    """Split ``range(cell_count)`` into *segments* contiguous ranges.

    Ranges are as even as integer division allows; the first one also takes
    the remainder.
    """

    if cell_count < 0:
        raise InvalidArgument("cell_count cannot be negative")
    if cell_count == 0:
        return [range(0)]
    if not 1 <= segments <= cell_count:
        raise InvalidArgument(f"segments must be within [1, {cell_count}], got {segments}")
    size, extras = divmod(cell_count, segments)
    ranges: List[range] = []
    start = 0
    for i in range(segments):
        stop = start + size + (extras if i == 0 else 0)
        ranges.append(range(start, stop))
        start = stop
    return ranges


@dataclass(frozen=True)
class SimulationState:
    topology: Topology = field(repr=False)
    live: FrozenSet[int]
    generation: int = 0
    rule: Rule = field(default=life_rule, repr=False)

    def is_alive(self, tile_id: int) -> bool:
        return tile_id in self.live

    def cell_states(self) -> Iterator[Tuple[int, bool]]:
        """Yield ``(tile_id, is_alive)`` for every tile, in tile order."""
        for tile in self.topology.tiles:
            yield tile.index, tile.index in self.live

    def births_and_deaths(self, previous: "SimulationState") -> Tuple[FrozenSet[int], FrozenSet[int]]:
        """Tiles that came alive and tiles that died since *previous*."""
        return self.live - previous.live, previous.live - self.live

    def next_state(
        self, segments: Optional[int] = None, max_workers: Optional[int] = None
    ) -> "SimulationState":
        return next_state(self, segments=segments, max_workers=max_workers)


def initial_state(
    topology: Topology, live_ids: Iterable[int], rule: Rule = life_rule
) -> SimulationState:
    """Generation 0 for *topology* with the given tiles alive."""

    live = frozenset(int(i) for i in live_ids)
    out_of_range = sorted(i for i in live if not 0 <= i < len(topology))
    if out_of_range:
        raise InvalidArgument(
            f"{len(out_of_range)} live IDs are not tiles of this topology: {out_of_range[:5]}"
        )
    return SimulationState(topology=topology, live=live, generation=0, rule=rule)


def next_state(
    state: SimulationState,
    segments: Optional[int] = None,
    max_workers: Optional[int] = None,
) -> SimulationState:
    """Compute the following generation.

    Blocks until every segment has finished. An exception raised by the rule
    propagates out of this call.
    """

    topology = state.topology
    cell_count = len(topology)
    if segments is None:
        segments = default_segment_count(cell_count)
    ranges = partition(cell_count, segments)
    live = state.live
    rule = state.rule
    tiles = topology.tiles
    neighbor_map = topology.neighbor_map

    def evaluate(segment: range) -> Set[int]:
        born: Set[int] = set()
        for idx in segment:
            tile_id = tiles[idx].index
            if rule(tile_id, neighbor_map[tile_id], live):
                born.add(tile_id)
        return born

    result: Set[int] = set()
    with ThreadPoolExecutor(max_workers=max_workers or min(32, len(ranges))) as executor:
        futures = [executor.submit(evaluate, segment) for segment in ranges]
        for future in futures:
            result |= future.result()

    log.debug(
        "Generation %d -> %d: %d live (%d segments)",
        state.generation,
        state.generation + 1,
        len(result),
        len(ranges),
    )
    return SimulationState(
        topology=topology,
        live=frozenset(result),
        generation=state.generation + 1,
        rule=rule,
    )


def generations(
    state: SimulationState,
    segments: Optional[int] = None,
    max_workers: Optional[int] = None,
) -> Iterator[SimulationState]:
    """Lazily yield *state* followed by every later generation, forever."""

    current = state
    while True:
        yield current
        current = next_state(current, segments=segments, max_workers=max_workers)


def seed_from_classifier(topology: Topology, classifier: LandClassifier) -> FrozenSet[int]:
    """IDs of the tiles whose centre the classifier reports as land."""
    return frozenset(
        tile.index
        for tile in topology.tiles
        if classifier.is_land(tile.coordinate.latitude, tile.coordinate.longitude)
    )


def initial_state_from_classifier(
    topology: Topology, classifier: LandClassifier, rule: Rule = life_rule
) -> SimulationState:
    return initial_state(topology, seed_from_classifier(topology, classifier), rule=rule)
