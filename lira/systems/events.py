"""Colony journal: formatting and appending typed log lines."""

from __future__ import annotations

import random
from enum import Enum
from typing import Dict, List, Optional, Sequence

from ..config.constants import MAX_LOG_LINES
from ..simulation.state import SimulationState


class EventKind(Enum):
    EXPLORATION = "exploration"
    MILESTONE = "milestone"
    CONSTRUCTION = "construction"
    RESEARCH = "research"
    POPULATION = "population"
    RESOURCES = "resources"
    CAPACITY = "capacity"
    GENERAL = "general"
    ENVIRONMENT = "environment"
    WARNING = "warning"
    CELEBRATION = "celebration"
    NARRATIVE = "narrative"


EVENT_ICONS: Dict[EventKind, str] = {
    EventKind.EXPLORATION: "🔎",
    EventKind.MILESTONE: "📍",
    EventKind.CONSTRUCTION: "🏗",
    EventKind.RESEARCH: "🔬",
    EventKind.POPULATION: "👥",
    EventKind.RESOURCES: "🍎",
    EventKind.CAPACITY: "🏠",
    EventKind.GENERAL: "ℹ️",
    EventKind.ENVIRONMENT: "🌦",
    EventKind.WARNING: "⚠️",
    EventKind.CELEBRATION: "🎉",
    EventKind.NARRATIVE: "📖",
}

DISCOVERY_ITEMS = [
    "amber reeds", "salt flats", "basalt springs", "silver moss",
    "glow beetles", "lichen crystals", "reed sugar", "spice pods",
    "wind-polished stones", "luminescent fungi", "sweetwater pool",
    "iron shards", "mica dunes", "wild grain", "copper vines",
]
DISCOVERY_VERBS = ["found", "spotted", "catalogued", "sampled", "noted"]

TECH_DISCOVERIES: Dict[int, List[str]] = {
    1: ["basic irrigation", "stone masonry", "reed weaving", "fire pits"],
    2: ["metal tools", "greenhouse automation", "copper smelting", "basic medicine"],
    3: ["wind turbines", "water purification", "glassmaking", "simple machinery"],
    4: ["advanced optics", "chemical fertilizers", "steam engines", "solar stills"],
    5: ["bioluminescent lighting", "hydroponic towers", "electric storage", "radio beacons"],
}

STARTER_SUPPLIES = [
    "seed packs", "tool kits", "water filters", "bandages",
    "solar cells", "spare antennae clips", "camp stoves",
    "blankets", "navigation beacons", "field notebooks",
]
SKY_PHENOMENA = [
    "a soft twin-moon rise", "a slow meteor ribbon",
    "emerald auroras over the dunes", "glow-clouds drifting low",
    "a ring-shadow sweeping the valley",
]
WEATHER_SNIPPETS = [
    "gentle rain freshened the greenhouses",
    "a dust breeze coated everything in gold",
    "a cool fog curled along the river flats",
    "bright sun made the reeds sing",
    "night frost sparkled on the walkways",
]
FAUNA_RUMORS = [
    "tiny shellbacks nest near the sweetwater pool",
    "reed-mice gather around lanterns",
    "glow beetles dance at dusk",
    "sandcrabs like shiny stones",
    "wind moths follow footsteps",
]
MINOR_WARNINGS = [
    "Dust gusts expected by evening",
    "Watch for loose walkway planks near the river",
    "Conserve lantern oil, shipment delayed",
    "Radio static increasing around the ridge",
]

DISCOVERY_CHANCE = 35
WEATHER_CHANCE = 70
RUMOR_CHANCE = 40
WARNING_CHANCE = 20


def format_entry(day: int, kind: EventKind, body: str) -> str:
    return f"Day {day}: {EVENT_ICONS[kind]} {body}"


def append_entry(log: List[str], line: str, limit: int = MAX_LOG_LINES) -> None:
    """Append ``line`` and drop the oldest entries beyond ``limit``."""
    log.append(line)
    overflow = len(log) - limit
    if overflow > 0:
        del log[:overflow]


class EventGenerator:
    """Writes journal lines into a :class:`SimulationState`.

    Flavour choices draw from ``rng`` so a seeded generator gives a
    reproducible journal. With ``ambient`` disabled only simulation events
    are written; discovery suffixes and tech flavour are skipped too.
    """

    def __init__(self, rng: Optional[random.Random] = None, *, ambient: bool = True, limit: int = MAX_LOG_LINES):
        self.rng = rng or random.Random()
        self.ambient = ambient
        self.limit = limit

    def push(self, state: SimulationState, day: int, kind: EventKind, body: str) -> None:
        append_entry(state.event_log, format_entry(day, kind, body), self.limit)

    def _roll(self, chance: int) -> bool:
        return self.ambient and self.rng.randrange(100) < chance

    def _pick(self, pool: Sequence[str]) -> str:
        return self.rng.choice(list(pool))

    # Prologue ---------------------------------------------------------

    def prologue(self, state: SimulationState, day: int = 1) -> None:
        self.push(state, day, EventKind.NARRATIVE, "Touchdown successful. Instruments nominal")
        self.push(state, day, EventKind.CONSTRUCTION, "Raised first shelter and set a small campfire")
        if self.ambient:
            first, second = self.rng.sample(STARTER_SUPPLIES, 2)
            self.general_info(state, day, f"Unpacked {first} and {second}")
        self.push(state, day, EventKind.CONSTRUCTION, "Started building a greenhouse")
        if self.ambient:
            self.push(state, day, EventKind.NARRATIVE, f"Camp quiet. We watched {self._pick(SKY_PHENOMENA)}")

    # Exploration ------------------------------------------------------

    def exploration_daily(self, state: SimulationState, day: int, delta_km: float, total_km: float) -> None:
        message = f"Explored surroundings (+{delta_km:.2f} km, total {total_km:.2f} km)"
        if self._roll(DISCOVERY_CHANCE):
            verb = self._pick(DISCOVERY_VERBS)
            message += f" {verb.capitalize()} {self._pick(DISCOVERY_ITEMS)}"
        self.push(state, day, EventKind.EXPLORATION, message)

    def exploration_milestone(self, state: SimulationState, day: int, km: int) -> None:
        self.push(state, day, EventKind.MILESTONE, f"Scouted out to {km} km")

    # Construction -----------------------------------------------------

    def construction_planned(self, state: SimulationState, day: int, name: str) -> None:
        self.push(state, day, EventKind.CONSTRUCTION, f"Queued: {name}")

    def construction_started(self, state: SimulationState, day: int, name: str, days: int) -> None:
        self.push(
            state,
            day,
            EventKind.CONSTRUCTION,
            f"Construction started: {name}, estimated {days} days to complete",
        )

    def construction_progress(self, state: SimulationState, day: int, name: str, percent: int) -> None:
        self.push(state, day, EventKind.CONSTRUCTION, f"Construction underway: {name} {percent}% complete")

    def built_house(self, state: SimulationState, day: int, name: str, beds_added: int) -> None:
        self.push(state, day, EventKind.CONSTRUCTION, f"Built a {name} (+{beds_added} beds)")

    def built_greenhouse(self, state: SimulationState, day: int, name: str) -> None:
        self.push(state, day, EventKind.CONSTRUCTION, f"Built a {name} (+food)")

    def opened_school(self, state: SimulationState, day: int, name: str) -> None:
        self.push(state, day, EventKind.CONSTRUCTION, f"Opened a {name} (+Tech)")

    def idle_builders(self, state: SimulationState, day: int) -> None:
        self.push(state, day, EventKind.CONSTRUCTION, "Builders idle, no projects in queue")

    # Science ----------------------------------------------------------

    def breakthrough(self, state: SimulationState, day: int, tech_level: int) -> None:
        message = f"Breakthrough! Tech is now {tech_level}"
        discoveries = TECH_DISCOVERIES.get(tech_level)
        if discoveries and self.ambient:
            message += f" Mastered: {self._pick(discoveries)}"
        self.push(state, day, EventKind.RESEARCH, message)

    # Population and resources -----------------------------------------

    def arrivals(self, state: SimulationState, day: int, count: int) -> None:
        self.push(state, day, EventKind.POPULATION, f"New arrivals: +{count} Liri")

    def growth_paused_for_food(self, state: SimulationState, day: int) -> None:
        self.push(state, day, EventKind.CAPACITY, "Growth paused due to food shortage")

    def food_surplus(self, state: SimulationState, day: int, surplus: int) -> None:
        self.push(state, day, EventKind.RESOURCES, f"Surplus food detected (+{surplus} units)")

    def food_deficit(self, state: SimulationState, day: int, deficit: int) -> None:
        self.push(state, day, EventKind.WARNING, f"Food deficit today (~{deficit} rations)")

    def population_cap_reached(self, state: SimulationState, day: int) -> None:
        self.push(state, day, EventKind.CAPACITY, "Population growth halted, housing at capacity")

    def general_info(self, state: SimulationState, day: int, message: str) -> None:
        self.push(state, day, EventKind.GENERAL, message)

    def celebrate(self, state: SimulationState, day: int, message: str) -> None:
        self.push(state, day, EventKind.CELEBRATION, message)

    # Ambient ----------------------------------------------------------

    def auto_daily(self, state: SimulationState, day: int) -> None:
        """Sprinkle weather notes, rumours and warnings for the closing day."""
        if not self.ambient:
            return
        if self._roll(WEATHER_CHANCE):
            self.push(state, day, EventKind.ENVIRONMENT, self._pick(WEATHER_SNIPPETS))
        if self._roll(RUMOR_CHANCE):
            self.push(state, day, EventKind.NARRATIVE, f"Report: {self._pick(FAUNA_RUMORS)}")
        if self._roll(WARNING_CHANCE):
            self.push(state, day, EventKind.WARNING, self._pick(MINOR_WARNINGS))
