"""Static building catalog and the starter plans for a fresh colony."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .state import BuildKind, Building


@dataclass(frozen=True)
class BuildingSpec:
    kind: BuildKind
    display_name: str
    cost_points: float
    min_tech_level: float

    def instantiate(self) -> Building:
        return Building(
            kind=self.kind,
            display_name=self.display_name,
            cost_points=self.cost_points,
            min_tech_level=self.min_tech_level,
        )


BUILDING_CATALOG: Tuple[BuildingSpec, ...] = (
    BuildingSpec(BuildKind.HOUSE, "Shelter", 15.0, 0.0),
    BuildingSpec(BuildKind.HOUSE, "Stone House", 30.0, 1.0),
    BuildingSpec(BuildKind.HOUSE, "Longhouse", 55.0, 3.0),
    BuildingSpec(BuildKind.GREENHOUSE, "Greenhouse", 20.0, 0.0),
    BuildingSpec(BuildKind.GREENHOUSE, "Irrigated Greenhouse", 35.0, 1.0),
    BuildingSpec(BuildKind.GREENHOUSE, "Hydroponic Tower", 60.0, 4.0),
    BuildingSpec(BuildKind.SCHOOL, "School", 40.0, 0.0),
    BuildingSpec(BuildKind.SCHOOL, "Observatory School", 80.0, 2.0),
)

STARTER_PLANS: Tuple[BuildingSpec, ...] = (
    BuildingSpec(BuildKind.GREENHOUSE, "Greenhouse", 20.0, 0.0),
    BuildingSpec(BuildKind.HOUSE, "House", 15.0, 0.0),
    BuildingSpec(BuildKind.SCHOOL, "School", 40.0, 0.0),
)


def initial_build_queue() -> List[Building]:
    return [spec.instantiate() for spec in STARTER_PLANS]


def unlocked(catalog: Sequence[BuildingSpec], technology_level: float) -> List[BuildingSpec]:
    return [spec for spec in catalog if spec.min_tech_level <= technology_level]
