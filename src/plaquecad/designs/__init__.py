"""Registry of the parametric designs shipped with plaquecad."""

from __future__ import annotations

from typing import Dict, Sequence

from plaquecad.designs.base import Design, RegionBuild, build_text_solid
from plaquecad.designs.basketball_jersey import BasketballJersey
from plaquecad.errors import UnknownDesignError

DESIGNS: Dict[str, Design] = {}


def register_design(design: Design) -> Design:
    DESIGNS[design.id] = design
    return design


def get_design(design_id: str) -> Design:
    try:
        return DESIGNS[design_id]
    except KeyError:
        raise UnknownDesignError(design_id) from None


def available_designs() -> Sequence[str]:
    return tuple(sorted(DESIGNS))


register_design(BasketballJersey())


__all__ = [
    'DESIGNS',
    'Design',
    'RegionBuild',
    'BasketballJersey',
    'build_text_solid',
    'register_design',
    'get_design',
    'available_designs',
]
