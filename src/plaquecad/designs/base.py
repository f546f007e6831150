"""Common machinery for parametric designs.

A design turns coerced input values into one solid per region.  Regions are
built independently: a :class:`~plaquecad.errors.GeometryError` (including
composition and offset failures) raised while building one region makes that
region unavailable and is recorded, while the other regions still build.
"""

from __future__ import annotations

import abc
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from plaquecad.boolean import BooleanEngine
from plaquecad.config import DesignConfig, load_design_config
from plaquecad.errors import GeometryError
from plaquecad.fonts import Font
from plaquecad.glyphs import extract_text_outline, group_contours
from plaquecad.solid import Solid, extrude

logger = logging.getLogger(__name__)

DESIGN_DIR = Path(__file__).resolve().parent

RegionBuilder = Callable[[], Optional[Solid]]


@dataclass
class RegionBuild:
    """Solids per region id (``None`` = not applicable or failed)."""

    regions: Dict[str, Optional[Solid]] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)


class Design(abc.ABC):
    """A parametric design backed by a YAML definition."""

    config_file: str = ""

    def __init__(self, config: Optional[DesignConfig] = None):
        self.config = config or load_design_config(DESIGN_DIR / self.config_file)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id!r})"

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    @abc.abstractmethod
    def region_builders(self, values: Mapping[str, Any], font: Font,
                        engine: BooleanEngine) -> Dict[str, RegionBuilder]:
        """Return a zero-argument builder for every region id."""

    def build(self, fields: Optional[Mapping[str, Any]], font: Font,
              engine: BooleanEngine) -> RegionBuild:
        values = self.config.coerce_fields(fields)
        builders = self.region_builders(values, font, engine)
        result = RegionBuild()
        for region_id in self.config.region_ids:
            builder = builders.get(region_id)
            if builder is None:
                result.regions[region_id] = None
                continue
            try:
                result.regions[region_id] = builder()
            except GeometryError as exc:
                logger.warning("%s: region %r unavailable: %s", self.id, region_id, exc)
                result.regions[region_id] = None
                result.errors[region_id] = str(exc)
        return result


def build_text_solid(font: Font, text: str, size: float, center: Tuple[float, float],
                     height: float, z_base: float, engine: BooleanEngine) -> Optional[Solid]:
    """Raised text centred horizontally on ``center``.

    Each glyph's outlines are extruded with their holes, moved so that the
    glyph origin lands on ``(start_x + offset, center_y, z_base)`` and all
    pieces are unioned.  Returns ``None`` when the text has no outline.
    """

    outline = extract_text_outline(font, text, size)
    if outline.is_empty:
        return None

    start_x = outline.start_x(center[0])
    pieces: List[Solid] = []
    for placed in outline.glyphs:
        for group in group_contours(placed.contours):
            try:
                piece = extrude(group.outer, height, 0.0, holes=group.holes)
            except GeometryError as exc:
                logger.debug("skipping degenerate outline of %r: %s", placed.char, exc)
                continue
            pieces.append(piece.translated(start_x + placed.offset, center[1], z_base))

    if not pieces:
        return None
    return engine.union(*pieces)


__all__ = ['Design', 'RegionBuild', 'RegionBuilder', 'build_text_solid', 'DESIGN_DIR']
