"""Basketball jersey plaque.

Four regions share one origin so that the exported files line up in the
slicer:

``body``    the jersey silhouette extruded by the base thickness
``number``  raised number text on top of the body
``name``    raised player name on top of the body
``trim``    a border ring around the silhouette, ``None`` when disabled
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping, Optional

from plaquecad.boolean import BooleanEngine
from plaquecad.designs.base import Design, RegionBuilder, build_text_solid
from plaquecad.errors import ConfigError
from plaquecad.fonts import Font
from plaquecad.geom import Polygon, clean_polygon
from plaquecad.offset import offset_polygon
from plaquecad.silhouette import jersey_silhouette
from plaquecad.solid import Solid, extrude

logger = logging.getLogger(__name__)

# the cutter overshoots the ring top and bottom so no faces are coplanar
_CUTTER_OVERSHOOT = 1.0


@dataclass(frozen=True)
class JerseyInputs:
    player_name: str
    number: str
    style: str
    show_trim: bool
    base_thickness: float

    @classmethod
    def from_fields(cls, values: Mapping[str, Any]) -> "JerseyInputs":
        return cls(
            player_name=values['playerName'],
            number=values['number'],
            style=values['jerseyStyle'],
            show_trim=values['showTrim'],
            base_thickness=values['baseThickness'],
        )


@dataclass(frozen=True)
class JerseyRegions:
    """One field per region; ``None`` means the region is absent."""

    body: Optional[Solid] = None
    number: Optional[Solid] = None
    name: Optional[Solid] = None
    trim: Optional[Solid] = None

    @classmethod
    def from_region_map(cls, regions: Mapping[str, Optional[Solid]]) -> "JerseyRegions":
        return cls(**{f.name: regions.get(f.name) for f in fields(cls)})

    def as_region_map(self) -> Dict[str, Optional[Solid]]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class BasketballJersey(Design):
    """Jersey plaque with player name and number."""

    config_file = 'basketball_jersey.yaml'

    def __init__(self, config=None):
        super().__init__(config)
        expected = tuple(f.name for f in fields(JerseyRegions))
        if self.config.region_ids != expected:
            raise ConfigError(f"{self.id}: regions must be {expected}, got {self.config.region_ids}")

    def outline(self, style: str) -> Polygon:
        layout = self.config
        return clean_polygon(jersey_silhouette(style, layout.layout_value('width'),
                                               layout.layout_value('height')))

    def body(self, outline: Polygon, inputs: JerseyInputs) -> Solid:
        return extrude(outline, inputs.base_thickness)

    def text(self, kind: str, text: str, inputs: JerseyInputs, font: Font,
             engine: BooleanEngine) -> Optional[Solid]:
        layout = self.config
        return build_text_solid(
            font,
            text,
            layout.layout_value(f'{kind}_size'),
            layout.layout_point(f'{kind}_center'),
            layout.layout_value('text_height'),
            inputs.base_thickness,
            engine,
        )

    def trim(self, outline: Polygon, inputs: JerseyInputs,
             engine: BooleanEngine) -> Optional[Solid]:
        if not inputs.show_trim:
            return None
        layout = self.config
        height = inputs.base_thickness + layout.layout_value('text_height')
        inner = offset_polygon(outline, layout.layout_value('trim_width'), validate=True)
        ring = extrude(outline, height)
        cutter = extrude(inner, height + 2 * _CUTTER_OVERSHOOT, -_CUTTER_OVERSHOOT)
        return engine.subtract(ring, cutter)

    def region_builders(self, values: Mapping[str, Any], font: Font,
                        engine: BooleanEngine) -> Dict[str, RegionBuilder]:
        inputs = JerseyInputs.from_fields(values)
        outline = self.outline(inputs.style)
        logger.debug("building %s for %r", self.id, inputs)
        return {
            'body': lambda: self.body(outline, inputs),
            'number': lambda: self.text('number', inputs.number, inputs, font, engine),
            'name': lambda: self.text('name', inputs.player_name, inputs, font, engine),
            'trim': lambda: self.trim(outline, inputs, engine),
        }

    def build_regions(self, field_values: Optional[Mapping[str, Any]], font: Font,
                      engine: BooleanEngine) -> JerseyRegions:
        return JerseyRegions.from_region_map(self.build(field_values, font, engine).regions)


__all__ = ['BasketballJersey', 'JerseyInputs', 'JerseyRegions']
