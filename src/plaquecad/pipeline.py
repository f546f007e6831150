"""Generation entry point.

``generate`` waits for the shared font and boolean engine, then builds
every region of a design synchronously.  Results carry the request id they
were made for so that a caller issuing a new request while an old one is
still running can drop the stale result::

    sequencer = RequestSequencer()
    result = await generate('basketball-jersey', {'number': '7'}, cache,
                            request_id=sequencer.next_id())
    if sequencer.is_current(result):
        show(display_mesh(result))
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from plaquecad.designs import get_design
from plaquecad.mesh import TriangleMesh, merge_solids
from plaquecad.resources import ResourceCache
from plaquecad.solid import Solid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    request_id: Optional[int]
    design_id: str
    regions: Dict[str, Optional[Solid]] = field(default_factory=dict)
    region_errors: Dict[str, str] = field(default_factory=dict)

    def present(self) -> Dict[str, Solid]:
        """Regions that produced a solid."""

        return {k: v for k, v in self.regions.items() if v is not None}


class RequestSequencer:
    """Hands out increasing request ids; the newest id wins."""

    def __init__(self):
        self._counter = itertools.count(1)
        self.latest = 0

    def next_id(self) -> int:
        self.latest = next(self._counter)
        return self.latest

    def is_current(self, result: GenerationResult) -> bool:
        return result.request_id == self.latest


async def generate(design_id: str, fields: Optional[Mapping[str, Any]],
                   resources: ResourceCache,
                   request_id: Optional[int] = None) -> GenerationResult:
    """Build every region of ``design_id`` from ``fields``.

    Raises:
        UnknownDesignError: no such design.
        ResourceError: the font or boolean engine could not be loaded.
    """

    design = get_design(design_id)
    font = await resources.font()
    engine = await resources.engine()

    build = design.build(fields, font, engine)
    logger.info("generated %s (request %s): %d/%d regions",
                design_id, request_id,
                sum(1 for s in build.regions.values() if s is not None), len(build.regions))
    return GenerationResult(request_id, design_id, build.regions, build.errors)


def display_mesh(result: GenerationResult, smooth: bool = False) -> TriangleMesh:
    """All present regions merged into one mesh for viewing."""

    return merge_solids(result.regions.values(), smooth=smooth)


__all__ = ['GenerationResult', 'RequestSequencer', 'generate', 'display_mesh']
