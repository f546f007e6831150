"""Per-region STL export."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

from plaquecad.io.stl import write_stl
from plaquecad.pipeline import GenerationResult

logger = logging.getLogger(__name__)


def region_filename(design_id: str, region_id: str) -> str:
    """``<design-id>__<region-id>.stl``"""

    return f"{design_id}__{region_id}.stl"


def export_regions(result: GenerationResult, directory: Path | str,
                   regions: Optional[Iterable[str]] = None) -> Dict[str, Path]:
    """Write one binary STL per present region into ``directory``.

    Regions whose solid is ``None`` are skipped.  Returns the written paths
    keyed by region id.
    """

    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    wanted = None if regions is None else set(regions)

    written: Dict[str, Path] = {}
    for region_id, solid in result.regions.items():
        if wanted is not None and region_id not in wanted:
            continue
        if solid is None:
            logger.info("skipping unavailable region %s", region_id)
            continue
        path = out_dir / region_filename(result.design_id, region_id)
        size = write_stl(solid, path, name=f"{result.design_id} {region_id}")
        logger.info("wrote %s (%d bytes)", path, size)
        written[region_id] = path
    return written


__all__ = ['region_filename', 'export_regions']
