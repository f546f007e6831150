"""Lazily loaded shared resources.

The font and the boolean engine are expensive to load, so a
:class:`ResourceCache` loads each of them once, in a worker thread, and
hands the same object to every later caller.  Concurrent first callers
await the same load.  A failed load is not remembered; the next caller
tries again.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Optional

from plaquecad.boolean import BooleanEngine, load_engine
from plaquecad.errors import ResourceError
from plaquecad.fonts import Font, load_font

logger = logging.getLogger(__name__)


class ResourceCache:
    """Load-once holder for the font and the boolean engine."""

    def __init__(self, font_spec: Optional[str] = None,
                 font_loader: Callable[[Optional[str]], Font] = load_font,
                 engine_loader: Callable[[], BooleanEngine] = load_engine):
        self.font_spec = font_spec
        self._font_loader = font_loader
        self._engine_loader = engine_loader
        self._values: Dict[str, Any] = {}
        self._pending: Dict[str, asyncio.Future] = {}

    def is_loaded(self, key: str) -> bool:
        return key in self._values

    async def _get(self, key: str, loader: Callable[[], Any]) -> Any:
        if key in self._values:
            return self._values[key]

        pending = self._pending.get(key)
        if pending is None:
            loop = asyncio.get_running_loop()
            pending = loop.run_in_executor(None, loader)
            self._pending[key] = pending
            logger.debug("loading %s", key)
        try:
            value = await asyncio.shield(pending)
        except ResourceError:
            raise
        except Exception as exc:
            raise ResourceError(f"{key} could not be loaded: {exc}") from exc
        finally:
            if self._pending.get(key) is pending and pending.done():
                del self._pending[key]

        self._values[key] = value
        return value

    async def font(self) -> Font:
        return await self._get('font', lambda: self._font_loader(self.font_spec))

    async def engine(self) -> BooleanEngine:
        return await self._get('engine', self._engine_loader)


def preloaded(font: Font, engine: BooleanEngine) -> ResourceCache:
    """A cache that already holds ``font`` and ``engine``."""

    cache = ResourceCache()
    cache._values.update(font=font, engine=engine)
    return cache


__all__ = ['ResourceCache', 'preloaded']
