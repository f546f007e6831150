"""Font resources for glyph outline extraction.

A font hands out glyph outlines as lists of :class:`PathCommand` values in
font units, together with advance widths and pair kerning.  Two fonts are
provided:

``FreeTypeFont``
    TrueType/OpenType fonts read through ``freetype-py``.  Outlines are
    loaded unscaled and decomposed into move/line/conic/cubic commands.

``BlockFont``
    A built-in 5x7 block face covering A-Z, 0-9 and some punctuation.  It
    needs no font file, which keeps the pipeline usable (and testable) on
    machines without system fonts.

Example usage:

    from plaquecad.fonts import load_font

    font = load_font("Arial")          # system search, ResourceError if missing
    font = load_font("/path/to/x.ttf") # explicit file
    font = load_font("block")          # built-in block face
"""

from __future__ import annotations

import logging
import os
import platform
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

import freetype

from plaquecad.errors import ResourceError
from plaquecad.geom import Point2D

logger = logging.getLogger(__name__)

# Fonts tried, in order, when no font is requested explicitly.
PREFERRED_FONTS = ("BebasNeue-Regular", "Arial", "Helvetica", "DejaVuSans", "LiberationSans-Regular")

FONT_ENV_VAR = "PLAQUECAD_FONT"


class PathCommand(NamedTuple):
    """One outline drawing command.

    ``kind`` is one of ``'M'`` (move), ``'L'`` (line), ``'Q'`` (quadratic
    curve, one control point), ``'C'`` (cubic curve, two control points) or
    ``'Z'`` (close).  ``points`` holds the control points followed by the
    target point; it is empty for ``'Z'``.
    """

    kind: str
    points: Tuple[Point2D, ...] = ()


@dataclass(frozen=True)
class Glyph:
    """Outline and horizontal advance of one character, in font units."""

    char: str
    commands: Tuple[PathCommand, ...]
    advance: float


class Font(ABC):
    """Read-only font resource."""

    name: str = "font"

    @property
    @abstractmethod
    def units_per_em(self) -> float:
        ...

    @abstractmethod
    def glyph(self, char: str) -> Glyph:
        ...

    def kerning(self, left: str, right: str) -> float:
        """Pair adjustment between ``left`` and ``right`` in font units."""

        return 0.0


# ---------------------------------------------------------------------------
# Block font
# ---------------------------------------------------------------------------

# Rows top to bottom, five cells wide.  Lit cells only ever touch along
# whole edges, so extruded cells union into clean solids.
_BLOCK_ROWS: Dict[str, Tuple[str, ...]] = {
    'A': ("#####", "#...#", "#...#", "#####", "#...#", "#...#", "#...#"),
    'B': ("####.", "#..#.", "#..#.", "#####", "#...#", "#...#", "#####"),
    'C': ("#####", "#....", "#....", "#....", "#....", "#....", "#####"),
    'D': ("####.", "#..##", "#...#", "#...#", "#...#", "#..##", "####."),
    'E': ("#####", "#....", "#....", "####.", "#....", "#....", "#####"),
    'F': ("#####", "#....", "#....", "####.", "#....", "#....", "#...."),
    'G': ("#####", "#....", "#....", "#.###", "#...#", "#...#", "#####"),
    'H': ("#...#", "#...#", "#...#", "#####", "#...#", "#...#", "#...#"),
    'I': ("#####", "..#..", "..#..", "..#..", "..#..", "..#..", "#####"),
    'J': ("#####", "...#.", "...#.", "...#.", "#..#.", "#..#.", "####."),
    'K': ("#...#", "#...#", "#..##", "####.", "#..##", "#...#", "#...#"),
    'L': ("#....", "#....", "#....", "#....", "#....", "#....", "#####"),
    'M': ("#####", "#.#.#", "#.#.#", "#.#.#", "#.#.#", "#.#.#", "#.#.#"),
    'N': ("#####", "#...#", "#...#", "#...#", "#...#", "#...#", "#...#"),
    'O': ("#####", "#...#", "#...#", "#...#", "#...#", "#...#", "#####"),
    'P': ("#####", "#...#", "#...#", "#####", "#....", "#....", "#...."),
    'Q': ("#####", "#...#", "#...#", "#...#", "#..##", "#..##", "#####"),
    'R': ("#####", "#...#", "#...#", "#####", "#.##.", "#..##", "#...#"),
    'S': ("#####", "#....", "#....", "#####", "....#", "....#", "#####"),
    'T': ("#####", "..#..", "..#..", "..#..", "..#..", "..#..", "..#.."),
    'U': ("#...#", "#...#", "#...#", "#...#", "#...#", "#...#", "#####"),
    'V': ("#...#", "#...#", "#...#", "#...#", "##.##", ".###.", "..#.."),
    'W': ("#...#", "#...#", "#...#", "#...#", "#.#.#", "#.#.#", "#####"),
    'X': ("#...#", "##.##", ".###.", "..#..", ".###.", "##.##", "#...#"),
    'Y': ("#...#", "#...#", "##.##", ".###.", "..#..", "..#..", "..#.."),
    'Z': ("#####", "....#", "...##", "..##.", ".##..", "##...", "#####"),
    '0': ("#####", "#...#", "#...#", "#...#", "#...#", "#...#", "#####"),
    '1': ("..#..", ".##..", "..#..", "..#..", "..#..", "..#..", ".###."),
    '2': ("#####", "....#", "....#", "#####", "#....", "#....", "#####"),
    '3': ("#####", "....#", "....#", ".####", "....#", "....#", "#####"),
    '4': ("#...#", "#...#", "#...#", "#####", "....#", "....#", "....#"),
    '5': ("#####", "#....", "#....", "#####", "....#", "....#", "#####"),
    '6': ("#####", "#....", "#....", "#####", "#...#", "#...#", "#####"),
    '7': ("#####", "....#", "....#", "....#", "....#", "....#", "....#"),
    '8': ("#####", "#...#", "#...#", "#####", "#...#", "#...#", "#####"),
    '9': ("#####", "#...#", "#...#", "#####", "....#", "....#", "#####"),
    '-': (".....", ".....", ".....", ".###.", ".....", ".....", "....."),
    '.': (".....", ".....", ".....", ".....", ".....", ".....", "..#.."),
    "'": ("..#..", "..#..", ".....", ".....", ".....", ".....", "....."),
    '/': ("....#", "...##", "..##.", ".##..", "##...", "#....", "#...."),
    ' ': (".....",) * 7,
}

BLOCK_CELLS_WIDE = 5
BLOCK_CELLS_TALL = 7


def _row_runs(row: str) -> List[Tuple[int, int]]:
    runs = []
    start = None
    for i, c in enumerate(row + "."):
        if c == "#" and start is None:
            start = i
        elif c != "#" and start is not None:
            runs.append((start, i))
            start = None
    return runs


def block_rectangles(rows: Sequence[str]) -> List[Tuple[int, int, int, int]]:
    """Cover the lit cells of ``rows`` with ``(x0, y0, x1, y1)`` rectangles.

    Horizontal runs are merged downwards while the run below has the same
    extent.  ``y`` grows upwards from the bottom row.
    """

    height = len(rows)
    open_runs: Dict[Tuple[int, int], int] = {}  # (x0, x1) -> top row index
    rects = []
    for r, row in enumerate(list(rows) + [""]):
        runs = set(_row_runs(row))
        for run in list(open_runs):
            if run not in runs:
                top = open_runs.pop(run)
                rects.append((run[0], height - r, run[1], height - top))
        for run in runs:
            open_runs.setdefault(run, r)
    rects.sort(key=lambda rc: (rc[1], rc[0]))
    return rects


class BlockFont(Font):
    """Built-in 5x7 block face.  Unknown characters render as a hollow box."""

    name = "block"

    def __init__(self, cell: float = 1.0, gap: int = 1, em_cells: int = 10):
        self._cell = float(cell)
        self._gap = gap
        self._em = em_cells * self._cell
        self._cache: Dict[str, Glyph] = {}

    @property
    def units_per_em(self) -> float:
        return self._em

    def glyph(self, char: str) -> Glyph:
        cached = self._cache.get(char)
        if cached is not None:
            return cached
        rows = _BLOCK_ROWS.get(char.upper())
        if rows is None:
            rows = _BLOCK_ROWS['O']
        s = self._cell
        commands: List[PathCommand] = []
        for x0, y0, x1, y1 in block_rectangles(rows):
            # clockwise in a y-up frame, like TrueType outer contours
            commands.append(PathCommand('M', ((x0 * s, y0 * s),)))
            commands.append(PathCommand('L', ((x0 * s, y1 * s),)))
            commands.append(PathCommand('L', ((x1 * s, y1 * s),)))
            commands.append(PathCommand('L', ((x1 * s, y0 * s),)))
            commands.append(PathCommand('Z'))
        glyph = Glyph(char, tuple(commands), (BLOCK_CELLS_WIDE + self._gap) * s)
        self._cache[char] = glyph
        return glyph

    @staticmethod
    def supported_characters() -> str:
        return ''.join(sorted(_BLOCK_ROWS))


# ---------------------------------------------------------------------------
# FreeType fonts
# ---------------------------------------------------------------------------

def _xy(vec) -> Point2D:
    # decompose callbacks may receive an FT_Vector or a pointer to one
    vec = getattr(vec, 'contents', vec)
    return float(vec.x), float(vec.y)


class FreeTypeFont(Font):
    """TrueType/OpenType font read with ``freetype-py``.

    Outlines are loaded with ``FT_LOAD_NO_SCALE`` so that coordinates,
    advances and kerning are all in font units.  Kerning comes from the
    legacy ``kern`` table; fonts that only carry GPOS kerning report zero.
    """

    _LOAD_FLAGS = freetype.FT_LOAD_NO_SCALE | freetype.FT_LOAD_NO_BITMAP

    def __init__(self, path: str):
        self.path = str(path)
        self._face = freetype.Face(self.path)
        self.name = os.path.basename(self.path)
        self._cache: Dict[str, Glyph] = {}

    @property
    def units_per_em(self) -> float:
        return float(self._face.units_per_EM)

    def glyph(self, char: str) -> Glyph:
        cached = self._cache.get(char)
        if cached is not None:
            return cached

        self._face.load_char(char, self._LOAD_FLAGS)
        slot = self._face.glyph
        commands: List[PathCommand] = []

        def move_to(a, ctx):
            commands.append(PathCommand('M', (_xy(a),)))
            return 0

        def line_to(a, ctx):
            commands.append(PathCommand('L', (_xy(a),)))
            return 0

        def conic_to(a, b, ctx):
            commands.append(PathCommand('Q', (_xy(a), _xy(b))))
            return 0

        def cubic_to(a, b, c, ctx):
            commands.append(PathCommand('C', (_xy(a), _xy(b), _xy(c))))
            return 0

        if slot.outline.n_contours > 0:
            slot.outline.decompose(move_to=move_to, line_to=line_to,
                                   conic_to=conic_to, cubic_to=cubic_to)
            commands.append(PathCommand('Z'))

        glyph = Glyph(char, tuple(commands), float(slot.advance.x))
        self._cache[char] = glyph
        return glyph

    @property
    def has_kerning(self) -> bool:
        return bool(self._face.has_kerning)

    def kerning(self, left: str, right: str) -> float:
        if not self.has_kerning:
            return 0.0
        vec = self._face.get_kerning(left, right, freetype.FT_KERNING_UNSCALED)
        return float(vec.x)


def find_system_font(font_name: str) -> Optional[str]:
    """Find a font by name in the usual system font directories.

    Args:
        font_name: Name of the font (e.g., "Arial", "DejaVuSans")

    Returns:
        Path to the font file, or None if not found
    """

    system = platform.system()
    font_dirs: List[str] = []

    if system == "Darwin":
        font_dirs = [
            "/System/Library/Fonts",
            "/System/Library/Fonts/Supplemental",
            "/Library/Fonts",
            os.path.expanduser("~/Library/Fonts"),
        ]
    elif system == "Linux":
        font_dirs = [
            "/usr/share/fonts",
            "/usr/local/share/fonts",
            os.path.expanduser("~/.fonts"),
            os.path.expanduser("~/.local/share/fonts"),
        ]
    elif system == "Windows":
        font_dirs = [
            os.path.join(os.environ.get("WINDIR", "C:\\Windows"), "Fonts"),
        ]

    wanted = {f"{font_name}{ext}".lower() for ext in (".ttf", ".otf")}

    for font_dir in font_dirs:
        if not os.path.isdir(font_dir):
            continue
        # Linux keeps fonts two levels down (truetype/dejavu/...)
        for root, dirs, files in os.walk(font_dir):
            for fname in files:
                if fname.lower() in wanted:
                    return os.path.join(root, fname)
            if os.path.relpath(root, font_dir).count(os.sep) >= 1:
                dirs[:] = []

    return None


def load_font(spec: Optional[str] = None) -> Font:
    """Load the font named by ``spec``.

    ``None`` consults the ``PLAQUECAD_FONT`` environment variable, then
    tries :data:`PREFERRED_FONTS` and finally falls back to the block font.
    ``"block"`` selects the block font.  Anything else must be a readable
    font file or the name of an installed font; otherwise
    :class:`~plaquecad.errors.ResourceError` is raised.
    """

    if spec is None:
        spec = os.environ.get(FONT_ENV_VAR) or None

    if spec is None:
        for name in PREFERRED_FONTS:
            path = find_system_font(name)
            if path is None:
                continue
            try:
                font = FreeTypeFont(path)
            except freetype.FT_Exception as exc:
                logger.warning("skipping unreadable font %s: %s", path, exc)
                continue
            logger.info("using system font %s", path)
            return font
        logger.warning("no preferred system font found, using the block font")
        return BlockFont()

    if spec == "block":
        return BlockFont()

    path = spec if os.path.exists(spec) else find_system_font(spec)
    if path is None:
        raise ResourceError(f"font {spec!r} was not found")
    try:
        font = FreeTypeFont(path)
    except (freetype.FT_Exception, OSError) as exc:
        raise ResourceError(f"font {path!r} could not be loaded: {exc}") from exc
    logger.info("loaded font %s", path)
    return font


__all__ = [
    'PathCommand',
    'Glyph',
    'Font',
    'BlockFont',
    'FreeTypeFont',
    'block_rectangles',
    'find_system_font',
    'load_font',
    'FONT_ENV_VAR',
    'PREFERRED_FONTS',
    'BLOCK_CELLS_WIDE',
    'BLOCK_CELLS_TALL',
]
