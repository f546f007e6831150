import pytest

from plaquecad.boolean import engines_available, load_engine
from plaquecad.fonts import BlockFont, Font, Glyph, PathCommand


MANIFOLD_AVAILABLE = "manifold" in engines_available()

requires_manifold = pytest.mark.skipif(not MANIFOLD_AVAILABLE,
                                       reason="manifold3d boolean backend not available")


class SquareFont(Font):
    """Tiny font: every glyph is a 600 unit square with a square counter.

    ``'-'`` has no hole, ``' '`` has no outline, and the pair ``"AV"``
    kerns by -100 units.
    """

    name = "square"

    @property
    def units_per_em(self) -> float:
        return 1000.0

    def glyph(self, char):
        if char == ' ':
            return Glyph(char, (), 500.0)
        commands = [
            PathCommand('M', ((0.0, 0.0),)),
            PathCommand('L', ((0.0, 600.0),)),
            PathCommand('L', ((600.0, 600.0),)),
            PathCommand('L', ((600.0, 0.0),)),
            PathCommand('Z'),
        ]
        if char != '-':
            commands += [
                PathCommand('M', ((200.0, 200.0),)),
                PathCommand('L', ((400.0, 200.0),)),
                PathCommand('L', ((400.0, 400.0),)),
                PathCommand('L', ((200.0, 400.0),)),
                PathCommand('Z'),
            ]
        return Glyph(char, tuple(commands), 700.0)

    def kerning(self, left, right):
        return -100.0 if (left, right) == ('A', 'V') else 0.0


class NoAdvanceFont(SquareFont):
    """Glyphs report a zero advance width."""

    def glyph(self, char):
        g = super().glyph(char)
        return Glyph(g.char, g.commands, 0.0)


@pytest.fixture
def block_font():
    return BlockFont()


@pytest.fixture
def square_font():
    return SquareFont()


@pytest.fixture
def engine():
    if not MANIFOLD_AVAILABLE:
        pytest.skip("manifold3d boolean backend not available")
    return load_engine()


SQUARE = [(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)]
