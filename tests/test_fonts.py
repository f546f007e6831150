import asyncio

import pytest

from plaquecad.designs import build_text_solid
from plaquecad.errors import ResourceError
from plaquecad.fonts import (
    BLOCK_CELLS_TALL,
    BlockFont,
    FONT_ENV_VAR,
    FreeTypeFont,
    block_rectangles,
    find_system_font,
    load_font,
)
from plaquecad.geom import polygon_area
from plaquecad.glyphs import extract_text_outline, group_contours, path_to_contours
from plaquecad.mesh import merge_solids
from plaquecad.pipeline import generate
from plaquecad.resources import preloaded

from conftest import requires_manifold

DEJAVU_PATH = find_system_font("DejaVuSans")
requires_dejavu = pytest.mark.skipif(DEJAVU_PATH is None, reason="DejaVuSans is not installed")


def _lit_cells(rows):
    return sum(row.count('#') for row in rows)


def test_block_rectangles_cover_lit_cells():
    rows = ("#####", "#...#", "#...#", "#####")
    rects = block_rectangles(rows)
    area = sum((x1 - x0) * (y1 - y0) for x0, y0, x1, y1 in rects)
    assert area == _lit_cells(rows)
    # the two side bars merge into tall rectangles
    assert (0, 1, 1, 3) in rects
    assert (4, 1, 5, 3) in rects


def test_block_glyph_outline_area(block_font):
    glyph = block_font.glyph('8')
    contours = path_to_contours(glyph.commands)
    assert sum(polygon_area(c) for c in contours) == pytest.approx(23.0)
    assert glyph.advance == pytest.approx(6.0)
    assert block_font.units_per_em == pytest.approx(10.0)


def test_block_glyph_is_case_insensitive(block_font):
    assert block_font.glyph('a').commands == block_font.glyph('A').commands


def test_block_unknown_character_renders_box(block_font):
    assert block_font.glyph('#').commands == block_font.glyph('O').commands


def test_block_space_has_no_outline(block_font):
    assert block_font.glyph(' ').commands == ()


def test_block_text_height(block_font):
    outline = extract_text_outline(block_font, "23", 28)
    ys = [y for c in outline.contours for _, y in c]
    assert min(ys) == pytest.approx(0.0)
    assert max(ys) == pytest.approx(BLOCK_CELLS_TALL * 2.8)
    assert outline.advance == pytest.approx(2 * 6 * 2.8)


def test_supported_characters():
    chars = BlockFont.supported_characters()
    for c in "ABCXYZ0123456789":
        assert c in chars


def test_load_font_block():
    assert isinstance(load_font("block"), BlockFont)


def test_load_font_env_var(monkeypatch):
    monkeypatch.setenv(FONT_ENV_VAR, "block")
    assert isinstance(load_font(), BlockFont)


def test_load_font_missing_raises(tmp_path):
    with pytest.raises(ResourceError):
        load_font(str(tmp_path / "missing-font.ttf"))


def test_load_font_unreadable_raises(tmp_path):
    bogus = tmp_path / "bogus.ttf"
    bogus.write_bytes(b"not a font")
    with pytest.raises(ResourceError):
        load_font(str(bogus))


@pytest.fixture
def dejavu():
    return FreeTypeFont(DEJAVU_PATH)


@requires_dejavu
def test_load_font_by_name():
    font = load_font("DejaVuSans")
    assert isinstance(font, FreeTypeFont)
    assert font.units_per_em == pytest.approx(2048.0)


@requires_dejavu
def test_freetype_glyph_commands(dejavu):
    glyph = dejavu.glyph('O')
    kinds = [cmd.kind for cmd in glyph.commands]
    assert kinds[0] == 'M'
    assert kinds[-1] == 'Z'
    # TrueType outlines are quadratic
    assert 'Q' in kinds
    assert all(isinstance(v, float) for cmd in glyph.commands for p in cmd.points for v in p)
    assert glyph.advance > 0
    assert dejavu.glyph(' ').commands == ()


@requires_dejavu
def test_freetype_contours_are_open(dejavu):
    contours = path_to_contours(dejavu.glyph('O').commands)
    assert len(contours) == 2
    for contour in contours:
        assert contour[0] != contour[-1]


@requires_dejavu
@pytest.mark.parametrize("char, holes", [('0', [1]), ('8', [2]), ('A', [1]), ('B', [2])])
def test_freetype_counters(dejavu, char, holes):
    contours = path_to_contours(dejavu.glyph(char).commands)
    groups = group_contours(contours)
    assert [len(g.holes) for g in groups] == holes


@requires_dejavu
def test_freetype_kerning(dejavu):
    if not dejavu.has_kerning:
        pytest.skip("font has no kern table")
    assert dejavu.kerning('A', 'V') < 0

    scale = 20 / dejavu.units_per_em
    natural = (dejavu.glyph('A').advance + dejavu.glyph('V').advance) * scale
    outline = extract_text_outline(dejavu, "AV", 20)
    assert outline.advance == pytest.approx(natural + dejavu.kerning('A', 'V') * scale)


@requires_dejavu
@requires_manifold
def test_freetype_text_solid(dejavu, engine):
    solid = build_text_solid(dejavu, "23", 28, (50, 68), 2.0, 3.0, engine)
    (x0, y0, z0), (x1, y1, z1) = merge_solids([solid]).bbox()
    assert z0 == pytest.approx(3.0)
    assert z1 == pytest.approx(5.0)
    assert x0 < 50.0 < x1


@requires_dejavu
@requires_manifold
def test_freetype_jersey_builds_every_region(dejavu, engine):
    fields = {'playerName': "Wäß Jordan-O'Neal", 'number': "23"}
    result = asyncio.run(generate('basketball-jersey', fields, preloaded(dejavu, engine)))
    assert result.region_errors == {}
    assert all(solid is not None for solid in result.regions.values())
