"""End-to-end generation of the basketball jersey plaque."""

import asyncio
import dataclasses

import pytest

from plaquecad.designs import available_designs, basketball_jersey, build_text_solid, get_design
from plaquecad.errors import ConfigError, OffsetError, ResourceError, UnknownDesignError
from plaquecad.export import export_regions, region_filename
from plaquecad.geom import clean_polygon, point_in_polygon, polygon_area
from plaquecad.io.stl import read_stl
from plaquecad.mesh import merge_solids
from plaquecad.offset import offset_polygon
from plaquecad.pipeline import RequestSequencer, display_mesh, generate
from plaquecad.resources import ResourceCache, preloaded
from plaquecad.silhouette import jersey_silhouette
from plaquecad.solid import Solid

from conftest import requires_manifold

JERSEY = 'basketball-jersey'


def _generate(cache, fields=None, request_id=None):
    return asyncio.run(generate(JERSEY, fields, cache, request_id=request_id))


@pytest.fixture
def cache(block_font, engine):
    return preloaded(block_font, engine)


def test_registry():
    assert JERSEY in available_designs()
    assert get_design(JERSEY).name == 'Basketball Jersey'
    with pytest.raises(UnknownDesignError):
        get_design('hockey-puck')


def test_unknown_design_raises_before_loading():
    calls = []
    cache = ResourceCache(font_loader=lambda spec: calls.append(spec))
    with pytest.raises(UnknownDesignError):
        asyncio.run(generate('hockey-puck', {}, cache))
    with pytest.raises(KeyError):
        asyncio.run(generate('hockey-puck', {}, cache))
    assert calls == []


def test_resource_failure_is_fatal():
    def broken(spec):
        raise ResourceError("no font")

    with pytest.raises(ResourceError):
        _generate(ResourceCache(font_loader=broken))


def test_region_filename():
    assert region_filename(JERSEY, 'trim') == 'basketball-jersey__trim.stl'


@requires_manifold
def test_text_solid_z_range(block_font, engine):
    # "23" at 28 mm centred on (50, 68), raised 2 mm from z = 3
    solid = build_text_solid(block_font, "23", 28, (50, 68), 2.0, 3.0, engine)
    mesh = merge_solids([solid])
    assert not mesh.is_empty
    (x0, y0, z0), (x1, y1, z1) = mesh.bbox()
    assert z0 == pytest.approx(3.0)
    assert z1 - z0 == pytest.approx(2.0)
    assert (x0 + x1) / 2 == pytest.approx(50.0 - 2.8 / 2)
    assert y0 == pytest.approx(68.0)


@requires_manifold
def test_text_solid_keeps_counters(square_font, engine):
    solid = build_text_solid(square_font, "O", 10, (0, 0), 1.0, 0.0, engine)
    # 6 x 6 mm square with a 2 x 2 mm counter
    assert solid.volume() == pytest.approx(32.0)


def test_empty_text_solid(block_font):
    assert build_text_solid(block_font, "  ", 10, (0, 0), 1.0, 0.0, engine=None) is None


@requires_manifold
def test_default_jersey(cache):
    result = _generate(cache, request_id=4)
    assert result.request_id == 4
    assert result.design_id == JERSEY
    assert set(result.regions) == {'body', 'number', 'name', 'trim'}
    assert all(s is not None for s in result.regions.values())
    assert result.region_errors == {}

    outline = clean_polygon(jersey_silhouette('NBA Modern'))
    body = result.regions['body']
    assert body.volume() == pytest.approx(polygon_area(outline) * 3.0)

    for region in ('number', 'name'):
        (_, _, z0), (_, _, z1) = result.regions[region].bbox()
        assert z0 == pytest.approx(3.0)
        assert z1 == pytest.approx(5.0)


@requires_manifold
def test_empty_name_region_is_absent(cache, tmp_path):
    result = _generate(cache, {'playerName': ''})
    assert result.regions['name'] is None
    assert 'name' not in result.region_errors

    written = export_regions(result, tmp_path)
    assert set(written) == {'body', 'number', 'trim'}
    assert not (tmp_path / region_filename(JERSEY, 'name')).exists()


@requires_manifold
@pytest.mark.parametrize("style", ['NBA Modern', 'College', 'Retro'])
def test_trim_ring(cache, style):
    result = _generate(cache, {'jerseyStyle': style, 'baseThickness': 4})
    trim = result.regions['trim']
    outline = clean_polygon(jersey_silhouette(style))
    inner = offset_polygon(outline, 1.5, validate=True)

    height = 4.0 + 2.0
    expected = (polygon_area(outline) - polygon_area(inner)) * height
    assert trim.volume() == pytest.approx(expected, rel=1e-4)

    (_, _, z0), (_, _, z1) = trim.bbox()
    assert z0 == pytest.approx(0.0)
    assert z1 == pytest.approx(height)

    top = [f for f in trim.faces if all(abs(v[2] - height) < 1e-4 for v in f)]
    top_area = Solid(tuple(top)).surface_area()
    assert top_area == pytest.approx(polygon_area(outline) - polygon_area(inner), rel=1e-4)

    # nothing of the ring lies inside the cut-out
    shrunk = offset_polygon(inner, 1e-3, miter=True)
    for x, y, _ in trim.vertices():
        assert not point_in_polygon((x, y), shrunk)


@requires_manifold
def test_trim_disabled(cache):
    result = _generate(cache, {'showTrim': False})
    assert result.regions['trim'] is None
    assert result.region_errors == {}


@requires_manifold
def test_region_failure_is_isolated(cache, monkeypatch):
    def failing_offset(*args, **kwargs):
        raise OffsetError("offset collapsed")

    monkeypatch.setattr(basketball_jersey, 'offset_polygon', failing_offset)
    result = _generate(cache)
    assert result.regions['trim'] is None
    assert result.region_errors == {'trim': 'offset collapsed'}
    assert result.regions['body'] is not None
    assert result.regions['number'] is not None


@requires_manifold
def test_inputs_are_coerced(cache):
    result = _generate(cache, {'baseThickness': 'thick', 'jerseyStyle': 'Space Jam'})
    (_, _, z0), (_, _, z1) = result.regions['body'].bbox()
    assert z1 - z0 == pytest.approx(3.0)


@requires_manifold
def test_regions_share_origin(cache):
    result = _generate(cache)
    lo, hi = display_mesh(result).bbox()
    assert lo == pytest.approx((0.0, 0.0, 0.0))
    assert hi == pytest.approx((100.0, 120.0, 5.0))


@requires_manifold
def test_export_round_trip(cache, tmp_path):
    result = _generate(cache)
    written = export_regions(result, tmp_path / 'out', regions=['body', 'number'])
    assert set(written) == {'body', 'number'}
    tris = read_stl(written['number'])
    zs = [v[2] for t in tris for v in (t.v0, t.v1, t.v2)]
    assert min(zs) == pytest.approx(3.0)
    assert max(zs) == pytest.approx(5.0)
    header = written['body'].read_bytes()[:80]
    assert header.startswith(b'basketball-jersey body')


@requires_manifold
def test_request_sequencer_last_input_wins(cache):
    seq = RequestSequencer()
    first = seq.next_id()
    second = seq.next_id()
    old = _generate(cache, {'number': '1'}, request_id=first)
    new = _generate(cache, {'number': '2'}, request_id=second)
    assert not seq.is_current(old)
    assert seq.is_current(new)


def test_generate_loads_resources_once(block_font, engine):
    calls = []

    def font_loader(spec):
        calls.append(spec)
        return block_font

    cache = ResourceCache('block', font_loader=font_loader, engine_loader=lambda: engine)

    async def run():
        return await asyncio.gather(
            generate(JERSEY, {'number': '1'}, cache, request_id=1),
            generate(JERSEY, {'number': '2'}, cache, request_id=2),
        )

    first, second = asyncio.run(run())
    assert calls == ['block']
    assert (first.request_id, second.request_id) == (1, 2)


@requires_manifold
def test_typed_region_record(block_font, engine):
    design = get_design(JERSEY)
    regions = design.build_regions({'showTrim': 'off'}, block_font, engine)
    assert isinstance(regions, basketball_jersey.JerseyRegions)
    assert regions.trim is None
    assert regions.body is not None
    assert list(regions.as_region_map()) == ['body', 'number', 'name', 'trim']


def test_jersey_rejects_mismatched_regions():
    config = get_design(JERSEY).config
    broken = dataclasses.replace(config, regions=config.regions[:2])
    with pytest.raises(ConfigError):
        basketball_jersey.BasketballJersey(broken)
