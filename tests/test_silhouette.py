import pytest

from plaquecad.geom import clean_polygon, is_ccw, is_simple, polygon_area, polygon_bbox
from plaquecad.silhouette import (
    DEFAULT_DIMENSIONS,
    JERSEY_HEIGHT,
    JERSEY_WIDTH,
    STYLES,
    jersey_silhouette,
    silhouette_dimensions,
)


def test_styles():
    assert STYLES == ('NBA Modern', 'College', 'Retro')


@pytest.mark.parametrize("style", ['NBA Modern', 'College', 'Retro', 'Unknown'])
def test_silhouette_shape(style):
    pts = jersey_silhouette(style)
    assert len(pts) == 13
    assert pts[0] == (0.0, 0.0)
    assert polygon_bbox(pts) == ((0.0, 0.0), (JERSEY_WIDTH, JERSEY_HEIGHT))
    assert is_ccw(pts)

    cleaned = clean_polygon(pts)
    assert len(cleaned) == 11
    assert is_simple(cleaned)


def test_unknown_style_uses_defaults():
    assert silhouette_dimensions('Space Jam') == DEFAULT_DIMENSIONS
    assert jersey_silhouette('Space Jam') == jersey_silhouette('')


def test_nba_modern_points():
    pts = jersey_silhouette('NBA Modern')
    assert pts[2] == (100.0, 106.0)
    assert pts[4] == (82.0, 96.0)
    assert pts[7] == (50.0, 108.0)
    assert pts[6] == (70.0, 120.0)


def test_nba_modern_area():
    # 100 x 106 body + shoulders 64 x 14 - collar V (40 wide, 12 deep)
    assert polygon_area(clean_polygon(jersey_silhouette('NBA Modern'))) == pytest.approx(11256.0)


def test_styles_differ():
    shapes = {tuple(jersey_silhouette(s)) for s in STYLES}
    assert len(shapes) == 3


def test_scaled_silhouette():
    pts = jersey_silhouette('Retro', width=200, height=240)
    assert polygon_bbox(pts) == ((0.0, 0.0), (200.0, 240.0))


def test_retro_shoulder_drop_delta():
    retro = silhouette_dimensions('Retro')
    nba = silhouette_dimensions('NBA Modern')
    assert retro.shoulder_drop - nba.shoulder_drop == 4.0
    assert jersey_silhouette('Retro')[2][1] == JERSEY_HEIGHT - 18.0
    assert jersey_silhouette('NBA Modern')[2][1] == JERSEY_HEIGHT - 14.0
