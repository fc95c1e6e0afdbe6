import numpy as np

from coastal_geodata.region import BoundingRegion
from coastal_geodata.rings import RingCollection
from coastal_geodata.shoreline import (
    classify_shoreline,
    migrate_touching_inner,
    strip_outerbox,
)
from coastal_geodata.sources import RawShoreline


def _region():
    return BoundingRegion.from_bbox([[0, 10], [0, 10]])


def test_empty_mainland_uses_boubox_as_outer():
    region = _region()
    raw = RawShoreline(outer=RingCollection([[[3, 3], [4, 4]]]))

    out = classify_shoreline(raw, region, spacing=0.5, window=1)

    assert len(out.outer) == 1
    for vertex in region.boubox:
        assert np.any(np.all(out.outer[0] == vertex, axis=1))
    assert out.mainland.is_empty()
    assert out.inner.is_empty()


def test_touching_island_moves_to_mainland_and_outer():
    region = _region()
    island = np.array([[4, 4], [6, 4], [6, 6], [4, 6], [4, 4]], dtype=float)
    # touches the bounding box at the (0, 0) corner only
    touching = np.array([[0, 0], [1, 1], [2, 1], [2, 2], [1, 2], [0, 0]],
                        dtype=float)
    raw = RawShoreline(outer=region.boubox_rings,
                       inner=RingCollection([touching, island],
                                            kinds=['ocean', 'lake']))

    out = classify_shoreline(raw, region, spacing=0.5, window=1)

    assert len(out.inner) == 1
    assert out.inner_types == ['lake']
    assert len(out.outer) == 2
    assert len(out.mainland) == 1
    # outer keeps the migrated ring whole, mainland loses the box point
    np.testing.assert_array_equal(out.outer[1][0], [0, 0])
    assert not np.any(np.all(out.mainland[0] == [0, 0], axis=1))


def test_smoothing_message(capsys):
    region = _region()
    raw = RawShoreline(outer=region.boubox_rings)

    classify_shoreline(raw, region, spacing=0.5, window=5)
    assert 'Smoothing coastline with 5 point window' in capsys.readouterr().out

    classify_shoreline(raw, region, spacing=0.5, window=1)
    assert 'No smoothing of coastline enabled' in capsys.readouterr().out


def test_mainland_metadata_survives():
    region = _region()
    mainland = RingCollection([[[-3, 2], [3, -2.5]]], kinds=['river'],
                              heights=[2.0])
    raw = RawShoreline(outer=region.boubox_rings + mainland, mainland=mainland)

    out = classify_shoreline(raw, region, spacing=0.5, window=1)

    assert out.mainland_types == ['river']
    np.testing.assert_array_equal(out.mainland_heights, [2.0])
    assert len(out.outer) == 2


def test_migrate_touching_inner():
    box = np.array([[0, 0], [0, 10], [10, 10], [10, 0], [0, 0]], dtype=float)
    inner = RingCollection([[[0, 10], [1, 9], [2, 9]], [[5, 5], [6, 6]]])

    kept, migrated = migrate_touching_inner(inner, box)

    assert len(kept) == 1 and len(migrated) == 1
    np.testing.assert_array_equal(migrated[0][0], [0, 10])


def test_strip_outerbox_splits_rings():
    box = np.array([[0, 0], [0, 10], [10, 10], [10, 0], [0, 0]], dtype=float)
    ring = np.array([[1, 1], [2, 2], [0, 10], [3, 3], [4, 4], [10, 10]],
                    dtype=float)

    out = strip_outerbox(RingCollection([ring]), box)

    assert len(out) == 2
    np.testing.assert_array_equal(out[0], [[1, 1], [2, 2]])
    np.testing.assert_array_equal(out[1], [[3, 3], [4, 4]])
