import pytest
from beam_sim.absorbers import AbsorberRegion, AbsorberSet
from beam_sim.errors import InvalidConfiguration
from beam_sim.types import COLLIMATOR, DETECTOR


def test_first_match_wins_on_overlap():
    """Two overlapping regions: the earlier one decides the tag."""
    absorbers = AbsorberSet()
    absorbers.add(AbsorberRegion(0.0, 2.0, 0.0, 2.0, tag=7))
    absorbers.add(AbsorberRegion(1.0, 3.0, 1.0, 3.0, tag=3))

    assert absorbers.test_collision((1.5, 1.5)) == 7
    assert absorbers.first_hit((1.5, 1.5)) == 0
    # only the second region contains this point
    assert absorbers.test_collision((2.5, 2.5)) == 3
    assert absorbers.first_hit((2.5, 2.5)) == 1
    assert absorbers.test_collision((5.0, 5.0)) is None
    assert absorbers.first_hit((5.0, 5.0)) is None


def test_bounds_are_inclusive():
    region = AbsorberRegion(-1.0, 1.0, -2.0, 2.0)
    for x, y in [(-1.0, 0.0), (1.0, 0.0), (0.0, -2.0), (0.0, 2.0), (1.0, 2.0), (-1.0, -2.0)]:
        assert region.contains(x, y)
    for x, y in [(-1.0000001, 0.0), (1.0000001, 0.0), (0.0, 2.0000001)]:
        assert not region.contains(x, y)


def test_degenerate_region_is_allowed():
    """x1 == x2 is a line segment; still a valid (closed) region."""
    region = AbsorberRegion(0.5, 0.5, 0.0, 1.0)
    assert region.contains(0.5, 0.3)
    assert not region.contains(0.50001, 0.3)


def test_malformed_bounds_raise():
    with pytest.raises(InvalidConfiguration):
        AbsorberRegion(2.0, 1.0, 0.0, 1.0)
    with pytest.raises(InvalidConfiguration):
        AbsorberRegion(0.0, 1.0, 1.0, 0.0)
    with pytest.raises(InvalidConfiguration):
        AbsorberRegion(0.0, 1.0, 0.0, 1.0, tag=-1)


def test_from_native_scales_bounds():
    cm = 0.01
    detector = AbsorberRegion.from_native(4.5, 5.0, -1.5, -0.5, cm, tag=DETECTOR, name="detector")
    assert (detector.x1, detector.x2) == pytest.approx((0.045, 0.05))
    assert (detector.y1, detector.y2) == pytest.approx((-0.015, -0.005))
    assert detector.native_bounds(cm) == pytest.approx((4.5, -1.5, 5.0, -0.5))
    assert detector.tag == DETECTOR


def test_set_is_ordered_and_indexable():
    regions = [
        AbsorberRegion(0, 1, 0, 1, tag=COLLIMATOR, name="a"),
        AbsorberRegion(2, 3, 0, 1, tag=DETECTOR, name="b"),
    ]
    absorbers = AbsorberSet(regions)
    assert len(absorbers) == 2
    assert [r.name for r in absorbers] == ["a", "b"]
    assert absorbers[1].tag == DETECTOR
    with pytest.raises(TypeError):
        absorbers.add((0, 1, 0, 1))


def test_collision_test_has_no_side_effects():
    calls = []
    region = AbsorberRegion(0, 1, 0, 1, tag=DETECTOR, on_hit=lambda r, s: calls.append(s))
    absorbers = AbsorberSet([region])
    assert absorbers.test_collision((0.5, 0.5)) == DETECTOR
    assert calls == []
