import io

import pytest
from beam_sim.absorbers import AbsorberRegion
from beam_sim.renderer import BufferedRenderer, DebugRenderer, NullRenderer
from beam_sim.types import DETECTOR, Outcome, Termination, Trajectory


def _outcome(tag, index=None):
    traj = Trajectory()
    traj.append(-0.01, 0.04)
    traj.append(0.0, 0.03)
    traj.append(0.01, 0.02)
    return Outcome(final_energy=1e6, tag=tag, absorber_index=index, steps=2, trajectory=traj)


ABSORBERS = [AbsorberRegion(0.045, 0.05, -0.015, -0.005, tag=DETECTOR, name="detector")]


def test_debug_renderer_text():
    out = io.StringIO()
    DebugRenderer(out).render_outcomes(
        [_outcome(DETECTOR, 0), _outcome(int(Termination.BOUNDARY_ESCAPE))],
        ABSORBERS,
        title="all tracks",
    )
    text = out.getvalue()
    assert text.startswith("=== all tracks ===")
    assert "absorber 'detector'" in text
    assert "absorber[0] tag=1" in text
    assert "boundary_escape" in text
    assert text.count("track 3 pts") == 2


def test_buffered_renderer_filters_by_tag():
    renderer = BufferedRenderer(length_unit=0.01)
    outcomes = [_outcome(DETECTOR, 0), _outcome(int(Termination.TIME_LIMIT))]
    renderer.render_outcomes(outcomes, ABSORBERS, title="detected", tag=DETECTOR)
    assert len(renderer.pictures) == 1
    picture = renderer.pictures[0]
    assert picture["title"] == "detected"
    assert len(picture["tracks"]) == 1
    points = picture["tracks"][0]["points"]
    assert points.shape == (3, 2)
    assert points[0].tolist() == pytest.approx([-1.0, 4.0])
    x1, y1, x2, y2 = picture["absorbers"][0]
    assert (round(x1, 9), round(x2, 9)) == (4.5, 5.0)
    renderer.clear()
    assert renderer.pictures == []


def test_null_renderer_accepts_everything():
    NullRenderer().render_outcomes([_outcome(DETECTOR, 0)], ABSORBERS)
