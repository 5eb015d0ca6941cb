from beam_sim import SimulationConfig, TrajectorySimulator, square_field
from beam_sim.analysis import expected_radius_gev, field_for_radius, fit_circle, tesla
from beam_sim.constants import SECOND, unit

cm = unit.c
p = 1 * unit.M

# 1 MeV/c electron, field tuned for a 3 cm bending radius inside [-1, 1]² cm
cfg = SimulationConfig(
    dtau=0.0001 * unit.n * SECOND,
    tau_final=0.02,
    length_unit=cm,
    field_unit=field_for_radius(p, 3 * cm),
)
grid = square_field(1.0, half_width=1.0, padding=3.0, spacing=0.01)
sim = TrajectorySimulator.from_config(cfg, grid)

state = cfg.particle((-2 * cm, 0.0), (p, 0.0))
print("beta", state.beta, "gamma", state.gamma)
outcome = sim.run(state)

points = outcome.trajectory.to_native(cm)
fit = fit_circle(points[200:501])
print("outcome", outcome.reason.name, "steps", outcome.steps)
print(f"fit radius {fit.radius:.4f} cm, centre ({fit.x_center:.4f}, {fit.y_center:.4f}) cm")
print(f"expected radius {expected_radius_gev(p, tesla(cfg.field_unit)) / cm:.4f} cm")
