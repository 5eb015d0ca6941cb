# MIT License (see LICENSE)
"""
Rendering adapters for trajectory visualization.

This subpackage provides abstract and concrete renderer implementations:
    - RendererAdapter: Abstract base class defining the rendering interface.
    - DebugRenderer: Text/console output for debugging.
    - NullRenderer: No-op renderer for performance testing.
    - BufferedRenderer: Stores pictures as arrays for an external plotter.

The tracking core has no rendering dependency; these adapters are optional.

Typical usage:
    from beam_sim.renderer import DebugRenderer

    DebugRenderer().render_outcomes(outcomes, simulator.absorbers)
"""
from .adapter import (
    RendererAdapter,
    DebugRenderer,
    NullRenderer,
    BufferedRenderer,
)

__all__ = [
    "RendererAdapter",
    "DebugRenderer",
    "NullRenderer",
    "BufferedRenderer",
]
