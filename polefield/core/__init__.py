"""Core field primitives for polefield.

Modules:
- colors: hex parsing + clamped grain blending
- noise / simplex: grain overlay families, 3D simplex primitive
- trajectories: closed-form pole motion patterns
- field: inverse-distance-weighted color field
- interaction: hover/drag state machine
- scheduler: frame clock + cancelable frame loop
- params: control parameter bundle
- types: raster, pole, theme and mode types
- compositor: per-frame pass over the raster
"""
