"""Taichi-based Whitted-style ray tracer.

This package renders scenes of spheres and planes lit by a single point light,
with support for:
- Inverse-square point light attenuation and Lambert diffuse shading
- Hard shadows from a single shadow ray per hit
- Bounded recursive mirror reflection
- Deterministic parallel evaluation of every pixel into an RGBA8 buffer

Subpackages:
    core: Ray and color utilities, shading integrator
    geometry: Shape primitives and intersection algorithms
    materials: Solid color materials with reflectivity
    scene: Primitive storage, scene container and demo scene
    camera: Camera model with ray generation and movement
    preview: PNG export and interactive preview window

Modules that declare Taichi fields must be imported after ``ti.init()``.
"""

__version__ = "0.1.0"
