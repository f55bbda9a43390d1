"""Monte Carlo path tracer for sphere scenes, built on Taichi.

This package renders scenes of spheres by tracing rays backward from a
pinhole camera, with support for:
- Diffuse (Lambertian), metal and dielectric (glass) materials
- Iterative, depth-bounded path tracing with a sky gradient background
- Parallel jittered sampling with progressive accumulation
- PPM and PNG output

Subpackages:
    core: Ray and vector utilities, render configuration, integrator and
        progressive rendering loop
    geometry: Sphere primitive and ray-sphere intersection
    materials: Material registry and scatter functions
    scene: Sphere storage, nearest-hit queries and scene builders
    camera: Pinhole camera with ray generation
    preview: Image export utilities

Modules that declare Taichi fields must be imported after ti.init().
"""

__version__ = "0.1.0"
