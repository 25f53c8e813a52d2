"""Spectral Monte Carlo path tracer.

Rays carry a single frequency bin; surfaces decide stochastically whether
they emit into the ray and how it scatters. Many sample passes, run on a
pool of worker threads, are accumulated into a checkpointable image.

Subpackages:
    core: Vector algebra, rays, the integrator, images and the tracer
    geometry: Sphere and triangle primitives
    materials: Spectral beams and materials
    scene: Scene container, nearest-hit search and the demo scene
    camera: Eye and screen sampling
    output: Image export and checkpoints

Modules:
    config: RenderConfig
    logging_config: setup_logging
    session: run_session
"""

__version__ = "0.1.0"
