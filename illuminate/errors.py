"""
Exceptions raised by the ray tracer.

Invalid configuration is rejected when objects are constructed so that
no NaN or infinity can leak into a render.
"""


class ConfigurationError(ValueError):
    """A camera, shape, material or render setting is invalid."""
    pass
