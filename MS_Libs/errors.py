"""
Error kinds raised by the Mockup Studio engine.

Geometry problems on boxes are clamped rather than raised; GeometryInvalid
is reserved for containers that cannot hold any box at all.
"""


class MockupError(Exception):
    """Base class for engine errors."""


class DecodeFailure(MockupError, ValueError):
    """Bytes could not be interpreted as an image."""


class GeometryInvalid(MockupError, ValueError):
    """A container or scale resolved to non-positive dimensions."""


class BakeFailure(MockupError, RuntimeError):
    """No drawing surface was available to produce a flattened image."""


class SynthesisFailure(MockupError, RuntimeError):
    """The image synthesis collaborator returned no usable image."""
