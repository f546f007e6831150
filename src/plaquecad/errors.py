"""Exception hierarchy for plaquecad."""

from __future__ import annotations


class PlaqueCadError(Exception):
    """Base class for all plaquecad errors."""


class ResourceError(PlaqueCadError):
    """A shared resource (font, boolean engine) could not be loaded.

    Fatal for the generation call that needed it.
    """


class GeometryError(PlaqueCadError, ValueError):
    """Invalid geometry was handed to a builder."""


class CompositionError(GeometryError):
    """A boolean composition failed; scoped to the region being built."""


class OffsetError(GeometryError):
    """A validated polygon offset produced an invalid polygon."""


class ConfigError(PlaqueCadError):
    """A design definition file is malformed."""


class UnknownDesignError(PlaqueCadError, KeyError):
    """No design is registered under the requested id."""

    def __str__(self) -> str:
        return f"unknown design: {self.args[0]!r}" if self.args else "unknown design"


__all__ = [
    "PlaqueCadError",
    "ResourceError",
    "GeometryError",
    "CompositionError",
    "OffsetError",
    "ConfigError",
    "UnknownDesignError",
]
