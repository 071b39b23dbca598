"""Exceptions raised by the normalizer, registry, and source clients."""


class KabasError(Exception):
    """Base exception for dashboard errors."""


class ValidationError(KabasError):
    """Raw record cannot be normalized into an issue."""


class ConfigurationError(KabasError):
    """Team scope or credentials are incomplete."""


class TeamNotFoundError(KabasError):
    """Team with given id is not registered."""


class SourceError(KabasError):
    """Upstream tracker request failed."""


class ProjectNotFoundError(SourceError):
    """GitHub Project not found."""


class MissingStatusFieldError(SourceError):
    """GitHub Project has no single-select field named Status."""
