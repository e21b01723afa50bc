"""botcheck — deterministic validation and compatibility engine for assembled units."""

__version__ = "0.1.0"
