"""sharelink — keep consumer tools pointed at one shared directory."""

__version__ = "0.1.0"
