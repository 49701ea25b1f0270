"""SiegeStats: cached Rainbow Six Siege player statistics."""

__version__ = "1.0.0"
