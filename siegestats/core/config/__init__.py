"""
Configuration subsystem for SiegeStats.

Static configuration is loaded from environment variables (with `.env`
support) by :class:`Config` at import time. Service-level option objects are
built from it, e.g. ``StatsServiceOptions.from_config(...)``.

Usage
-----
```python
from siegestats.core.config import Config

if Config.is_production():
    logger.info("Running in production mode")

window_ms = Config.STATS_EXPIRATION_MS
```
"""

from siegestats.core.config.config import Config

__all__ = [
    "Config",
]
