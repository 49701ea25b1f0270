from siegestats.core.cache.metrics import CacheMetrics

__all__ = ["CacheMetrics"]
