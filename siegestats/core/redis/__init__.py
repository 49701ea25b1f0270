from siegestats.core.redis.health_monitor import HealthState, RedisHealthMonitor
from siegestats.core.redis.service import RedisService

__all__ = ["HealthState", "RedisHealthMonitor", "RedisService"]
