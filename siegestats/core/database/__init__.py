from siegestats.core.database.base import Base
from siegestats.core.database.bootstrap import (
    create_health_monitor,
    initialize_database_subsystem,
    shutdown_database_subsystem,
)
from siegestats.core.database.health_monitor import (
    DatabaseHealthMonitor,
    DatabaseHealthMonitorConfig,
)
from siegestats.core.database.service import (
    DatabaseInitializationError,
    DatabaseNotInitializedError,
    DatabaseService,
)

__all__ = [
    "Base",
    "DatabaseHealthMonitor",
    "DatabaseHealthMonitorConfig",
    "DatabaseInitializationError",
    "DatabaseNotInitializedError",
    "DatabaseService",
    "create_health_monitor",
    "initialize_database_subsystem",
    "shutdown_database_subsystem",
]
