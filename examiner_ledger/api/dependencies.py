"""FastAPI dependencies for dependency injection."""

from examiner_ledger.config import Config
from examiner_ledger.datasources import DataSource

# Global datasource and config - initialized at app startup.
# Identity caches are not shared: every request opens its own session.
_datasource: DataSource | None = None
_config: Config | None = None


def set_datasource(datasource: DataSource, config: Config | None = None) -> None:
    """Set the global datasource instance."""
    global _datasource, _config
    _datasource = datasource
    _config = config


def get_datasource() -> DataSource:
    """Get the global datasource instance for dependency injection."""
    if _datasource is None:
        raise RuntimeError("DataSource not initialized. Call set_datasource() first.")
    return _datasource


def get_config() -> Config:
    """Get the application config, falling back to defaults."""
    return _config or Config()
