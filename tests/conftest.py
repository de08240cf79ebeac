"""
Shared test fixtures.

Every test runs with its own config directory and log directory, so nothing
touches ./config, ./logs or ./data of a working copy.
"""

import pytest

from timber_market.config import get_config_manager, reset_config_manager
from timber_market.database import DatabaseManager, MarketplaceRepository
from timber_market.utils import reset_loggers


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Point configuration and logging at tmp_path."""
    monkeypatch.setenv("TIMBER_MARKET_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    reset_loggers()
    reset_config_manager()

    config = get_config_manager()
    config.set("logging.log_dir", str(tmp_path / "logs"))
    config.set("database.path", str(tmp_path / "data" / "test.db"))

    yield config

    reset_loggers()
    reset_config_manager()


@pytest.fixture
def db_manager(tmp_path):
    """Initialized database in tmp_path."""
    manager = DatabaseManager(str(tmp_path / "data" / "test.db"))
    manager.initialize_database()
    return manager


@pytest.fixture
def repository(db_manager):
    return MarketplaceRepository(db_manager)
