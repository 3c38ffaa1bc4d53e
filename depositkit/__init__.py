"""Ethereum chain access for a validator deposit contract."""

from .config import ChainSettings, load_settings
from .core import ChainManager, DepositNotice
from .exceptions import ChainAccessError, ConfigurationError, NoAccountsError, WrongNetworkError

__version__ = "0.1.0"

__all__ = [
    "ChainAccessError",
    "ChainManager",
    "ChainSettings",
    "ConfigurationError",
    "DepositNotice",
    "NoAccountsError",
    "WrongNetworkError",
    "__version__",
    "load_settings",
]
