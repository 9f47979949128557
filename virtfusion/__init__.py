# virtfusion/__init__.py
from .state_manager import ResourceManager
from .config import ProviderConfig
from .log import configure_logging
from .exceptions import (
    VirtFusionError,
    ConfigurationError,
    RecordError,
    TransportError,
    DecodeError,
    APIError,
    ValidationError,
    UnexpectedStatusError,
    ResourceNotFoundError,
    RollbackError,
)

__version__ = "0.1.0"
__all__ = [
    "ResourceManager",
    "ProviderConfig",
    "configure_logging",
    "VirtFusionError",
    "ConfigurationError",
    "RecordError",
    "TransportError",
    "DecodeError",
    "APIError",
    "ValidationError",
    "UnexpectedStatusError",
    "ResourceNotFoundError",
    "RollbackError",
]
