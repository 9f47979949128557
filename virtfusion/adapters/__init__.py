# virtfusion/adapters/__init__.py
from .rest_adapter import ResourceAdapter
from .server_adapter import ServerAdapter, ServerBuildAdapter, ServerDataSource
from .ssh_key_adapter import SSHKeyAdapter
from .inventory_adapter import PackageAdapter, NetworkBlockAdapter

__all__ = [
    "ResourceAdapter",
    "ServerAdapter",
    "ServerBuildAdapter",
    "ServerDataSource",
    "SSHKeyAdapter",
    "PackageAdapter",
    "NetworkBlockAdapter"
]
