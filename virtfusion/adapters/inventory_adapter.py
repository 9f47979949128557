# virtfusion/adapters/inventory_adapter.py
from ..kinds import NETWORK_BLOCK, PACKAGE
from .rest_adapter import ResourceAdapter


class PackageAdapter(ResourceAdapter):
    def __init__(self):
        super().__init__(PACKAGE)


class NetworkBlockAdapter(ResourceAdapter):
    def __init__(self):
        super().__init__(NETWORK_BLOCK)
