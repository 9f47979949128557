# virtfusion/state_manager.py
import logging
from typing import Dict, List, Mapping, Optional

from .config import ProviderConfig
from .exceptions import ConfigurationError, ResourceNotFoundError, RollbackError
from .transport import AuthenticatedSession

logger = logging.getLogger(__name__)


class ResourceManager:
    """
    Drives adapters through their lifecycle and tracks the records they return.
    Resources are stored as: {kind: {id: record}}, with creation order kept
    for rollback. Imported records are tracked but never rolled back.
    """
    def __init__(self):
        self._resources: Dict[str, Dict[int, Dict]] = {}
        self._created: List[tuple] = []
        self._adapters = {}
        self.config: Optional[ProviderConfig] = None
        self.session: Optional[AuthenticatedSession] = None

    @classmethod
    def default(cls) -> "ResourceManager":
        """Manager with an adapter registered for every built-in resource kind"""
        from .adapters import (
            NetworkBlockAdapter,
            PackageAdapter,
            ServerAdapter,
            ServerBuildAdapter,
            ServerDataSource,
            SSHKeyAdapter,
        )

        rm = cls()
        for adapter in (ServerAdapter(), ServerBuildAdapter(), SSHKeyAdapter(),
                        PackageAdapter(), NetworkBlockAdapter(), ServerDataSource()):
            rm.register_adapter(adapter)
        return rm

    def configure(self, config=None, environ: Mapping = None) -> ProviderConfig:
        """
        Resolve the provider config, open one authenticated session and hand
        it to every registered adapter.
        """
        if not isinstance(config, ProviderConfig):
            config = ProviderConfig.resolve(config, environ)

        self.config = config
        self.session = AuthenticatedSession(config)
        for adapter in self._adapters.values():
            adapter.configure(self.session, config)

        logger.info("Configured VirtFusion endpoint %s", config.endpoint)
        return config

    def register_adapter(self, adapter):
        """Register an adapter under its kind name (e.g., 'server', 'ssh_key')"""
        self._adapters[adapter.name] = adapter
        if self.session is not None:
            adapter.configure(self.session, self.config)

    def adapter(self, kind: str):
        try:
            return self._adapters[kind]
        except KeyError:
            raise ConfigurationError(f"No adapter registered for {kind!r}")

    def _identity(self, kind: str, record: Dict):
        return record.get(self.adapter(kind).kind.identity)

    def _track(self, kind: str, record: Dict, created: bool = True):
        identity = self._identity(kind, record)
        if kind not in self._resources:
            self._resources[kind] = {}
        if created and identity not in self._resources[kind]:
            self._created.append((kind, identity))
        self._resources[kind][identity] = record

    def _untrack(self, kind: str, identity):
        self._resources.get(kind, {}).pop(identity, None)
        if (kind, identity) in self._created:
            self._created.remove((kind, identity))

    def create(self, kind: str, data: Dict) -> Dict:
        """Create resource via adapter, store for rollback"""
        record = self.adapter(kind).create(data)
        self._track(kind, record)
        return record

    def read(self, kind: str, record) -> Optional[Dict]:
        """
        Refresh a record. Accepts a record or a bare id. An absent remote
        object is dropped from tracked state and None is returned.
        """
        adapter = self.adapter(kind)
        if not isinstance(record, dict):
            record = self._resources.get(kind, {}).get(record, {adapter.kind.identity: record})

        refreshed = adapter.read(record)
        identity = record.get(adapter.kind.identity)
        if refreshed is None:
            self._untrack(kind, identity)
            return None

        if identity in self._resources.get(kind, {}):
            self._resources[kind][identity] = refreshed
        return refreshed

    def update(self, kind: str, identity, data: Dict) -> Dict:
        adapter = self.adapter(kind)
        prior = self._resources.get(kind, {}).get(identity)
        if prior is None:
            prior = self.read(kind, identity) or {}
        if not prior:
            raise ResourceNotFoundError(f"{kind} {identity} not found")

        updated = adapter.update(prior, data)
        if identity in self._resources.get(kind, {}):
            self._resources[kind][identity] = updated
        return updated

    def delete(self, kind: str, record) -> bool:
        adapter = self.adapter(kind)
        if not isinstance(record, dict):
            record = self._resources.get(kind, {}).get(record, {adapter.kind.identity: record})

        deleted = adapter.delete(record)
        self._untrack(kind, record.get(adapter.kind.identity))
        return deleted

    def import_state(self, kind: str, identifier) -> Dict:
        """Adopt an existing remote object by id and track it; rollback leaves it alone"""
        record = self.adapter(kind).import_state(identifier)
        self._track(kind, record, created=False)
        return record

    def rollback(self):
        """Rollback in reverse creation order (LIFO)"""
        errors = []
        for kind, identity in reversed(list(self._created)):
            record = self._resources.get(kind, {}).get(identity)
            if record is None:
                continue
            try:
                self.delete(kind, record)
            except Exception as e:
                errors.append(f"Failed to delete {kind} {identity}: {e}")

        if errors:
            raise RollbackError("Rollback incomplete:\n" + "\n".join(errors))

        # Clear all resources if rollback was successful
        self._resources.clear()
        self._created.clear()

    def get_resources(self, kind: Optional[str] = None):
        """Get tracked resources, optionally filtered by kind"""
        if kind:
            return list(self._resources.get(kind, {}).values())
        return {k: list(v.values()) for k, v in self._resources.items()}

    def clear_resources(self):
        """Clear all tracked resources without deletion (use with caution)"""
        self._resources.clear()
        self._created.clear()
