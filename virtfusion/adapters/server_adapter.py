# virtfusion/adapters/server_adapter.py
import logging
import uuid
from typing import Dict

from ..exceptions import RecordError, ResourceNotFoundError
from ..kinds import SERVER, SERVER_BUILD, SERVER_DATA
from .rest_adapter import ResourceAdapter

logger = logging.getLogger(__name__)


def generate_server_name() -> str:
    """Random name in the form tf-<8 hex chars> for servers created without one"""
    return "tf-" + uuid.uuid4().hex[:8]


class ServerAdapter(ResourceAdapter):
    """
    Servers pick up the provider defaults (package, hypervisor group, IP
    counts) for anything the record leaves unset.
    """

    def __init__(self):
        super().__init__(SERVER)

    def apply_defaults(self, record: Dict) -> Dict:
        if not record.get("name"):
            record["name"] = generate_server_name()

        config = self.config
        if config is not None:
            if record.get("package_id") is None and config.default_package_id is not None:
                record["package_id"] = config.default_package_id
            if record.get("ipv4") is None:
                record["ipv4"] = config.default_ipv4
            # zero is never sent
            if record.get("private_ipv4") is None and config.default_private_ipv4:
                record["private_ipv4"] = config.default_private_ipv4
            if (record.get("hypervisor_id") is None
                    and record.get("hypervisor_group_id") is None
                    and config.default_hypervisor_group_id is not None):
                record["hypervisor_group_id"] = config.default_hypervisor_group_id

        if record.get("hypervisor_id") is None and record.get("hypervisor_group_id") is None:
            raise RecordError("server: hypervisor_id or hypervisor_group_id is required")
        return record


class ServerBuildAdapter(ResourceAdapter):
    """
    Builds an operating system onto an existing server.

    The build is identified by its server: reads check the server itself and
    delete only drops the record, since a build cannot be undone remotely.
    """

    TEMPLATES_PATH = "operating-systems"

    def __init__(self):
        super().__init__(SERVER_BUILD)

    def prepare_create(self, record: Dict) -> Dict:
        if record.get("osid") is not None:
            return record

        template = record.get("os_template")
        if not template and self.config is not None:
            template = self.config.default_os_template
        if not template:
            raise RecordError(
                "server_build: osid or os_template is required when no default OS template is configured"
            )

        record["os_template"] = template
        record["osid"] = self.resolve_os_template(template)
        return record

    def resolve_os_template(self, template: str) -> int:
        """Look up an operating system template id by name (case-insensitive)"""
        response = self._request("GET", self.TEMPLATES_PATH)
        self._check_status(response, "list operating systems for", (200,))

        templates = self._payload(response)
        if not isinstance(templates, list):
            templates = []

        wanted = template.strip().casefold()
        for item in templates:
            if isinstance(item, dict) and str(item.get("name", "")).strip().casefold() == wanted:
                logger.debug("Resolved OS template %r to %s", template, item.get("id"))
                return item["id"]

        raise ResourceNotFoundError(f"Operating system template {template!r} not found")

    def item_path(self, record: Dict) -> str:
        server_id = record.get("server_id")
        if server_id is None:
            raise RecordError("server_build: record has no server_id")
        return f"servers/{server_id}"

    def delete(self, record: Dict) -> bool:
        logger.info("Dropping build record for server %s; builds are not deleted remotely",
                    record.get("server_id"))
        return True


class ServerDataSource(ResourceAdapter):
    """Read-only view of a server; a missing server is an error, not absence"""

    def __init__(self):
        super().__init__(SERVER_DATA)

    def read(self, record) -> Dict:
        if not isinstance(record, dict):
            record = {"id": record}
        if record.get("id") is None:
            raise RecordError("server_data: id is required")

        result = super().read(record)
        if result is None:
            raise ResourceNotFoundError(f"Server {record['id']} not found")
        return result

    def import_state(self, identifier) -> Dict:
        raise NotImplementedError("Data sources cannot be imported")

    def create(self, record: Dict) -> Dict:
        raise NotImplementedError("Data sources are read-only")

    def update(self, prior: Dict, planned: Dict) -> Dict:
        raise NotImplementedError("Data sources are read-only")

    def delete(self, record: Dict) -> bool:
        raise NotImplementedError("Data sources are read-only")
