# virtfusion/kinds.py
from typing import ClassVar, List, Optional

from .fields import ResourceKind, ResourceRecord, computed, optional, required


class Server(ResourceRecord):
    """Virtual server provisioned from a package on a hypervisor"""
    kind_name: ClassVar[str] = "server"

    id: Optional[int] = computed()
    uuid: Optional[str] = computed()
    state: Optional[str] = computed()
    hostname: Optional[str] = computed()
    package_id: Optional[int] = required(key="packageId", immutable=True)
    user_id: Optional[int] = required(key="userId", response="ownerId", immutable=True)
    # one of hypervisor_id / hypervisor_group_id must be set
    hypervisor_id: Optional[int] = optional(key="hypervisorId", immutable=True)
    hypervisor_group_id: Optional[int] = optional(key="hypervisorGroupId", read=False, immutable=True)
    name: Optional[str] = optional()
    ipv4: Optional[int] = optional(1, read=False, immutable=True)
    private_ipv4: Optional[int] = optional(key="ipv4Private", read=False, immutable=True)
    storage: Optional[int] = optional(response="settings.resources.storage", immutable=True)
    memory: Optional[int] = optional(response="settings.resources.memory")
    cores: Optional[int] = optional(key="cpuCores", response="settings.resources.cpuCores")
    traffic: Optional[int] = optional(response="settings.resources.traffic")
    inbound_network_speed: Optional[int] = optional(key="networkSpeedInbound", read=False)
    outbound_network_speed: Optional[int] = optional(key="networkSpeedOutbound", read=False)
    storage_profile: Optional[int] = optional(key="storageProfile", read=False, immutable=True)
    network_profile: Optional[int] = optional(key="networkProfile", read=False, immutable=True)


class ServerBuild(ResourceRecord):
    """Operating system build of an existing server"""
    kind_name: ClassVar[str] = "server_build"

    server_id: Optional[int] = required(response="id", send=False, immutable=True)
    name: Optional[str] = required(immutable=True)
    hostname: Optional[str] = optional(read=False, immutable=True)
    osid: Optional[int] = optional(key="operatingSystemId", read=False, immutable=True)
    # resolved to osid before the build request
    os_template: Optional[str] = optional(send=False, read=False, immutable=True)
    vnc: Optional[bool] = optional(False, read=False, immutable=True)
    ipv6: Optional[bool] = optional(False, read=False, immutable=True)
    ssh_keys: Optional[List[int]] = optional(key="sshKeys", read=False, immutable=True)
    email: Optional[bool] = optional(False, read=False, immutable=True)


class SSHKey(ResourceRecord):
    """Public SSH key attached to a user"""
    kind_name: ClassVar[str] = "ssh_key"

    id: Optional[int] = computed()
    user_id: Optional[int] = required(key="userId", read=False, immutable=True)
    name: Optional[str] = required(immutable=True)
    # key material is write-only; reads return its hash under publicKey
    public_key: Optional[str] = required(key="publicKey", read=False, immutable=True)
    public_key_hash: Optional[str] = computed(response="publicKey")
    type: Optional[str] = computed()
    enabled: Optional[bool] = computed()
    created: Optional[str] = computed()


class Package(ResourceRecord):
    """Resource package servers are provisioned from"""
    kind_name: ClassVar[str] = "package"

    id: Optional[int] = computed()
    name: Optional[str] = required()
    cpu_cores: Optional[int] = required()
    cpu_model: Optional[str] = optional("inherit")
    cpu_shares: Optional[int] = optional(1024)
    description: Optional[str] = optional()
    enabled: Optional[bool] = optional()
    memory: Optional[int] = optional()
    disk_type: Optional[str] = optional()
    machine_type: Optional[str] = optional()
    force_ipv6: Optional[bool] = optional()
    pci_ports: Optional[int] = optional()


class NetworkBlock(ResourceRecord):
    """Block of IP addresses assignable to servers"""
    kind_name: ClassVar[str] = "network_block"

    id: Optional[int] = computed()
    name: Optional[str] = required()
    network_type: Optional[int] = required(key="type")


class ServerData(ResourceRecord):
    """Read-only view of an existing server"""
    kind_name: ClassVar[str] = "server_data"

    id: Optional[int] = required(send=False)
    owner_id: Optional[int] = computed(response="ownerId")
    hypervisor_id: Optional[int] = computed(response="hypervisorId")
    name: Optional[str] = computed()
    hostname: Optional[str] = computed()
    commission_status: Optional[int] = computed(response="commissionStatus")
    uuid: Optional[str] = computed()
    state: Optional[str] = computed()
    migrate_level: Optional[int] = computed(response="migrateLevel")
    delete_level: Optional[int] = computed(response="deleteLevel")
    config_level: Optional[int] = computed(response="configLevel")
    rebuild: Optional[bool] = computed()
    suspended: Optional[bool] = computed()
    protected: Optional[bool] = computed()
    build_failed: Optional[bool] = computed(response="buildFailed")
    primary_network_dhcp4: Optional[bool] = computed(response="primaryNetworkDhcp4")
    primary_network_dhcp6: Optional[bool] = computed(response="primaryNetworkDhcp6")
    built: Optional[str] = computed()
    created: Optional[str] = computed()
    updated: Optional[str] = computed()
    network: Optional[dict] = computed()


SERVER = ResourceKind(Server, "servers", create_statuses=(201,))
SERVER_BUILD = ResourceKind(ServerBuild, "servers/{server_id}/build", identity="server_id",
                            create_statuses=(200,))
SSH_KEY = ResourceKind(SSHKey, "ssh_keys", create_statuses=(201,))
PACKAGE = ResourceKind(Package, "packages")
NETWORK_BLOCK = ResourceKind(NetworkBlock, "network-block")
SERVER_DATA = ResourceKind(ServerData, "servers")

RESOURCE_KINDS = {
    kind.name: kind
    for kind in (SERVER, SERVER_BUILD, SSH_KEY, PACKAGE, NETWORK_BLOCK)
}
