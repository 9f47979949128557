# example_usage.py - Usage examples against a live VirtFusion control panel
#
# Reads VIRTFUSION_ENDPOINT and VIRTFUSION_API_TOKEN from the environment.

from virtfusion import ResourceManager, VirtFusionError, configure_logging


def example_server_lifecycle(user_id: int, package_id: int, hypervisor_id: int):
    """Provision a server, build it, then roll everything back"""
    rm = ResourceManager.default()
    rm.configure()

    try:
        key = rm.create("ssh_key", {
            "user_id": user_id,
            "name": "example-key",
            "public_key": "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIExample example@host",
        })
        print(f"Created SSH key: {key['id']}")

        server = rm.create("server", {
            "user_id": user_id,
            "package_id": package_id,
            "hypervisor_id": hypervisor_id,
            "memory": 2048,
        })
        print(f"Created server {server['id']} ({server['name']})")

        build = rm.create("server_build", {
            "server_id": server["id"],
            "name": server["name"],
            "os_template": "Debian 12",
            "ssh_keys": [key["id"]],
        })
        print(f"Build started with OS template {build['osid']}")

        # Read-after-write verification
        refreshed = rm.read("server", server["id"])
        assert refreshed is not None and refreshed["id"] == server["id"]

        # Show tracked resources
        print(f"Tracked resources: {rm.get_resources()}")

    except VirtFusionError as e:
        print(f"Error: {e}")
    finally:
        # Always clean up
        rm.rollback()
        print("Cleanup completed")


def example_import_and_inspect(server_id: int):
    """Adopt an existing server and look at it through the data source"""
    rm = ResourceManager.default()
    rm.configure()

    server = rm.import_state("server", server_id)
    print(f"Imported server: {server}")

    details = rm.adapter("server_data").read(server_id)
    for interface in (details.get("network") or {}).get("interfaces", []):
        addresses = [ip.get("address") for ip in interface.get("ipv4", [])]
        print(f"{interface.get('name')}: {', '.join(addresses)}")

    # imported server is left in place
    rm.rollback()


if __name__ == "__main__":
    configure_logging()

    print("VirtFusion Usage Examples")
    print("=" * 50)

    print("\n1. Server lifecycle:")
    example_server_lifecycle(user_id=1, package_id=1, hypervisor_id=1)

    print("\n2. Import and inspect:")
    example_import_and_inspect(server_id=1)
