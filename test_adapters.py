# test_adapters.py - CRUD adapter behaviour against a mocked HTTP session

import re
from unittest.mock import call

import pytest
import requests

from virtfusion import (
    ConfigurationError,
    DecodeError,
    RecordError,
    ResourceNotFoundError,
    TransportError,
    UnexpectedStatusError,
    ValidationError,
)
from virtfusion.adapters import (
    NetworkBlockAdapter,
    PackageAdapter,
    ServerAdapter,
    ServerBuildAdapter,
    ServerDataSource,
    SSHKeyAdapter,
)

PACKAGE_DATA = {"id": 42, "name": "small", "cpu_cores": 2}


def configured(adapter, session, config):
    adapter.configure(session, config)
    return adapter


@pytest.fixture
def packages(session, config):
    return configured(PackageAdapter(), session, config)


@pytest.fixture
def servers(session, config):
    return configured(ServerAdapter(), session, config)


@pytest.fixture
def builds(session, config):
    return configured(ServerBuildAdapter(), session, config)


@pytest.fixture
def ssh_keys(session, config):
    return configured(SSHKeyAdapter(), session, config)


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

def test_create_sends_only_set_fields(packages, session, respond):
    """Omitted optional fields are left out of the body, not sent as zero values"""
    session.request.return_value = respond(201, {"data": PACKAGE_DATA})

    packages.create({"name": "small", "cpu_cores": 2})

    session.request.assert_called_once_with(
        "POST", "packages", json={"name": "small", "cpu_cores": 2}
    )
    body = session.request.call_args.kwargs["json"]
    assert "cpu_model" not in body
    assert "cpu_shares" not in body


def test_create_sends_explicit_zero_and_false(packages, session, respond):
    """Only unset fields are omitted; 0 and False are real values"""
    session.request.return_value = respond(201, {"data": PACKAGE_DATA})

    record = packages.create({"name": "small", "cpu_cores": 2, "memory": 0, "enabled": False,
                              "description": None})

    session.request.assert_called_once_with(
        "POST", "packages",
        json={"name": "small", "cpu_cores": 2, "memory": 0, "enabled": False},
    )
    assert record["memory"] == 0
    assert record["enabled"] is False


def test_create_rejects_loosely_typed_values(packages, servers, session):
    """Inputs are not coerced: "2" is not an int and True is not a count"""
    with pytest.raises(RecordError) as exc_info:
        packages.create({"name": "small", "cpu_cores": "2"})
    assert "cpu_cores" in str(exc_info.value)

    with pytest.raises(RecordError):
        packages.create({"name": "small", "cpu_cores": True})

    with pytest.raises(RecordError):
        servers.create({"package_id": 1, "user_id": 2, "hypervisor_id": 3, "storage": 4.5})

    session.request.assert_not_called()


def test_create_reports_every_record_problem(packages, session):
    with pytest.raises(RecordError) as exc_info:
        packages.create({"cpu_model": 7, "id": 1, "colour": "red"})

    message = str(exc_info.value)
    assert message.startswith("package: ")
    assert "name is required" in message
    assert "cpu_cores is required" in message
    assert "id is computed" in message
    assert "colour" in message
    assert "cpu_model" in message


def test_create_fills_computed_and_server_defaults(packages, session, respond):
    session.request.return_value = respond(201, {"data": PACKAGE_DATA})

    record = packages.create({"name": "small", "cpu_cores": 2})

    assert record["id"] == 42
    assert record["cpu_model"] == "inherit"
    assert record["cpu_shares"] == 1024
    assert record["description"] is None


def test_create_validation_error_surfaces_errors(packages, session, respond):
    """A 422 carries the server's errors and never yields an id"""
    session.request.return_value = respond(422, {"errors": {"name": ["taken"]}})

    with pytest.raises(ValidationError) as exc_info:
        packages.create({"name": "small", "cpu_cores": 2})

    assert "taken" in str(exc_info.value)
    assert exc_info.value.errors == {"name": ["taken"]}
    assert exc_info.value.status_code == 422


def test_create_422_without_errors_is_unexpected_status(packages, session, respond):
    session.request.return_value = respond(422, {"message": "nope"})

    with pytest.raises(UnexpectedStatusError) as exc_info:
        packages.create({"name": "small", "cpu_cores": 2})

    assert exc_info.value.status_code == 422


def test_create_unexpected_status_keeps_status_and_body(packages, session, respond):
    session.request.return_value = respond(500, text="database down")

    with pytest.raises(UnexpectedStatusError) as exc_info:
        packages.create({"name": "small", "cpu_cores": 2})

    assert exc_info.value.status_code == 500
    assert exc_info.value.body == "database down"
    assert "500" in str(exc_info.value)


def test_create_malformed_json_is_decode_error(packages, session, respond):
    session.request.return_value = respond(201, text="<html>oops</html>")

    with pytest.raises(DecodeError):
        packages.create({"name": "small", "cpu_cores": 2})


def test_create_without_id_in_response_is_decode_error(packages, session, respond):
    session.request.return_value = respond(201, {"data": {"name": "small"}})

    with pytest.raises(DecodeError):
        packages.create({"name": "small", "cpu_cores": 2})


def test_create_transport_failure(packages, session):
    session.request.side_effect = requests.ConnectionError("connection refused")

    with pytest.raises(TransportError) as exc_info:
        packages.create({"name": "small", "cpu_cores": 2})

    assert "connection refused" in str(exc_info.value)


def test_create_rejects_invalid_records_before_any_request(packages, session):
    with pytest.raises(RecordError) as exc_info:
        packages.create({"name": "small"})
    assert "cpu_cores is required" in str(exc_info.value)

    with pytest.raises(RecordError):
        packages.create({"name": "small", "cpu_cores": 2, "id": 7})

    with pytest.raises(RecordError):
        packages.create({"name": "small", "cpu_cores": "two"})

    with pytest.raises(RecordError):
        packages.create({"name": "small", "cpu_cores": 2, "colour": "red"})

    session.request.assert_not_called()


def test_unconfigured_adapter_raises():
    with pytest.raises(ConfigurationError):
        PackageAdapter().read({"id": 1})


# ---------------------------------------------------------------------------
# Read / import
# ---------------------------------------------------------------------------

def test_create_then_read_keeps_id(packages, session, respond):
    session.request.return_value = respond(201, {"data": PACKAGE_DATA})
    created = packages.create({"name": "small", "cpu_cores": 2})

    session.request.return_value = respond(200, {"data": PACKAGE_DATA})
    refreshed = packages.read(created)

    session.request.assert_called_with("GET", "packages/42")
    assert refreshed == created


def test_read_missing_record_signals_absence(packages, session, respond):
    session.request.return_value = respond(404, {"message": "not found"})

    assert packages.read({"id": 42}) is None


def test_read_other_failure_raises(packages, session, respond):
    session.request.return_value = respond(403, {"message": "forbidden"})

    with pytest.raises(UnexpectedStatusError):
        packages.read({"id": 42})


def test_read_without_id_raises(packages):
    with pytest.raises(RecordError):
        packages.read({"name": "small"})


def test_import_matches_fresh_create(packages, session, respond):
    session.request.return_value = respond(201, {"data": PACKAGE_DATA})
    created = packages.create({"name": "small", "cpu_cores": 2})

    session.request.return_value = respond(200, {"data": PACKAGE_DATA})
    imported = packages.import_state("42")

    assert imported == created


def test_import_rejects_non_numeric_id(packages, session):
    with pytest.raises(RecordError):
        packages.import_state("abc")
    session.request.assert_not_called()


def test_import_of_missing_record(packages, session, respond):
    session.request.return_value = respond(404)

    with pytest.raises(ResourceNotFoundError):
        packages.import_state(42)


# ---------------------------------------------------------------------------
# Update / delete
# ---------------------------------------------------------------------------

def test_update_sends_changed_mutable_fields(servers, session, respond):
    prior = {"id": 10, "package_id": 1, "user_id": 2, "hypervisor_id": 3,
             "name": "web-1", "ipv4": 1, "memory": 1024}
    session.request.return_value = respond(204)

    updated = servers.update(prior, {"memory": 2048, "name": "web-1"})

    session.request.assert_called_once_with("PUT", "servers/10", json={"memory": 2048})
    assert updated["memory"] == 2048
    assert updated["id"] == 10


def test_update_drops_immutable_changes(servers, session, respond):
    prior = {"id": 10, "package_id": 1, "user_id": 2, "hypervisor_id": 3, "ipv4": 1}
    session.request.return_value = respond(200, {"data": {"id": 10}})

    updated = servers.update(prior, {"ipv4": 4, "cores": 2})

    session.request.assert_called_once_with("PUT", "servers/10", json={"cpuCores": 2})
    assert updated["ipv4"] == 1
    assert updated["cores"] == 2


def test_update_with_nothing_to_send_makes_no_request(packages, session):
    prior = dict(PACKAGE_DATA, cpu_model="inherit", cpu_shares=1024)

    updated = packages.update(prior, {"name": "small"})

    session.request.assert_not_called()
    assert updated["name"] == "small"


def test_update_validation_error(packages, session, respond):
    session.request.return_value = respond(422, {"errors": {"memory": ["too small"]}})

    with pytest.raises(ValidationError) as exc_info:
        packages.update(dict(PACKAGE_DATA), {"memory": 1})

    assert "too small" in str(exc_info.value)


@pytest.mark.parametrize("status", [200, 204, 404])
def test_delete_is_idempotent(packages, session, respond, status):
    session.request.return_value = respond(status)

    assert packages.delete({"id": 42}) is True
    session.request.assert_called_once_with("DELETE", "packages/42")


def test_delete_failure_raises(packages, session, respond):
    session.request.return_value = respond(409, {"message": "in use"})

    with pytest.raises(UnexpectedStatusError):
        packages.delete({"id": 42})


# ---------------------------------------------------------------------------
# Servers
# ---------------------------------------------------------------------------

def test_server_create_applies_provider_defaults(servers, session, respond):
    session.request.return_value = respond(201, {"data": {"id": 10, "uuid": "abc-123"}})

    record = servers.create({"package_id": 1, "user_id": 2, "hypervisor_id": 3, "name": "web-1"})

    session.request.assert_called_once_with("POST", "servers", json={
        "packageId": 1,
        "userId": 2,
        "hypervisorId": 3,
        "name": "web-1",
        "ipv4": 1,
    })
    assert record["id"] == 10
    assert record["uuid"] == "abc-123"


def test_server_create_generates_name(servers, session, respond):
    session.request.return_value = respond(201, {"data": {"id": 10}})

    record = servers.create({"package_id": 1, "user_id": 2, "hypervisor_id": 3})

    assert re.match(r"^tf-[0-9a-f]{8}$", record["name"])
    assert session.request.call_args.kwargs["json"]["name"] == record["name"]


def test_server_create_requires_a_hypervisor(servers, session):
    with pytest.raises(RecordError):
        servers.create({"package_id": 1, "user_id": 2})
    session.request.assert_not_called()


def test_server_create_uses_default_package_and_hypervisor_group(session, config, respond):
    config = config.__class__(
        endpoint=config.endpoint,
        api_token=config.api_token,
        default_package_id=5,
        default_hypervisor_group_id=8,
        default_private_ipv4=2,
    )
    servers = configured(ServerAdapter(), session, config)
    session.request.return_value = respond(201, {"data": {"id": 11}})

    record = servers.create({"user_id": 2, "name": "db-1"})

    body = session.request.call_args.kwargs["json"]
    assert body["packageId"] == 5
    assert body["hypervisorGroupId"] == 8
    assert body["ipv4Private"] == 2
    assert "hypervisorId" not in body
    assert record["package_id"] == 5


def test_server_read_maps_nested_resources(servers, session, respond):
    session.request.return_value = respond(200, {"data": {
        "id": 10,
        "ownerId": 2,
        "hypervisorId": 3,
        "name": "web-1",
        "state": "running",
        "settings": {"resources": {"memory": 2048, "cpuCores": 2, "storage": 40, "traffic": 0}},
    }})

    record = servers.read({"id": 10, "package_id": 1, "ipv4": 1})

    assert record["memory"] == 2048
    assert record["cores"] == 2
    assert record["traffic"] == 0
    assert record["user_id"] == 2
    assert record["package_id"] == 1
    assert record["state"] == "running"


def test_server_read_ignores_write_only_keys_in_response(servers, session, respond):
    session.request.return_value = respond(200, {"data": {
        "id": 10,
        "ipv4": [{"address": "203.0.113.7"}],
        "settings": {"resources": {"memory": "2048"}},
    }})

    record = servers.read({"id": 10, "ipv4": 1})

    assert record["ipv4"] == 1
    assert record["memory"] == 2048


def test_read_response_with_wrong_types(packages, session, respond):
    session.request.return_value = respond(200, {"data": {"id": "forty-two", "name": "small"}})

    with pytest.raises(DecodeError) as exc_info:
        packages.read({"id": 42})

    assert "id" in str(exc_info.value)


# ---------------------------------------------------------------------------
# Server builds
# ---------------------------------------------------------------------------

def test_build_resolves_default_os_template(builds, session, respond):
    session.request.side_effect = [
        respond(200, {"data": [{"id": 7, "name": "Ubuntu 22.04"}, {"id": 9, "name": "debian 12"}]}),
        respond(200),
    ]

    record = builds.create({"server_id": 5, "name": "web"})

    assert session.request.call_args_list == [
        call("GET", "operating-systems"),
        call("POST", "servers/5/build", json={"name": "web", "operatingSystemId": 9}),
    ]
    assert record["server_id"] == 5
    assert record["osid"] == 9
    assert record["os_template"] == "Debian 12"
    assert record["vnc"] is False


def test_build_with_osid_skips_lookup(builds, session, respond):
    session.request.return_value = respond(200)

    builds.create({"server_id": 5, "name": "web", "osid": 3, "ssh_keys": [1, 2], "vnc": True})

    session.request.assert_called_once_with(
        "POST", "servers/5/build",
        json={"name": "web", "operatingSystemId": 3, "sshKeys": [1, 2], "vnc": True},
    )


def test_build_unknown_template(builds, session, respond):
    session.request.return_value = respond(200, {"data": [{"id": 7, "name": "Ubuntu 22.04"}]})

    with pytest.raises(ResourceNotFoundError):
        builds.create({"server_id": 5, "name": "web", "os_template": "Plan 9"})

    assert session.request.call_count == 1


def test_build_read_and_delete_target_the_server(builds, session, respond):
    session.request.return_value = respond(404)

    assert builds.read({"server_id": 5, "name": "web"}) is None
    session.request.assert_called_once_with("GET", "servers/5")

    session.request.reset_mock()
    assert builds.delete({"server_id": 5}) is True
    session.request.assert_not_called()


# ---------------------------------------------------------------------------
# SSH keys, network blocks, data source
# ---------------------------------------------------------------------------

def test_ssh_key_lifecycle(ssh_keys, session, respond):
    session.request.return_value = respond(201, {"data": {
        "id": 3, "name": "laptop", "type": "ssh-ed25519", "createdAt": "2024-01-01",
    }})
    created = ssh_keys.create({"user_id": 1, "name": "laptop", "public_key": "ssh-ed25519 AAAA"})

    session.request.assert_called_once_with(
        "POST", "ssh_keys",
        json={"userId": 1, "name": "laptop", "publicKey": "ssh-ed25519 AAAA"},
    )
    assert created["id"] == 3
    assert created["public_key"] == "ssh-ed25519 AAAA"

    session.request.return_value = respond(200, {"data": {
        "id": 3, "name": "laptop", "publicKey": "SHA256:abc", "enabled": True,
    }})
    refreshed = ssh_keys.read(created)
    assert refreshed["public_key_hash"] == "SHA256:abc"
    assert refreshed["public_key"] == "ssh-ed25519 AAAA"

    session.request.reset_mock()
    updated = ssh_keys.update(refreshed, {"public_key": "ssh-rsa BBBB", "name": "desk"})
    session.request.assert_not_called()
    assert updated["public_key"] == "ssh-ed25519 AAAA"
    assert updated["name"] == "laptop"


def test_network_block_create(session, config, respond):
    blocks = configured(NetworkBlockAdapter(), session, config)
    session.request.return_value = respond(201, {"data": {"id": 4, "name": "public", "type": 1}})

    record = blocks.create({"name": "public", "network_type": 1})

    session.request.assert_called_once_with("POST", "network-block", json={"name": "public", "type": 1})
    assert record == {"id": 4, "name": "public", "network_type": 1}


def test_server_data_source(session, config, respond):
    data_source = configured(ServerDataSource(), session, config)
    session.request.return_value = respond(200, {"data": {
        "id": 12,
        "ownerId": 2,
        "uuid": "u-12",
        "buildFailed": False,
        "network": {"interfaces": [{"name": "eth0", "ipv4": [{"address": "10.0.0.5"}]}]},
    }})

    record = data_source.read(12)

    session.request.assert_called_once_with("GET", "servers/12")
    assert record["owner_id"] == 2
    assert record["build_failed"] is False
    assert record["network"]["interfaces"][0]["ipv4"][0]["address"] == "10.0.0.5"


def test_server_data_source_missing_server(session, config, respond):
    data_source = configured(ServerDataSource(), session, config)
    session.request.return_value = respond(404)

    with pytest.raises(ResourceNotFoundError):
        data_source.read(12)

    with pytest.raises(NotImplementedError):
        data_source.delete({"id": 12})
