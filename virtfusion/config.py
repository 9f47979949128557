# virtfusion/config.py
import os
from dataclasses import dataclass, field, fields
from typing import Dict, Mapping, Optional

from .exceptions import ConfigurationError

# field name -> (environment variable, hard default)
ENV_FALLBACKS = {
    "endpoint": ("VIRTFUSION_ENDPOINT", None),
    "api_token": ("VIRTFUSION_API_TOKEN", None),
    "default_os_template": ("VIRTFUSION_DEFAULT_OS_TEMPLATE", None),
    "default_package_id": ("VIRTFUSION_DEFAULT_PACKAGE_ID", None),
    "default_ipv4": ("VIRTFUSION_DEFAULT_IPV4", 1),
    "default_private_ipv4": ("VIRTFUSION_DEFAULT_PRIVATE_IPV4", 0),
    "default_hypervisor_group_id": ("VIRTFUSION_DEFAULT_HYPERVISOR_GROUP_ID", None),
    "timeout": ("VIRTFUSION_TIMEOUT", 30),
}

INT_FIELDS = {
    "default_package_id",
    "default_ipv4",
    "default_private_ipv4",
    "default_hypervisor_group_id",
    "timeout",
}


@dataclass(frozen=True)
class ProviderConfig:
    """
    Provider-wide settings shared by every adapter.
    Established once by ResourceManager.configure() and never mutated.
    """
    endpoint: str
    api_token: str = field(repr=False)
    default_os_template: Optional[str] = None
    default_package_id: Optional[int] = None
    default_ipv4: int = 1
    default_private_ipv4: int = 0
    default_hypervisor_group_id: Optional[int] = None
    timeout: int = 30

    @classmethod
    def resolve(cls, values: Mapping = None, environ: Mapping = None) -> "ProviderConfig":
        """
        Build a config from explicit values, falling back to environment
        variables and then to hard defaults. Empty strings count as unset.
        Every problem found is reported in a single ConfigurationError.
        """
        values = dict(values or {})
        environ = os.environ if environ is None else environ

        resolved: Dict[str, object] = {}
        problems = [
            f"Unknown configuration field: {name}"
            for name in sorted(set(values) - {f.name for f in fields(cls)})
        ]

        for name, (env_var, default) in ENV_FALLBACKS.items():
            value = values.get(name)
            source = "configuration"
            if value is None or value == "":
                value = environ.get(env_var)
                source = env_var
            if value is None or value == "":
                resolved[name] = default
                continue

            if name in INT_FIELDS and not isinstance(value, int):
                try:
                    value = int(str(value).strip())
                except ValueError:
                    problems.append(f"{name} from {source} must be an integer, got {value!r}")
                    continue
            resolved[name] = value

        if not resolved.get("api_token"):
            problems.append(
                "Missing API token: set api_token in the provider configuration "
                "or the VIRTFUSION_API_TOKEN environment variable"
            )
        if not resolved.get("endpoint"):
            problems.append(
                "Missing endpoint: set endpoint in the provider configuration "
                "or the VIRTFUSION_ENDPOINT environment variable"
            )

        if problems:
            raise ConfigurationError(problems)

        return cls(**resolved)
