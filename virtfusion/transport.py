# virtfusion/transport.py
import logging
import posixpath
from urllib.parse import urlsplit, urlunsplit

import requests

from .config import ProviderConfig

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


class AuthenticatedSession(requests.Session):
    """
    requests.Session that targets the configured VirtFusion endpoint.

    Every request has its scheme and host rewritten to the endpoint, its path
    joined under /api/v1 and a bearer token attached. Callers pass collection
    paths such as "servers" or "/ssh_keys/7". No retries are made.
    """

    def __init__(self, config: ProviderConfig):
        super().__init__()
        self.config = config
        self.scheme, self.host = self._split_endpoint(config.endpoint)
        self.headers.update({
            "Authorization": f"Bearer {config.api_token}",
            "Content-Type": "application/json",
            "Accept": "application/json"
        })

    @staticmethod
    def _split_endpoint(endpoint: str):
        endpoint = endpoint.strip()
        if "://" not in endpoint:
            # bare host, e.g. "cp.example.com"
            return "https", endpoint.strip("/")
        parts = urlsplit(endpoint)
        return parts.scheme, parts.netloc

    def build_url(self, url: str) -> str:
        parts = urlsplit(url)
        path = posixpath.join(API_PREFIX, parts.path.lstrip("/"))
        return urlunsplit((self.scheme, self.host, path.rstrip("/"), parts.query, ""))

    def request(self, method, url, *args, **kwargs):
        full_url = self.build_url(url)
        kwargs.setdefault("timeout", self.config.timeout)

        logger.debug("%s %s", method.upper(), full_url)
        response = super().request(method, full_url, *args, **kwargs)
        logger.debug("%s %s -> %s", method.upper(), full_url, response.status_code)
        return response
