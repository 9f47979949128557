# virtfusion/adapters/rest_adapter.py
import logging
from typing import Dict, Iterable, Optional

import requests

from ..config import ProviderConfig
from ..exceptions import (
    ConfigurationError,
    DecodeError,
    RecordError,
    ResourceNotFoundError,
    TransportError,
    UnexpectedStatusError,
    ValidationError,
)
from ..fields import ResourceKind

logger = logging.getLogger(__name__)


class ResourceAdapter:
    """
    Generic CRUD adapter for one resource kind.

    Translates records to JSON bodies using the kind's record model and makes
    one HTTP call per operation (plus at most one lookup before create).
    Lifecycle: configure -> create / read / update / delete / import_state.
    """

    def __init__(self, kind: ResourceKind):
        self.kind = kind
        self.session: Optional[requests.Session] = None
        self.config: Optional[ProviderConfig] = None

    @property
    def name(self) -> str:
        return self.kind.name

    def configure(self, session: requests.Session, config: ProviderConfig = None):
        """Bind the authenticated session shared by all adapters"""
        self.session = session
        self.config = config or getattr(session, "config", None)

    # ------------------------------------------------------------------
    # Per-kind hooks
    # ------------------------------------------------------------------

    def apply_defaults(self, record: Dict) -> Dict:
        """Fill local defaults into a create record before validation"""
        return record

    def prepare_create(self, record: Dict) -> Dict:
        """Resolve anything the create body needs from the API"""
        return record

    def collection_path(self, record: Dict) -> str:
        return self.kind.collection_path(record)

    def item_path(self, record: Dict) -> str:
        return self.kind.item_path(record)

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        if self.session is None:
            raise ConfigurationError(
                f"{self.name} adapter is not configured; call configure() first"
            )
        try:
            return self.session.request(method, path, **kwargs)
        except requests.RequestException as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

    def _check_status(self, response: requests.Response, action: str, accepted: Iterable[int]):
        if response.status_code in accepted:
            return

        if response.status_code == 422:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            if isinstance(payload, dict) and "errors" in payload:
                raise ValidationError(
                    f"Failed to {action} {self.name}",
                    payload["errors"],
                    body=response.text,
                )

        raise UnexpectedStatusError(
            f"Failed to {action} {self.name}: {response.status_code} {response.reason} - {response.text}",
            response.status_code,
            response.text,
        )

    def _payload(self, response: requests.Response):
        """Decode a JSON body and unwrap its `data` key"""
        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeError(
                f"Failed to decode {self.name} response: {e}",
                response.status_code,
                response.text,
            ) from e
        if isinstance(payload, dict) and "data" in payload:
            return payload["data"]
        return payload

    def _data(self, response: requests.Response) -> Dict:
        data = self._payload(response)
        if not isinstance(data, dict):
            raise DecodeError(
                f"Expected a JSON object in {self.name} response, got {type(data).__name__}",
                response.status_code,
                response.text,
            )
        return data

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create(self, record: Dict) -> Dict:
        """
        Create the remote object.
        Returns a new record with computed fields filled in from the response.
        """
        record = self.apply_defaults(dict(record))
        self.kind.model.create_body(record)
        record = self.prepare_create(record)
        body = self.kind.model.create_body(record)

        path = self.collection_path(record)
        response = self._request("POST", path, json=body)
        self._check_status(response, "create", self.kind.create_statuses)

        created = self.kind.model.from_response(self._data(response), record)
        if created.get(self.kind.identity) is None:
            raise DecodeError(
                f"{self.name} create response did not include {self.kind.identity}",
                response.status_code,
                response.text,
            )

        logger.info("Created %s %s", self.name, created[self.kind.identity])
        return created

    def read(self, record: Dict) -> Optional[Dict]:
        """
        Refresh a record from the API.
        Returns None when the remote object no longer exists.
        """
        path = self.item_path(record)
        response = self._request("GET", path)

        if response.status_code == 404:
            logger.warning("%s %s no longer exists", self.name, record.get(self.kind.identity))
            return None

        self._check_status(response, "read", (200,))
        return self.kind.model.from_response(self._data(response), record)

    def update(self, prior: Dict, planned: Dict) -> Dict:
        """
        Send changed mutable fields. Changes to immutable fields are dropped
        and the prior value kept; with nothing to send no request is made.
        """
        body, ignored = self.kind.model.update_body(prior, planned)
        if ignored:
            logger.warning(
                "%s %s: ignoring changes to immutable fields %s",
                self.name, prior.get(self.kind.identity), ", ".join(ignored),
            )

        merged = dict(prior)
        for name in self.kind.model.mutable_fields():
            if planned.get(name) is not None:
                merged[name] = planned[name]

        if not body:
            return self.kind.model.from_response({}, merged)

        response = self._request("PUT", self.item_path(prior), json=body)
        self._check_status(response, "update", (200, 204))

        data = self._data(response) if response.status_code == 200 else {}
        updated = self.kind.model.from_response(data, merged)
        logger.info("Updated %s %s", self.name, updated.get(self.kind.identity))
        return updated

    def delete(self, record: Dict) -> bool:
        """Delete the remote object; an already missing object counts as deleted"""
        response = self._request("DELETE", self.item_path(record))

        if response.status_code == 404:
            logger.warning("%s %s was already deleted", self.name, record.get(self.kind.identity))
            return True

        self._check_status(response, "delete", (200, 204))
        logger.info("Deleted %s %s", self.name, record.get(self.kind.identity))
        return True

    def import_state(self, identifier) -> Dict:
        """Seed a record from its numeric id and hydrate it with read()"""
        try:
            identity = int(str(identifier).strip())
        except ValueError:
            raise RecordError(f"{self.name}: import id must be numeric, got {identifier!r}")

        record = self.read({self.kind.identity: identity})
        if record is None:
            raise ResourceNotFoundError(f"{self.name} {identity} not found")
        return record
