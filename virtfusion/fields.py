# virtfusion/fields.py
"""
Pydantic building blocks for resource records.

A record is a plain dict keyed by field name. A key that is missing or set
to None means "unset": unset inputs are never sent, so the server applies
its own default instead of a zero value.

Every model field is declared through `required`, `optional` or `computed`.
The field's serialization alias is the JSON key sent on create/update, its
validation alias is where the response `data` object holds it (a dotted
path such as "settings.resources.memory" becomes an AliasPath), and its
default is the value the server reports when the field was omitted.
"""
from dataclasses import dataclass
from typing import ClassVar, Dict, List, Optional, Set, Tuple, Type

import pydantic
from pydantic import AliasPath, BaseModel, ConfigDict, Field

from .exceptions import DecodeError, RecordError

REQUIRED = "required"
OPTIONAL = "optional"
COMPUTED = "computed"


def _field(role, default=None, key=None, response=None, immutable=False, send=True, read=True):
    options = {}
    if key and send:
        options["serialization_alias"] = key
    if read:
        response = response or key
        if response and "." in response:
            options["validation_alias"] = AliasPath(*response.split("."))
        elif response:
            options["validation_alias"] = response
    return Field(
        default,
        json_schema_extra={
            "role": role,
            "immutable": immutable,
            "send": send and role != COMPUTED,
            "read": read,
        },
        **options,
    )


def required(key=None, response=None, immutable=False, send=True, read=True):
    return _field(REQUIRED, None, key, response, immutable, send, read)


def optional(default=None, key=None, response=None, immutable=False, send=True, read=True):
    return _field(OPTIONAL, default, key, response, immutable, send, read)


def computed(response=None):
    return _field(COMPUTED, response=response, send=False)


def _describe(error) -> str:
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}"


class ResourceRecord(BaseModel):
    """
    Base model for one resource kind.

    Input records are validated strictly (no "2" for 2, no True for 1).
    Responses are validated leniently, then merged into the record they answer.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    kind_name: ClassVar[str] = "record"

    @classmethod
    def field_options(cls, name: str) -> Dict:
        return cls.model_fields[name].json_schema_extra or {}

    @classmethod
    def _names(cls, option: str, value=True) -> Set[str]:
        return {name for name in cls.model_fields if cls.field_options(name)[option] == value}

    @classmethod
    def mutable_fields(cls) -> List[str]:
        return [
            name for name in cls.model_fields
            if cls.field_options(name)["role"] != COMPUTED and not cls.field_options(name)["immutable"]
        ]

    @classmethod
    def _validate_input(cls, record: Dict, problems: List[str]) -> Optional["ResourceRecord"]:
        unknown = set(record) - set(cls.model_fields)
        if unknown:
            problems.append(f"unknown fields {sorted(unknown)}")

        values = {k: v for k, v in record.items() if v is not None and k in cls.model_fields}
        try:
            return cls.model_validate(values, strict=True)
        except pydantic.ValidationError as e:
            problems.extend(_describe(error) for error in e.errors())
            return None

    @classmethod
    def create_body(cls, record: Dict) -> Dict:
        """Validate an input record and build the create body from its set fields."""
        problems = []
        for name in cls.model_fields:
            role = cls.field_options(name)["role"]
            if role == REQUIRED and record.get(name) is None:
                problems.append(f"{name} is required")
            elif role == COMPUTED and record.get(name) is not None:
                problems.append(f"{name} is computed and cannot be set")

        model = cls._validate_input(record, problems)
        if problems:
            raise RecordError(f"{cls.kind_name}: " + "; ".join(problems))
        return model.model_dump(by_alias=True, exclude_unset=True, include=cls._names("send"))

    @classmethod
    def update_body(cls, prior: Dict, planned: Dict) -> Tuple[Dict, List[str]]:
        """
        Return the update body of changed mutable fields, plus the names of
        changed immutable fields, which are left out of the body.
        """
        problems = []
        model = cls._validate_input(planned, problems)
        if problems:
            raise RecordError(f"{cls.kind_name}: " + "; ".join(problems))

        changed = set()
        ignored = []
        for name in cls.model_fields:
            options = cls.field_options(name)
            if options["role"] == COMPUTED or name not in model.model_fields_set:
                continue
            if getattr(model, name) == prior.get(name):
                continue
            if options["immutable"]:
                ignored.append(name)
            elif options["send"]:
                changed.add(name)

        if not changed:
            return {}, ignored
        return model.model_dump(by_alias=True, include=changed), ignored

    @classmethod
    def from_response(cls, data: Dict, record: Dict) -> Dict:
        """Merge a response `data` object into a copy of record."""
        write_only = cls._names("read", False)
        try:
            parsed = cls.model_validate({k: v for k, v in data.items() if k not in write_only})
        except pydantic.ValidationError as e:
            raise DecodeError(
                f"{cls.kind_name} response did not match: "
                + "; ".join(_describe(error) for error in e.errors())
            ) from e

        decoded = {}
        for name, info in cls.model_fields.items():
            value = getattr(parsed, name) if name in parsed.model_fields_set else None
            if value is None:
                value = record.get(name)
            if value is None:
                value = info.default
            decoded[name] = value
        return decoded


@dataclass(frozen=True)
class ResourceKind:
    """
    One resource kind: its record model, collection path and identity field.
    The collection path may reference record fields, e.g. "servers/{server_id}/build".
    """
    model: Type[ResourceRecord]
    collection: str
    identity: str = "id"
    create_statuses: Tuple[int, ...] = (200, 201)

    @property
    def name(self) -> str:
        return self.model.kind_name

    def collection_path(self, record: Dict) -> str:
        try:
            return self.collection.format(**record)
        except KeyError as e:
            raise RecordError(f"{self.name}: {e.args[0]} is required to build the request path")

    def item_path(self, record: Dict) -> str:
        identifier = record.get(self.identity)
        if identifier is None:
            raise RecordError(f"{self.name}: record has no {self.identity}")
        return f"{self.collection_path(record)}/{identifier}"
