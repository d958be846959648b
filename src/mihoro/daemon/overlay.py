"""Apply mihoro overrides onto mihomo's downloaded ``config.yaml``.

Rules:

* Fields defined in ``mihoro.toml`` replace the values in ``config.yaml``.
* Optional fields left undefined are removed from ``config.yaml``.
* Keys mihoro does not manage (``proxies``, ``proxy-groups``, ``rules``, ...)
  are kept as they are, in their original order.
"""

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Any

import pydantic
import yaml

from mihoro.config.models import REMOTE_KEYS, DaemonConfigOverrides, RemoteDaemonFields
from mihoro.errors import IoError, ParseError

logger = logging.getLogger(__name__)

# PyYAML resolves plain scalars with YAML 1.1 rules (``on``/``no`` as bools,
# ``1:30`` as base 60). mihomo reads YAML 1.2, so untyped scalars are resolved
# with the 1.2 core schema instead.
_LEGACY_TAGS = {
    "tag:yaml.org,2002:bool",
    "tag:yaml.org,2002:int",
    "tag:yaml.org,2002:float",
    "tag:yaml.org,2002:timestamp",
    "tag:yaml.org,2002:value",
}

_CORE_BOOL = re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$")
_CORE_INT = re.compile(r"^(?:[-+]?[0-9]+|0o[0-7]+|0x[0-9a-fA-F]+)$")
_CORE_FLOAT = re.compile(
    r"^(?:[-+]?(?:\.[0-9]+|[0-9]+(?:\.[0-9]*)?)(?:[eE][-+]?[0-9]+)?"
    r"|[-+]?\.(?:inf|Inf|INF)"
    r"|\.(?:nan|NaN|NAN))$"
)


def _add_core_resolvers(cls) -> None:
    cls.add_implicit_resolver("tag:yaml.org,2002:bool", _CORE_BOOL, list("tTfF"))
    cls.add_implicit_resolver("tag:yaml.org,2002:int", _CORE_INT, list("-+0123456789"))
    cls.add_implicit_resolver("tag:yaml.org,2002:float", _CORE_FLOAT, list("-+0123456789."))


class CoreSchemaLoader(yaml.SafeLoader):
    """SafeLoader that resolves plain scalars with the YAML 1.2 core schema."""

    def construct_core_int(self, node):
        value = self.construct_scalar(node)
        if value.startswith("0o"):
            return int(value[2:], 8)
        if value.startswith("0x"):
            return int(value[2:], 16)
        return int(value)


CoreSchemaLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _LEGACY_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
_add_core_resolvers(CoreSchemaLoader)
CoreSchemaLoader.add_constructor("tag:yaml.org,2002:int", CoreSchemaLoader.construct_core_int)


class CoreSchemaDumper(yaml.SafeDumper):
    """SafeDumper that quotes strings a YAML 1.1 or 1.2 reader would retype."""


_add_core_resolvers(CoreSchemaDumper)


class RemoteDocument:
    """A parsed ``config.yaml``: typed override fields plus everything else.

    Attributes:
        fields: Recognized fields present in the document, keyed by override
            field name (``socks_port``, not ``socks-port``).
        extra: All other top-level keys with their raw values, in document order.
    """

    def __init__(self, fields: dict[str, Any], extra: dict[Any, Any]) -> None:
        self.fields = fields
        self.extra = extra

    @classmethod
    def from_mapping(cls, data: dict[Any, Any]) -> "RemoteDocument":
        remote_to_field = {key: name for name, key in REMOTE_KEYS.items()}
        recognized = {k: v for k, v in data.items() if k in remote_to_field}
        extra = {k: v for k, v in data.items() if k not in remote_to_field}

        try:
            parsed = RemoteDaemonFields.model_validate(recognized)
        except pydantic.ValidationError as e:
            raise ParseError(f"Invalid value for a managed field: {e}") from e

        fields = {
            remote_to_field[key]: getattr(parsed, remote_to_field[key])
            for key in recognized
        }
        return cls(fields, extra)

    def apply(self, overrides: DaemonConfigOverrides) -> None:
        """Set every defined override and drop every undefined one."""
        for name in REMOTE_KEYS:
            value = getattr(overrides, name)
            if value is None:
                self.fields.pop(name, None)
            else:
                self.fields[name] = value

    def to_mapping(self) -> dict[Any, Any]:
        data: dict[Any, Any] = {}
        for name, key in REMOTE_KEYS.items():
            value = self.fields.get(name)
            if value is None:
                continue
            data[key] = value.value if isinstance(value, Enum) else value
        data.update(self.extra)
        return data

    def to_yaml(self) -> str:
        return yaml.dump(
            self.to_mapping(),
            Dumper=CoreSchemaDumper,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )


def load_remote_document(text: str) -> RemoteDocument:
    """Parse ``config.yaml`` text.

    Raises:
        ParseError: On YAML syntax errors, a non-mapping document or a wrong
            type for a managed field.
    """
    try:
        data = yaml.load(text, Loader=CoreSchemaLoader)
    except yaml.YAMLError as e:
        raise ParseError(f"Invalid YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ParseError(
            f"Expected a mapping at the top of config.yaml, got {type(data).__name__}"
        )
    return RemoteDocument.from_mapping(data)


def apply_overrides(path: Path, overrides: DaemonConfigOverrides) -> None:
    """Apply ``overrides`` to the mihomo config at ``path`` in place.

    The new document is fully rendered before the file is opened for
    writing, so parse errors never touch the file on disk.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise IoError(f"Cannot read {path}: {e}") from e

    try:
        document = load_remote_document(text)
    except ParseError as e:
        raise ParseError(f"{path}: {e}") from e.__cause__

    document.apply(overrides)
    rendered = document.to_yaml()

    try:
        path.write_text(rendered, encoding="utf-8")
    except OSError as e:
        raise IoError(f"Cannot write {path}: {e}") from e
    logger.info(f"Applied overrides to {path}")
