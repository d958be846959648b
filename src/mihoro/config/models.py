"""Pydantic models for mihoro settings and the mihomo fields it overrides."""

from enum import Enum
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    create_model,
)

DAEMON_NAME = "mihomo"


class _WireEnum(str, Enum):
    """String enum with an explicit lookup table for the wire value."""

    @classmethod
    def lookup(cls, raw: Any) -> "_WireEnum":
        """Return the member for ``raw``.

        Accepts the lowercase wire value and its capitalized spelling
        (``rule`` / ``Rule``), which upstream configs use interchangeably.

        Raises:
            ValueError: If ``raw`` names no member.
        """
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            member = cls._table().get(raw)
            if member is not None:
                return member
        allowed = ", ".join(m.value for m in cls)
        raise ValueError(f"unknown {cls.__name__} {raw!r}, expected one of: {allowed}")

    @classmethod
    def _table(cls) -> dict[str, "_WireEnum"]:
        table: dict[str, _WireEnum] = {}
        for member in cls:
            table[member.value] = member
            table[member.value.capitalize()] = member
        return table


class Mode(_WireEnum):
    """mihomo routing mode."""

    GLOBAL = "global"
    RULE = "rule"
    DIRECT = "direct"


class LogLevel(_WireEnum):
    """mihomo log level."""

    SILENT = "silent"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    DEBUG = "debug"


Port = Annotated[StrictInt, Field(ge=0, le=65535)]
ModeField = Annotated[Mode, BeforeValidator(Mode.lookup)]
LogLevelField = Annotated[LogLevel, BeforeValidator(LogLevel.lookup)]


class DaemonConfigOverrides(BaseModel):
    """Subset of mihomo's ``config.yaml`` managed by mihoro.

    Optional fields left as ``None`` are removed from the daemon config when
    overrides are applied.

    Reference: https://wiki.metacubex.one/config/general/
    """

    model_config = ConfigDict(frozen=True)

    port: Port
    socks_port: Port
    allow_lan: StrictBool | None = None
    bind_address: StrictStr | None = None
    mode: ModeField
    log_level: LogLevelField
    ipv6: StrictBool | None = None
    external_controller: StrictStr | None = None
    external_ui: StrictStr | None = None
    secret: StrictStr | None = None


class Settings(BaseModel):
    """mihoro's own settings, read from ``mihoro.toml``."""

    model_config = ConfigDict(frozen=True)

    remote_binary_url: StrictStr = ""
    remote_config_url: StrictStr = ""
    binary_path: StrictStr = ""
    config_root: StrictStr = ""
    service_unit_root: StrictStr = ""
    daemon_config: DaemonConfigOverrides


def remote_key(field_name: str) -> str:
    """Return the key mihomo's config.yaml uses for an override field."""
    return field_name.replace("_", "-")


def _remote_fields_model() -> type[BaseModel]:
    # Same field types as DaemonConfigOverrides, all optional and keyed by
    # the hyphenated names mihomo uses.
    hints = DaemonConfigOverrides.__annotations__
    fields: dict[str, Any] = {
        name: (hints[name] | None, None)
        for name in DaemonConfigOverrides.model_fields
    }
    return create_model(
        "RemoteDaemonFields",
        __config__=ConfigDict(alias_generator=remote_key, populate_by_name=True),
        **fields,
    )


RemoteDaemonFields = _remote_fields_model()

#: Override field name -> config.yaml key, in schema order.
REMOTE_KEYS: dict[str, str] = {
    name: remote_key(name) for name in DaemonConfigOverrides.model_fields
}


def default_settings() -> Settings:
    """Settings written to disk on first run.

    Both URLs are left empty so the scaffold fails validation until edited.
    """
    return Settings(
        remote_binary_url="",
        remote_config_url="",
        binary_path=f"~/.local/bin/{DAEMON_NAME}",
        config_root=f"~/.config/{DAEMON_NAME}",
        service_unit_root="~/.config/systemd/user",
        daemon_config=DaemonConfigOverrides(
            port=7890,
            socks_port=7891,
            allow_lan=False,
            bind_address="*",
            mode=Mode.RULE,
            log_level=LogLevel.INFO,
            ipv6=True,
            external_controller="0.0.0.0:9090",
            external_ui="ui",
            secret=None,
        ),
    )
