"""Parameter, resolution and result models for vhost provisioning."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class Ensure(Enum):
    """Desired existence state of a resource."""

    PRESENT = "present"
    ABSENT = "absent"


class SettingKind(Enum):
    UNSET = "unset"
    DEFAULT = "default"
    EXPLICIT = "explicit"


@dataclass(frozen=True)
class Setting:
    """Tri-state parameter: not set, computed default, or an explicit value."""

    kind: SettingKind
    value: str | None = None

    @classmethod
    def unset(cls) -> "Setting":
        return cls(SettingKind.UNSET)

    @classmethod
    def default(cls) -> "Setting":
        return cls(SettingKind.DEFAULT)

    @classmethod
    def explicit(cls, value: str) -> "Setting":
        if not value:
            raise ValueError("explicit setting requires a non-empty value")
        return cls(SettingKind.EXPLICIT, value)

    @classmethod
    def from_flag(cls, flag: "Setting | bool | str | None") -> "Setting":
        """Convert a false/true/value flag into a Setting.

        False, None and "" are UNSET, True is DEFAULT, any other string is EXPLICIT.

        Raises:
            TypeError: If flag is of any other type
        """
        if isinstance(flag, Setting):
            return flag
        if flag is None or flag is False or flag == "":
            return cls.unset()
        if flag is True:
            return cls.default()
        if isinstance(flag, str):
            return cls.explicit(flag)
        raise TypeError(f"expected bool, str or None, got {type(flag).__name__}")

    @property
    def is_unset(self) -> bool:
        return self.kind is SettingKind.UNSET

    @property
    def is_default(self) -> bool:
        return self.kind is SettingKind.DEFAULT

    @property
    def is_explicit(self) -> bool:
        return self.kind is SettingKind.EXPLICIT


_TRISTATE_FIELDS = (
    "docroot",
    "cgibin",
    "cert",
    "certkey",
    "cacert",
    "certchain",
    "certcn",
    "publish_csr",
)


@dataclass(frozen=True)
class VhostSSLParams:
    """Declared state of one SSL virtual host.

    Tri-state fields accept a Setting or a plain False/True/str flag.
    """

    name: str
    ensure: Ensure = Ensure.PRESENT
    config_file: str | None = None
    config_content: str | None = None
    aliases: list[str] = field(default_factory=list)
    htdocs: str | None = None
    conf: str | None = None
    readme: str | None = None
    docroot: Setting = field(default_factory=Setting.unset)
    cgibin: Setting = field(default_factory=Setting.default)
    user: str = ""
    group: str = "root"
    mode: int = 0o2570
    ip_address: str = "*"
    cert: Setting = field(default_factory=Setting.unset)
    certkey: Setting = field(default_factory=Setting.unset)
    cacert: Setting = field(default_factory=Setting.unset)
    certchain: Setting = field(default_factory=Setting.unset)
    certcn: Setting = field(default_factory=Setting.unset)
    days: int = 3650
    publish_csr: Setting = field(default_factory=Setting.unset)
    sslonly: bool = False
    ports: list[str] = field(default_factory=lambda: ["*:80"])
    sslports: list[str] = field(default_factory=lambda: ["*:443"])
    accesslog_format: str = "combined"

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("virtual host name must not be empty")
        object.__setattr__(self, "ensure", Ensure(self.ensure))
        for name in _TRISTATE_FIELDS:
            object.__setattr__(self, name, Setting.from_flag(getattr(self, name)))


@dataclass(frozen=True)
class CsrTarget:
    """Where (and whether) the CSR copy is published."""

    ensure: Ensure
    path: Path


@dataclass(frozen=True)
class ResolvedVhost:
    """Concrete values computed from VhostSSLParams, SiteConfig and the platform."""

    name: str
    ensure: Ensure
    wwwroot: Path
    vhost_root: Path
    wwwuser: str
    group: str
    mode: int
    documentroot: Path
    cgipath: Path | None
    admin: str | None
    commonname: str
    country: str
    organisation: str
    aliases: list[str]
    ip_address: str
    ports: list[str]
    sslports: list[str]
    accesslog_format: str
    days: int
    ssl_dir: Path
    cnf_path: Path
    cert_path: Path
    key_path: Path
    csr_path: Path
    cacert_path: Path
    certchain_path: Path | None
    cert_source: str | None
    certkey_source: str | None
    cacert_source: str | None
    certchain_source: str | None
    csr_target: CsrTarget


@dataclass
class RunReport:
    """Outcome of applying a catalog.

    Refs are listed in the order the engine visited them.
    """

    changed: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed and not self.skipped


@dataclass
class GenerationResult:
    """Files written (or found in place) by the certificate generator."""

    key_path: Path
    cert_path: Path
    csr_path: Path
    generated: bool
