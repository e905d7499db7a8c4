"""Site configuration and per-OS-family platform parameters."""

import os
import platform
from dataclasses import dataclass, field
from enum import Enum

from cryptography import x509
from cryptography.x509 import oid

from vhost_ssl.lib.errors import UnsupportedOSFamilyError


@dataclass
class SiteConfig:
    """Site-wide settings shared by every virtual host.

    country and organisation end up in the subject of generated certificates,
    admin is used as ServerAdmin when set.
    """

    country: str = "??"
    organisation: str = "undefined organisation"
    admin: str | None = None
    key_size: int = 2048
    cert_generator: str = "/usr/local/sbin/generate-ssl-cert.sh"
    aws_region: str = "eu-west-2"
    manage_ownership: bool = True

    @classmethod
    def from_env(cls) -> "SiteConfig":
        """Build configuration from VHOST_SSL_* environment variables."""
        defaults = cls()
        return cls(
            country=os.environ.get("VHOST_SSL_COUNTRY", defaults.country),
            organisation=os.environ.get("VHOST_SSL_ORGANISATION", defaults.organisation),
            admin=os.environ.get("VHOST_SSL_ADMIN") or defaults.admin,
            key_size=int(os.environ.get("VHOST_SSL_KEY_SIZE", defaults.key_size)),
            cert_generator=os.environ.get("VHOST_SSL_CERT_GENERATOR", defaults.cert_generator),
            aws_region=os.environ.get("AWS_REGION", defaults.aws_region),
        )


class OSFamily(Enum):
    """OS families with a known Apache layout."""

    DEBIAN = "debian"
    REDHAT = "redhat"


@dataclass(frozen=True)
class PlatformParams:
    """Apache layout for one OS family."""

    user: str
    root: str
    conf_dir: str
    ca_bundle: str
    graceful_command: list[str] = field(default_factory=list)


PLATFORMS: dict[OSFamily, PlatformParams] = {
    OSFamily.DEBIAN: PlatformParams(
        user="www-data",
        root="/var/www",
        conf_dir="/etc/apache2",
        ca_bundle="/etc/ssl/certs/ca-certificates.crt",
        graceful_command=["apache2ctl", "graceful"],
    ),
    OSFamily.REDHAT: PlatformParams(
        user="apache",
        root="/var/www/vhosts",
        conf_dir="/etc/httpd",
        ca_bundle="/etc/pki/tls/certs/ca-bundle.crt",
        graceful_command=["apachectl", "graceful"],
    ),
}

FAMILY_IDS: dict[OSFamily, frozenset[str]] = {
    OSFamily.DEBIAN: frozenset({"debian", "ubuntu"}),
    OSFamily.REDHAT: frozenset({"rhel", "redhat", "centos", "fedora", "rocky", "almalinux"}),
}


def _check_platforms() -> None:
    for table in (PLATFORMS, FAMILY_IDS):
        missing = set(OSFamily) - table.keys()
        if missing:
            raise RuntimeError(f"no platform entry for {sorted(m.value for m in missing)}")


_check_platforms()


def os_family(os_id: str, id_like: tuple[str, ...] = ()) -> OSFamily:
    """Map an os-release ID (falling back to ID_LIKE) to its family.

    Raises:
        UnsupportedOSFamilyError: If neither the ID nor any ID_LIKE entry is known
    """
    for candidate in (os_id, *id_like):
        candidate = candidate.lower()
        for family, ids in FAMILY_IDS.items():
            if candidate in ids:
                return family
    raise UnsupportedOSFamilyError(os_id)


def platform_for(os_id: str, id_like: tuple[str, ...] = ()) -> PlatformParams:
    """Return Apache platform parameters for an OS identifier."""
    return PLATFORMS[os_family(os_id, id_like)]


def detect_platform() -> PlatformParams:
    """Return platform parameters for the running host, from /etc/os-release."""
    try:
        release = platform.freedesktop_os_release()
    except OSError as e:
        raise UnsupportedOSFamilyError("unknown") from e
    return platform_for(release.get("ID", ""), tuple(release.get("ID_LIKE", "").split()))


@dataclass
class DistinguishedName:
    """X.509 subject of a virtual host certificate."""

    country: str
    organization: str
    common_name: str

    def to_x509_name(self) -> x509.Name:
        """Convert to cryptography x509.Name for CSR and certificate generation."""
        return x509.Name(
            [
                x509.NameAttribute(oid.NameOID.COUNTRY_NAME, self.country),
                x509.NameAttribute(oid.NameOID.ORGANIZATION_NAME, self.organization),
                x509.NameAttribute(oid.NameOID.COMMON_NAME, self.common_name),
            ]
        )
