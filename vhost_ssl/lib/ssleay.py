"""Read the subset of an OpenSSL request config the generator needs."""

import configparser
from dataclasses import dataclass
from pathlib import Path

from vhost_ssl.lib.config import DistinguishedName

DEFAULT_KEY_SIZE = 2048


@dataclass
class RequestConfig:
    """Key size, subject and DNS names from an ssleay.cnf."""

    key_size: int
    subject: DistinguishedName
    san_names: list[str]


def _alt_names(parser: configparser.ConfigParser, value: str) -> list[str]:
    value = value.strip()
    if value.startswith("@"):
        section = value[1:]
        if not parser.has_section(section):
            raise ValueError(f"missing [{section}] section")
        entries = parser.items(section)
        return [v.strip() for k, v in entries if k.upper().startswith("DNS.")]
    names = []
    for item in value.split(","):
        kind, _, name = item.strip().partition(":")
        if kind.upper() == "DNS" and name:
            names.append(name.strip())
    return names


def parse_request_config(text: str) -> RequestConfig:
    """Parse ssleay.cnf content.

    Raises:
        ValueError: If [req] or its distinguished_name section is missing,
            or the subject lacks a commonName
    """
    parser = configparser.ConfigParser(interpolation=None, comment_prefixes=("#", ";"))
    parser.optionxform = str
    try:
        parser.read_string(text)
    except configparser.Error as e:
        raise ValueError(f"malformed request config: {e}") from e

    if not parser.has_section("req"):
        raise ValueError("missing [req] section")
    req = parser["req"]

    dn_section = req.get("distinguished_name", "req_distinguished_name")
    if not parser.has_section(dn_section):
        raise ValueError(f"missing [{dn_section}] section")
    dn = parser[dn_section]
    if not dn.get("commonName"):
        raise ValueError("subject has no commonName")

    san_names: list[str] = []
    ext_section = req.get("req_extensions")
    if ext_section and parser.has_section(ext_section):
        alt = parser[ext_section].get("subjectAltName")
        if alt:
            san_names = _alt_names(parser, alt)

    return RequestConfig(
        key_size=int(req.get("default_bits", DEFAULT_KEY_SIZE)),
        subject=DistinguishedName(
            country=dn.get("countryName", "??"),
            organization=dn.get("organizationName", ""),
            common_name=dn["commonName"],
        ),
        san_names=san_names,
    )


def read_request_config(path: Path) -> RequestConfig:
    """Parse the ssleay.cnf at ``path``."""
    return parse_request_config(path.read_text())
