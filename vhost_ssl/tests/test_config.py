"""Tests for site configuration and platform dispatch."""

from unittest.mock import patch

import pytest
from cryptography.x509.oid import NameOID

from vhost_ssl.lib.config import (
    FAMILY_IDS,
    PLATFORMS,
    DistinguishedName,
    OSFamily,
    SiteConfig,
    detect_platform,
    os_family,
    platform_for,
)
from vhost_ssl.lib.errors import UnsupportedOSFamilyError


class TestOSFamily:
    """Tests for OS identifier to family mapping."""

    @pytest.mark.parametrize("os_id", ["debian", "ubuntu", "Ubuntu"])
    def test_debian_family(self, os_id: str) -> None:
        assert os_family(os_id) is OSFamily.DEBIAN

    @pytest.mark.parametrize("os_id", ["rhel", "centos", "RedHat", "fedora"])
    def test_redhat_family(self, os_id: str) -> None:
        assert os_family(os_id) is OSFamily.REDHAT

    def test_id_like_fallback(self) -> None:
        assert os_family("linuxmint", ("ubuntu", "debian")) is OSFamily.DEBIAN

    def test_unknown_family_raises(self) -> None:
        with pytest.raises(UnsupportedOSFamilyError, match="gentoo"):
            os_family("gentoo")

    def test_every_family_has_platform_and_ids(self) -> None:
        assert set(PLATFORMS) == set(OSFamily)
        assert set(FAMILY_IDS) == set(OSFamily)


class TestPlatformParams:
    def test_debian_ca_bundle(self) -> None:
        assert platform_for("debian").ca_bundle == "/etc/ssl/certs/ca-certificates.crt"

    def test_redhat_ca_bundle(self) -> None:
        assert platform_for("centos").ca_bundle == "/etc/pki/tls/certs/ca-bundle.crt"

    def test_apache_user_per_family(self) -> None:
        assert platform_for("ubuntu").user == "www-data"
        assert platform_for("rhel").user == "apache"

    def test_detect_platform_reads_os_release(self) -> None:
        release = {"ID": "rocky", "ID_LIKE": "rhel centos fedora"}
        with patch("vhost_ssl.lib.config.platform.freedesktop_os_release", return_value=release):
            assert detect_platform() is PLATFORMS[OSFamily.REDHAT]

    def test_detect_platform_without_os_release(self) -> None:
        with patch("vhost_ssl.lib.config.platform.freedesktop_os_release", side_effect=OSError):
            with pytest.raises(UnsupportedOSFamilyError):
                detect_platform()


class TestSiteConfig:
    def test_defaults(self) -> None:
        config = SiteConfig()

        assert config.country == "??"
        assert config.organisation == "undefined organisation"
        assert config.admin is None
        assert config.cert_generator == "/usr/local/sbin/generate-ssl-cert.sh"

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VHOST_SSL_COUNTRY", "CH")
        monkeypatch.setenv("VHOST_SSL_ORGANISATION", "Example SA")
        monkeypatch.setenv("VHOST_SSL_ADMIN", "admin@example.ch")
        monkeypatch.setenv("VHOST_SSL_KEY_SIZE", "4096")
        monkeypatch.delenv("AWS_REGION", raising=False)

        config = SiteConfig.from_env()

        assert config.country == "CH"
        assert config.organisation == "Example SA"
        assert config.admin == "admin@example.ch"
        assert config.key_size == 4096
        assert config.aws_region == "eu-west-2"


class TestDistinguishedName:
    def test_to_x509_name(self) -> None:
        name = DistinguishedName(country="GB", organization="Test Org", common_name="example.org").to_x509_name()

        assert name.get_attributes_for_oid(NameOID.COMMON_NAME)[0].value == "example.org"
        assert name.get_attributes_for_oid(NameOID.COUNTRY_NAME)[0].value == "GB"
        assert name.get_attributes_for_oid(NameOID.ORGANIZATION_NAME)[0].value == "Test Org"
