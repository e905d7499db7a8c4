"""Tests for the command line entry points."""

from pathlib import Path
from unittest.mock import patch

import pytest

from vhost_ssl.scripts import generate_ssl_cert, provision_vhost

CNF = """\
[req]
distinguished_name = dn
prompt = no

[dn]
countryName = GB
organizationName = Test Org
commonName = example.org
"""


class TestGenerateSslCertMain:
    def test_success(self, tmp_path: Path) -> None:
        cnf = tmp_path / "ssleay.cnf"
        cnf.write_text(CNF)
        ssl_dir = tmp_path / "ssl"
        ssl_dir.mkdir()

        assert generate_ssl_cert.main(["example.org", str(cnf), f"{ssl_dir}/", "30"]) == 0
        assert (ssl_dir / "example.org.csr").exists()

    def test_missing_config(self, tmp_path: Path) -> None:
        assert generate_ssl_cert.main(["example.org", str(tmp_path / "nope.cnf"), str(tmp_path), "30"]) == 1

    def test_invalid_config(self, tmp_path: Path) -> None:
        cnf = tmp_path / "ssleay.cnf"
        cnf.write_text("[req]\n")

        assert generate_ssl_cert.main(["example.org", str(cnf), str(tmp_path), "30"]) == 1


class TestProvisionVhostMain:
    @pytest.fixture
    def argv(self, www_root: Path, conf_dir: Path, fake_generator: Path, monkeypatch: pytest.MonkeyPatch) -> list[str]:
        monkeypatch.setenv("VHOST_SSL_CERT_GENERATOR", str(fake_generator))
        return ["--os-id", "debian", "--root", str(www_root), "--conf-dir", str(conf_dir), "--no-ownership"]

    def test_parser_publish_csr_forms(self) -> None:
        parser = provision_vhost.build_parser()

        assert parser.parse_args(["x"]).publish_csr is False
        assert parser.parse_args(["x", "--publish-csr"]).publish_csr is True
        assert parser.parse_args(["x", "--publish-csr", "/tmp/x.csr"]).publish_csr == "/tmp/x.csr"

    def test_noop_changes_nothing(self, argv: list[str], www_root: Path) -> None:
        assert provision_vhost.main(["example.org", "--noop", *argv]) == 0
        assert not (www_root / "example.org").exists()

    def test_noop_with_publish_csr(self, argv: list[str], www_root: Path) -> None:
        assert provision_vhost.main(["example.org", "--noop", "--publish-csr", *argv]) == 0
        assert not (www_root / "example.org").exists()

    def test_unexpected_error_exits_nonzero(self, argv: list[str]) -> None:
        with patch("vhost_ssl.scripts.provision_vhost.declare_vhost_ssl", side_effect=RuntimeError("boom")):
            assert provision_vhost.main(["example.org", *argv]) == 1

    def test_unsupported_os(self, argv: list[str]) -> None:
        argv[argv.index("debian")] = "plan9"

        assert provision_vhost.main(["example.org", *argv]) == 1

    def test_failed_resources_exit_nonzero(
        self, argv: list[str], tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("VHOST_SSL_CERT_GENERATOR", str(tmp_path / "missing-generator"))

        assert provision_vhost.main(["example.org", *argv]) == 1
