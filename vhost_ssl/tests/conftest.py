"""Test fixtures for vhost_ssl tests."""

import dataclasses
import os
import sys
from pathlib import Path

import pytest

from vhost_ssl.lib.catalog import Catalog
from vhost_ssl.lib.config import PLATFORMS, OSFamily, PlatformParams, SiteConfig
from vhost_ssl.lib.resources import ApplyContext

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _write_script(path: Path, body: str) -> Path:
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(0o755)
    return path


@pytest.fixture
def www_root(tmp_path: Path) -> Path:
    """Return an existing directory standing in for /var/www."""
    root = tmp_path / "www"
    root.mkdir()
    return root


@pytest.fixture
def conf_dir(tmp_path: Path) -> Path:
    """Return an existing directory standing in for /etc/apache2."""
    conf = tmp_path / "apache2"
    conf.mkdir()
    return conf


@pytest.fixture
def graceful_log(tmp_path: Path) -> Path:
    """Return the file the fake graceful command appends to."""
    return tmp_path / "graceful.log"


@pytest.fixture
def platform(www_root: Path, conf_dir: Path, graceful_log: Path, tmp_path: Path) -> PlatformParams:
    """Return Debian platform parameters rooted in the test directory."""
    graceful = _write_script(tmp_path / "graceful.sh", f'echo graceful >> "{graceful_log}"\n')
    return dataclasses.replace(
        PLATFORMS[OSFamily.DEBIAN],
        root=str(www_root),
        conf_dir=str(conf_dir),
        graceful_command=[str(graceful)],
    )


@pytest.fixture
def generator_log(tmp_path: Path) -> Path:
    """Return the file the fake generator appends its arguments to."""
    return tmp_path / "generator.log"


@pytest.fixture
def fake_generator(tmp_path: Path, generator_log: Path) -> Path:
    """Return a generator script that records calls and touches its outputs."""
    return _write_script(
        tmp_path / "fake-generate-ssl-cert.sh",
        f'echo "$@" >> "{generator_log}"\n'
        'printf key > "$3/$1.key"\n'
        'printf crt > "$3/$1.crt"\n'
        'printf csr > "$3/$1.csr"\n',
    )


@pytest.fixture
def real_generator(tmp_path: Path) -> Path:
    """Return a wrapper running the bundled Python generator."""
    pythonpath = os.pathsep.join([str(PROJECT_ROOT), os.environ.get("PYTHONPATH", "")])
    return _write_script(
        tmp_path / "generate-ssl-cert",
        f'PYTHONPATH="{pythonpath}" exec "{sys.executable}" -m vhost_ssl.scripts.generate_ssl_cert "$@"\n',
    )


@pytest.fixture
def site_config(fake_generator: Path) -> SiteConfig:
    """Return test site configuration using the fake generator."""
    return SiteConfig(
        country="GB",
        organisation="Test Org",
        admin="webmaster@example.org",
        key_size=2048,
        cert_generator=str(fake_generator),
        manage_ownership=False,
    )


@pytest.fixture
def context() -> ApplyContext:
    """Return an apply context that leaves ownership alone."""
    return ApplyContext(manage_ownership=False)


@pytest.fixture
def catalog() -> Catalog:
    """Return an empty catalog."""
    return Catalog()
