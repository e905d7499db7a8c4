"""Generate key, CSR and self-signed certificate for a virtual host."""

import os
from pathlib import Path

from vhost_ssl.lib.cert_utils import (
    build_csr,
    deserialize_private_key,
    generate_private_key,
    serialize_certificate,
    serialize_csr,
    serialize_private_key,
)
from vhost_ssl.lib.certificate_builder import CertificateBuilder
from vhost_ssl.lib.logging_config import LOGGER
from vhost_ssl.lib.models import GenerationResult
from vhost_ssl.lib.ssleay import read_request_config


def _write_private(path: Path, data: bytes) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "wb") as out:
        out.write(data)


def generate_ssl_cert(name: str, cnf_path: Path, ssl_dir: Path, days: int) -> GenerationResult:
    """Create ``<name>.key``, ``<name>.crt`` and ``<name>.csr`` in ssl_dir.

    The CSR is written last and marks completion: when it exists nothing is
    done. An existing key or certificate is never overwritten.

    Args:
        name: Virtual host name, used for file names
        cnf_path: OpenSSL request config (subject, SANs, key size)
        ssl_dir: Output directory
        days: Validity of the self-signed certificate

    Returns:
        GenerationResult with the three paths and whether anything was generated

    Raises:
        FileNotFoundError: If ssl_dir or cnf_path is missing
        ValueError: If the request config is invalid
    """
    key_path = ssl_dir / f"{name}.key"
    cert_path = ssl_dir / f"{name}.crt"
    csr_path = ssl_dir / f"{name}.csr"

    if csr_path.exists():
        LOGGER.info("CSR already present for %s, nothing to do", name)
        return GenerationResult(key_path=key_path, cert_path=cert_path, csr_path=csr_path, generated=False)

    if not ssl_dir.is_dir():
        raise FileNotFoundError(f"output directory not found: {ssl_dir}")
    request = read_request_config(cnf_path)

    if key_path.exists():
        LOGGER.info("Reusing existing key %s", key_path)
        key = deserialize_private_key(key_path.read_bytes())
    else:
        key = generate_private_key(request.key_size)
        _write_private(key_path, serialize_private_key(key))

    csr = build_csr(request.subject, key, request.san_names)

    if not cert_path.exists():
        cert = CertificateBuilder.build_self_signed_server(csr, key, days)
        cert_path.write_bytes(serialize_certificate(cert))

    csr_path.write_bytes(serialize_csr(csr))
    LOGGER.info("Generated key, certificate and CSR for %s", name)

    return GenerationResult(key_path=key_path, cert_path=cert_path, csr_path=csr_path, generated=True)
