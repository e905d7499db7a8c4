"""Key, CSR and certificate helpers for the certificate generator."""

import uuid

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from vhost_ssl.lib.config import DistinguishedName


def generate_private_key(key_size: int = 2048) -> RSAPrivateKey:
    """Generate RSA private key with specified size."""
    return rsa.generate_private_key(
        public_exponent=65537,
        key_size=key_size,
    )


def serialize_private_key(key: RSAPrivateKey) -> bytes:
    """Serialize private key to PEM format (PKCS8, no encryption)."""
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def deserialize_private_key(pem_data: bytes) -> RSAPrivateKey:
    """Deserialize private key from PEM bytes."""
    key = serialization.load_pem_private_key(pem_data, password=None)
    if not isinstance(key, RSAPrivateKey):
        raise ValueError("expected RSA private key")
    return key


def serialize_certificate(cert: x509.Certificate) -> bytes:
    """Serialize certificate to PEM format."""
    return cert.public_bytes(serialization.Encoding.PEM)


def deserialize_certificate(pem_data: bytes) -> x509.Certificate:
    """Deserialize certificate from PEM bytes."""
    return x509.load_pem_x509_certificate(pem_data)


def serialize_csr(csr: x509.CertificateSigningRequest) -> bytes:
    """Serialize CSR to PEM format."""
    return csr.public_bytes(serialization.Encoding.PEM)


def deserialize_csr(pem_data: bytes) -> x509.CertificateSigningRequest:
    """Deserialize CSR from PEM bytes."""
    return x509.load_pem_x509_csr(pem_data)


def generate_serial_number() -> int:
    """Generate a random 128-bit certificate serial number from UUID4."""
    return uuid.uuid4().int


def build_csr(
    subject_dn: DistinguishedName,
    private_key: RSAPrivateKey,
    san_names: list[str],
) -> x509.CertificateSigningRequest:
    """Build a server CSR carrying the vhost names as DNS subjectAltNames.

    Args:
        subject_dn: Subject of the request
        private_key: Key the request is signed with
        san_names: DNS names, usually CN first then aliases

    Returns:
        Signed certificate signing request
    """
    builder = x509.CertificateSigningRequestBuilder().subject_name(subject_dn.to_x509_name())
    if san_names:
        builder = builder.add_extension(
            x509.SubjectAlternativeName([x509.DNSName(n) for n in san_names]),
            critical=False,
        )
    return builder.sign(private_key, hashes.SHA256())


def extract_san_names(csr: x509.CertificateSigningRequest) -> list[str]:
    """Return DNS names of the CSR subjectAltName extension, if any."""
    try:
        ext = csr.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound:
        return []
    return ext.value.get_values_for_type(x509.DNSName)


def validate_csr_signature(csr: x509.CertificateSigningRequest) -> bool:
    """Verify CSR self-signature to prove private key possession."""
    return csr.is_signature_valid
