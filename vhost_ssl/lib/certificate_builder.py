"""Certificate builder for self-signed virtual host certificates."""

from datetime import datetime, timedelta, timezone

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from cryptography.x509.oid import ExtendedKeyUsageOID

from vhost_ssl.lib.cert_utils import extract_san_names, generate_serial_number, validate_csr_signature


class CertificateBuilder:
    """Builds X.509 server certificates from virtual host CSRs."""

    @staticmethod
    def build_self_signed_server(
        csr: x509.CertificateSigningRequest,
        private_key: RSAPrivateKey,
        validity_days: int,
    ) -> x509.Certificate:
        """Self-sign a server certificate for the CSR's subject and names.

        The certificate stands in until a CA-issued one is supplied as the
        vhost's cert source.

        Args:
            csr: Request produced for the virtual host
            private_key: Key that signed the CSR, used again to self-sign
            validity_days: Certificate validity period in days

        Returns:
            Self-signed end-entity certificate

        Raises:
            ValueError: If the CSR signature is invalid or validity_days < 1
        """
        if not validate_csr_signature(csr):
            raise ValueError("CSR signature validation failed")
        if validity_days < 1:
            raise ValueError("validity must be at least one day")

        not_before = datetime.now(timezone.utc)
        not_after = not_before + timedelta(days=validity_days)

        builder = (
            x509.CertificateBuilder()
            .subject_name(csr.subject)
            .issuer_name(csr.subject)
            .public_key(private_key.public_key())
            .serial_number(generate_serial_number())
            .not_valid_before(not_before)
            .not_valid_after(not_after)
            .add_extension(
                x509.BasicConstraints(ca=False, path_length=None),
                critical=True,
            )
            .add_extension(
                x509.KeyUsage(
                    digital_signature=True,
                    content_commitment=False,
                    key_encipherment=True,
                    data_encipherment=False,
                    key_agreement=False,
                    key_cert_sign=False,
                    crl_sign=False,
                    encipher_only=False,
                    decipher_only=False,
                ),
                critical=True,
            )
            .add_extension(
                x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]),
                critical=False,
            )
        )

        san_names = extract_san_names(csr)
        if san_names:
            builder = builder.add_extension(
                x509.SubjectAlternativeName([x509.DNSName(n) for n in san_names]),
                critical=False,
            )

        return builder.sign(private_key, hashes.SHA256())
