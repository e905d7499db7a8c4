#!/usr/bin/env python3
"""Generate key, CSR and self-signed certificate for a virtual host."""

import argparse
import sys
from pathlib import Path

from vhost_ssl.lib.generator import generate_ssl_cert
from vhost_ssl.lib.logging_config import LOGGER


def main(argv: list[str] | None = None) -> int:
    """Run the generator: <name> <ssleay-config-path> <ssl-dir> <days>.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(description="Generate SSL key, CSR and self-signed certificate")
    parser.add_argument("name", help="Virtual host name (file name prefix)")
    parser.add_argument("config", type=Path, help="OpenSSL request config (ssleay.cnf)")
    parser.add_argument("ssl_dir", type=Path, help="Output directory")
    parser.add_argument("days", type=int, help="Certificate validity in days")
    args = parser.parse_args(argv)

    try:
        result = generate_ssl_cert(args.name, args.config, args.ssl_dir, args.days)
        if result.generated:
            LOGGER.info("  Key: %s", result.key_path)
            LOGGER.info("  Cert: %s", result.cert_path)
            LOGGER.info("  CSR: %s", result.csr_path)
        return 0

    except FileNotFoundError as e:
        LOGGER.error("File not found: %s", e)
        return 1
    except Exception as e:
        LOGGER.error("Certificate generation failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
