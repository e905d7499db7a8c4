#!/usr/bin/env python3
"""Converge an SSL-enabled Apache virtual host."""

import argparse
import dataclasses
import sys

from vhost_ssl.lib.catalog import Catalog
from vhost_ssl.lib.config import SiteConfig, detect_platform, platform_for
from vhost_ssl.lib.errors import VhostSSLError
from vhost_ssl.lib.logging_config import LOGGER
from vhost_ssl.lib.models import Ensure, VhostSSLParams
from vhost_ssl.lib.resources import ApplyContext
from vhost_ssl.lib.vhost_ssl import declare_vhost_ssl


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Provision an SSL virtual host")
    parser.add_argument("name", help="Virtual host name (also the certificate CN)")
    parser.add_argument("--absent", action="store_true", help="Remove the virtual host")
    parser.add_argument("--alias", dest="aliases", action="append", default=[], help="ServerAlias / SAN")
    parser.add_argument("--docroot", help="Document root (default: <root>/<name>/htdocs)")
    parser.add_argument("--cgibin", help="cgi-bin directory (default: <root>/<name>/cgi-bin)")
    parser.add_argument("--no-cgibin", action="store_true", help="Disable cgi-bin")
    parser.add_argument("--user", default="", help="Owner of the document root")
    parser.add_argument("--group", default="root", help="Group of the document root")
    parser.add_argument("--ip-address", default="*", help="Address to bind bare ports to")
    parser.add_argument("--port", dest="ports", action="append", help="Plain HTTP binding (default: *:80)")
    parser.add_argument("--sslport", dest="sslports", action="append", help="SSL binding (default: *:443)")
    parser.add_argument("--cert", help="Certificate source URL")
    parser.add_argument("--certkey", help="Private key source URL")
    parser.add_argument("--cacert", help="CA certificate source URL")
    parser.add_argument("--certchain", help="Certificate chain source URL")
    parser.add_argument("--certcn", help="Certificate common name (default: name)")
    parser.add_argument("--days", type=int, default=3650, help="Validity of generated certificates")
    parser.add_argument(
        "--publish-csr",
        nargs="?",
        const=True,
        default=False,
        metavar="PATH",
        help="Publish the CSR in htdocs, or at PATH",
    )
    parser.add_argument("--sslonly", action="store_true", help="Serve the site over SSL only")
    parser.add_argument("--config-file", help="Site config source URL, replaces the templates")
    parser.add_argument("--readme", help="README content for the vhost root")
    parser.add_argument("--os-id", help="os-release ID to use instead of detecting it")
    parser.add_argument("--root", help="Override the www root of the platform")
    parser.add_argument("--conf-dir", help="Override the Apache config directory of the platform")
    parser.add_argument("--noop", action="store_true", help="Report changes without applying them")
    parser.add_argument("--no-ownership", action="store_true", help="Do not manage file ownership")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Declare and apply the virtual host.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = build_parser().parse_args(argv)

    try:
        config = SiteConfig.from_env()
        platform = platform_for(args.os_id) if args.os_id else detect_platform()
        overrides = {k: v for k, v in (("root", args.root), ("conf_dir", args.conf_dir)) if v}
        if overrides:
            platform = dataclasses.replace(platform, **overrides)

        params = VhostSSLParams(
            name=args.name,
            ensure=Ensure.ABSENT if args.absent else Ensure.PRESENT,
            aliases=args.aliases,
            docroot=args.docroot or False,
            cgibin=False if args.no_cgibin else (args.cgibin or True),
            user=args.user,
            group=args.group,
            ip_address=args.ip_address,
            ports=args.ports or ["*:80"],
            sslports=args.sslports or ["*:443"],
            cert=args.cert or False,
            certkey=args.certkey or False,
            cacert=args.cacert or False,
            certchain=args.certchain or False,
            certcn=args.certcn or False,
            days=args.days,
            publish_csr=args.publish_csr,
            sslonly=args.sslonly,
            config_file=args.config_file,
            readme=args.readme,
        )

        catalog = Catalog()
        declare_vhost_ssl(catalog, params, config, platform)
        LOGGER.info("Declared %d resources for %s", len(catalog), args.name)

        context = ApplyContext(
            noop=args.noop,
            manage_ownership=config.manage_ownership and not args.no_ownership,
            aws_region=config.aws_region,
        )
        report = catalog.apply(context)

    except (VhostSSLError, ValueError) as e:
        LOGGER.error("Cannot provision %s: %s", args.name, e)
        return 1
    except Exception as e:
        LOGGER.error("Provisioning %s failed: %s", args.name, e)
        return 1

    for ref, message in report.failed.items():
        LOGGER.error("  %s: %s", ref, message)
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
