"""Resolve virtual host parameters into concrete paths and values."""

from pathlib import Path

from vhost_ssl.lib.config import PlatformParams, SiteConfig
from vhost_ssl.lib.models import CsrTarget, Ensure, ResolvedVhost, Setting, VhostSSLParams


def _source(setting: Setting) -> str | None:
    return setting.value if setting.is_explicit else None


def resolve_csr_target(publish: Setting, name: str, vhost_root: Path) -> CsrTarget:
    """Decide whether and where the CSR copy is published.

    UNSET removes the copy at the default htdocs location, DEFAULT publishes
    it there, EXPLICIT publishes it at the given path.
    """
    default_path = vhost_root / "htdocs" / f"{name}.csr"
    if publish.is_unset:
        return CsrTarget(ensure=Ensure.ABSENT, path=default_path)
    if publish.is_default:
        return CsrTarget(ensure=Ensure.PRESENT, path=default_path)
    return CsrTarget(ensure=Ensure.PRESENT, path=Path(publish.value))


def resolve(params: VhostSSLParams, config: SiteConfig, platform: PlatformParams) -> ResolvedVhost:
    """Apply the default rules to a virtual host declaration.

    Args:
        params: Declared virtual host
        config: Site-wide settings (certificate subject, admin)
        platform: Apache layout of the host OS family

    Returns:
        ResolvedVhost with every path the declarations need
    """
    name = params.name
    wwwroot = Path(platform.root)
    vhost_root = wwwroot / name
    ssl_dir = vhost_root / "ssl"

    if params.docroot.is_explicit:
        documentroot = Path(params.docroot.value)
    else:
        documentroot = vhost_root / "htdocs"

    if params.cgibin.is_unset:
        cgipath = None
    elif params.cgibin.is_default:
        cgipath = vhost_root / "cgi-bin"
    else:
        cgipath = Path(params.cgibin.value)

    if params.cacert.is_explicit:
        cacert_path = ssl_dir / "cacert.crt"
    else:
        cacert_path = Path(platform.ca_bundle)

    certchain_path = ssl_dir / "certchain.crt" if params.certchain.is_explicit else None

    return ResolvedVhost(
        name=name,
        ensure=params.ensure,
        wwwroot=wwwroot,
        vhost_root=vhost_root,
        wwwuser=params.user or platform.user,
        group=params.group,
        mode=params.mode,
        documentroot=documentroot,
        cgipath=cgipath,
        admin=config.admin,
        commonname=params.certcn.value if params.certcn.is_explicit else name,
        country=config.country,
        organisation=config.organisation,
        aliases=list(params.aliases),
        ip_address=params.ip_address,
        ports=list(params.ports),
        sslports=list(params.sslports),
        accesslog_format=params.accesslog_format,
        days=params.days,
        ssl_dir=ssl_dir,
        cnf_path=ssl_dir / "ssleay.cnf",
        cert_path=ssl_dir / f"{name}.crt",
        key_path=ssl_dir / f"{name}.key",
        csr_path=ssl_dir / f"{name}.csr",
        cacert_path=cacert_path,
        certchain_path=certchain_path,
        cert_source=_source(params.cert),
        certkey_source=_source(params.certkey),
        cacert_source=_source(params.cacert),
        certchain_source=_source(params.certchain),
        csr_target=resolve_csr_target(params.publish_csr, name, vhost_root),
    )
