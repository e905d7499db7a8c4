"""SSL virtual host: certificate material, CSR publication and site config."""

from pathlib import Path

from vhost_ssl.lib.catalog import Catalog
from vhost_ssl.lib.config import PlatformParams, SiteConfig
from vhost_ssl.lib.csr_file import declare_csr_file
from vhost_ssl.lib.defaults import resolve
from vhost_ssl.lib.logging_config import LOGGER
from vhost_ssl.lib.models import Ensure, ResolvedVhost, VhostSSLParams
from vhost_ssl.lib.resources import Directory, Exec, File
from vhost_ssl.lib.templates import render_ssleay_cnf, vhost_config_content
from vhost_ssl.lib.vhost import GRACEFUL_REF, declare_vhost


def _cert_file(path: Path, source: str | None, mode: int, require: list[str]) -> File:
    # Without a source the file stays as the generator wrote it.
    return File(
        path=path,
        ensure=Ensure.PRESENT if source else None,
        source=source,
        owner="root",
        mode=mode,
        require=require,
        notify=[GRACEFUL_REF],
    )


def declare_vhost_ssl(
    catalog: Catalog,
    params: VhostSSLParams,
    config: SiteConfig,
    platform: PlatformParams,
) -> ResolvedVhost:
    """Declare every resource of an SSL virtual host.

    The base vhost (document tree, site registration) is delegated to
    declare_vhost. When ensure is present the SSL resources follow, ordered
    ssl dir -> ssleay.cnf -> generator exec -> certificate files -> CSR copy.

    Args:
        catalog: Catalog to declare into
        params: Declared virtual host
        config: Site-wide settings
        platform: Apache layout of the host

    Returns:
        The resolved virtual host
    """
    vhost = resolve(params, config, platform)
    LOGGER.debug("Declaring SSL vhost %s (%s)", vhost.name, vhost.ensure.value)

    content = None
    if not params.config_file:
        content = vhost_config_content(vhost, params.sslonly, params.config_content)

    root = declare_vhost(
        catalog,
        vhost,
        platform,
        config_content=content,
        config_file=params.config_file,
        htdocs=params.htdocs,
        conf=params.conf,
        readme=params.readme,
    )

    if vhost.ensure is not Ensure.PRESENT:
        return vhost

    ssl_dir = catalog.add(
        Directory(path=vhost.ssl_dir, owner="root", group="root", mode=0o700, require=[root])
    ).ref

    cnf = catalog.add(
        File(
            path=vhost.cnf_path,
            content=render_ssleay_cnf(vhost, key_size=config.key_size),
            owner="root",
            mode=0o640,
            require=[ssl_dir],
        )
    ).ref

    generate = catalog.add(
        Exec(
            name=f"generate-ssl-cert-{vhost.name}",
            command=[
                config.cert_generator,
                vhost.name,
                str(vhost.cnf_path),
                f"{vhost.ssl_dir}/",
                str(vhost.days),
            ],
            creates=vhost.csr_path,
            require=[cnf],
            notify=[GRACEFUL_REF],
        )
    ).ref

    material = [
        (vhost.cert_path, vhost.cert_source, 0o640),
        (vhost.key_path, vhost.certkey_source, 0o600),
    ]
    if vhost.cacert_source:
        material.append((vhost.cacert_path, vhost.cacert_source, 0o640))
    if vhost.certchain_path is not None:
        material.append((vhost.certchain_path, vhost.certchain_source, 0o640))

    for path, source, mode in material:
        catalog.add(_cert_file(path, source, mode, [ssl_dir, generate]))

    csr_require = [generate]
    htdocs = f"{Directory.kind}:{vhost.vhost_root / 'htdocs'}"
    if htdocs in catalog:
        csr_require.append(htdocs)
    declare_csr_file(catalog, vhost.name, vhost.csr_path, vhost.csr_target, require=csr_require)

    return vhost
