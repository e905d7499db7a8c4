"""Base Apache virtual host: document tree and site registration."""

from pathlib import Path

from vhost_ssl.lib.catalog import Catalog
from vhost_ssl.lib.config import PlatformParams
from vhost_ssl.lib.models import Ensure, ResolvedVhost
from vhost_ssl.lib.resources import Directory, Exec, File, Link

GRACEFUL = "apache-graceful"
GRACEFUL_REF = f"{Exec.kind}:{GRACEFUL}"


def declare_graceful(catalog: Catalog, platform: PlatformParams) -> str:
    """Declare the shared refresh-only Apache reload and return its ref."""
    return catalog.include(
        Exec(name=GRACEFUL, command=list(platform.graceful_command), refreshonly=True)
    ).ref


def site_paths(vhost: ResolvedVhost, platform: PlatformParams) -> tuple[Path, Path]:
    """Return (sites-available file, sites-enabled link) for a vhost."""
    conf_dir = Path(platform.conf_dir)
    filename = f"{vhost.name}.conf"
    return conf_dir / "sites-available" / filename, conf_dir / "sites-enabled" / filename


def declare_vhost(
    catalog: Catalog,
    vhost: ResolvedVhost,
    platform: PlatformParams,
    config_content: str | None = None,
    config_file: str | None = None,
    htdocs: str | None = None,
    conf: str | None = None,
    readme: str | None = None,
) -> str:
    """Declare the non-SSL part of a virtual host.

    Args:
        catalog: Catalog to declare into
        vhost: Resolved virtual host
        platform: Apache layout of the host
        config_content: Site config body
        config_file: Source URL of the site config, takes precedence over content
        htdocs: Local directory seeding the document root
        conf: Local directory seeding the per-vhost conf directory
        readme: README content placed in the vhost root

    Returns:
        Ref of the vhost root directory
    """
    graceful = declare_graceful(catalog, platform)
    site_file, site_link = site_paths(vhost, platform)

    if vhost.ensure is Ensure.ABSENT:
        link = catalog.add(Link(path=site_link, target=site_file, ensure=Ensure.ABSENT, notify=[graceful]))
        catalog.add(File(path=site_file, ensure=Ensure.ABSENT, require=[link.ref]))
        return catalog.add(
            Directory(path=vhost.vhost_root, ensure=Ensure.ABSENT, force=True, require=[link.ref])
        ).ref

    available = catalog.include(Directory(path=site_file.parent)).ref
    enabled = catalog.include(Directory(path=site_link.parent)).ref

    root = catalog.add(Directory(path=vhost.vhost_root, owner="root", group="root", mode=0o755)).ref

    if vhost.documentroot.parent == vhost.vhost_root:
        catalog.add(
            Directory(
                path=vhost.documentroot,
                owner=vhost.wwwuser,
                group=vhost.group,
                mode=vhost.mode,
                source=htdocs,
                require=[root],
            )
        )

    catalog.add(
        Directory(
            path=vhost.vhost_root / "conf",
            owner=vhost.wwwuser,
            group=vhost.group,
            mode=vhost.mode,
            source=conf,
            require=[root],
            notify=[graceful],
        )
    )
    logs = catalog.add(
        Directory(path=vhost.vhost_root / "logs", owner="root", group="root", mode=0o755, require=[root])
    ).ref

    if vhost.cgipath is not None and vhost.cgipath.parent == vhost.vhost_root:
        catalog.add(
            Directory(path=vhost.cgipath, owner=vhost.wwwuser, group=vhost.group, mode=vhost.mode, require=[root])
        )

    if readme is not None:
        catalog.add(File(path=vhost.vhost_root / "README", content=readme, owner="root", mode=0o644, require=[root]))

    site = catalog.add(
        File(
            path=site_file,
            content=None if config_file else config_content,
            source=config_file or None,
            owner="root",
            group="root",
            mode=0o644,
            require=[available, root, logs],
            notify=[graceful],
        )
    )
    catalog.add(Link(path=site_link, target=site_file, require=[enabled, site.ref], notify=[graceful]))

    return root
