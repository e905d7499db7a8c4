"""Publish (or withdraw) a copy of a virtual host's CSR."""

from pathlib import Path

from vhost_ssl.lib.catalog import Catalog
from vhost_ssl.lib.models import CsrTarget
from vhost_ssl.lib.resources import File


def declare_csr_file(
    catalog: Catalog,
    name: str,
    csr_source: Path,
    target: CsrTarget,
    require: list[str] | None = None,
) -> str:
    """Declare the public CSR file for ``name`` and return its ref.

    The copy is taken from ``csr_source``; ``target`` says whether it exists
    and where.
    """
    return catalog.add(
        File(
            name=f"public CSR file for {name}",
            path=target.path,
            ensure=target.ensure,
            source=str(csr_source),
            mode=0o640,
            require=list(require or []),
        )
    ).ref
