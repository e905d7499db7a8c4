"""Jinja2 renderers for the OpenSSL request config and Apache vhost configs."""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from vhost_ssl.lib.models import ResolvedVhost

_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=select_autoescape([]),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def subject_alt_names(vhost: ResolvedVhost) -> list[str]:
    """Return CN, vhost name and aliases, deduplicated in that order."""
    names = [vhost.commonname, vhost.name, *vhost.aliases]
    return list(dict.fromkeys(names))


def render_ssleay_cnf(vhost: ResolvedVhost, key_size: int = 2048) -> str:
    """Render the OpenSSL request config consumed by the certificate generator."""
    template = _get_env().get_template("ssleay.cnf.j2")
    return template.render(vhost=vhost, key_size=key_size, alt_names=subject_alt_names(vhost))


def render_vhost(vhost: ResolvedVhost) -> str:
    """Render the plain HTTP virtual host."""
    return _get_env().get_template("vhost.conf.j2").render(vhost=vhost)


def render_vhost_ssl(vhost: ResolvedVhost) -> str:
    """Render the SSL virtual host."""
    return _get_env().get_template("vhost-ssl.conf.j2").render(vhost=vhost)


def vhost_config_content(
    vhost: ResolvedVhost, sslonly: bool, config_content: str | None = None
) -> str:
    """Pick the site config body.

    Explicit content wins; otherwise SSL-only, or plain followed by SSL.
    """
    if config_content is not None:
        return config_content
    if sslonly:
        return render_vhost_ssl(vhost)
    return render_vhost(vhost) + render_vhost_ssl(vhost)
