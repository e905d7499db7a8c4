"""Fetch file content for resources declared with a source URL.

Supported forms: absolute path, file://, s3://bucket/key, ssm:/parameter/name,
http:// and https://.
"""

import urllib.error
import urllib.parse
import urllib.request
from pathlib import Path

from botocore.exceptions import BotoCoreError, ClientError

from vhost_ssl.lib.errors import SourceError
from vhost_ssl.lib.s3_client import S3Client
from vhost_ssl.lib.ssm_client import SSMClient

HTTP_TIMEOUT_SECONDS = 30


def _read_local(path: str) -> bytes:
    if not Path(path).is_absolute():
        raise SourceError(f"local source must be an absolute path: {path}")
    try:
        return Path(path).read_bytes()
    except FileNotFoundError as e:
        raise SourceError(f"source file not found: {path}") from e


def _read_http(url: str) -> bytes:
    try:
        with urllib.request.urlopen(url, timeout=HTTP_TIMEOUT_SECONDS) as response:
            return response.read()
    except urllib.error.URLError as e:
        raise SourceError(f"failed to fetch {url}: {e}") from e


def fetch_source(url: str, region: str = "eu-west-2") -> bytes:
    """Return the bytes behind a source URL.

    Args:
        url: Source location
        region: AWS region used for s3:// and ssm: sources

    Raises:
        SourceError: If the scheme is unsupported or the fetch fails
    """
    parsed = urllib.parse.urlsplit(url)
    scheme = parsed.scheme.lower()

    if scheme == "":
        return _read_local(url)
    if scheme == "file":
        return _read_local(urllib.parse.unquote(parsed.path))
    if scheme in ("http", "https"):
        return _read_http(url)

    try:
        if scheme == "s3":
            key = parsed.path.lstrip("/")
            if not parsed.netloc or not key:
                raise SourceError(f"s3 source needs bucket and key: {url}")
            return S3Client(region=region).get_object(parsed.netloc, key)
        if scheme == "ssm":
            if not parsed.path.startswith("/"):
                raise SourceError(f"ssm source needs an absolute parameter name: {url}")
            return SSMClient(region=region).get_secure_parameter(parsed.path)
    except (BotoCoreError, ClientError, ValueError) as e:
        raise SourceError(f"failed to fetch {url}: {e}") from e

    raise SourceError(f"unsupported source scheme: {url}")
