"""Filesystem and command resources converged by the catalog engine.

Each resource compares the host against its declared state in ``apply`` and
returns True when it changed something (or, in noop mode, would have).
"""

import grp
import os
import pwd
import shutil
import stat
import subprocess
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

from vhost_ssl.lib.errors import ResourceError
from vhost_ssl.lib.logging_config import LOGGER
from vhost_ssl.lib.models import Ensure
from vhost_ssl.lib.sources import fetch_source


@dataclass
class ApplyContext:
    """Run-wide switches passed to every resource."""

    noop: bool = False
    manage_ownership: bool = True
    aws_region: str = "eu-west-2"


def _set_mode(path: Path, mode: int | None, context: ApplyContext) -> bool:
    if mode is None:
        return False
    current = stat.S_IMODE(path.lstat().st_mode)
    if current == mode:
        return False
    if not context.noop:
        os.chmod(path, mode)
    LOGGER.info("Mode of %s changed %o -> %o", path, current, mode)
    return True


def _set_owner(path: Path, owner: str | None, group: str | None, context: ApplyContext) -> bool:
    if not context.manage_ownership or (owner is None and group is None):
        return False
    st = path.lstat()
    uid = pwd.getpwnam(owner).pw_uid if owner is not None else st.st_uid
    gid = grp.getgrnam(group).gr_gid if group is not None else st.st_gid
    if (st.st_uid, st.st_gid) == (uid, gid):
        return False
    if not context.noop:
        os.chown(path, uid, gid)
    LOGGER.info("Ownership of %s changed to %s:%s", path, owner, group)
    return True


@dataclass(kw_only=True)
class Resource(ABC):
    """Base resource: identity plus require/notify edges."""

    kind: ClassVar[str] = "resource"

    require: list[str] = field(default_factory=list)
    notify: list[str] = field(default_factory=list)

    @property
    @abstractmethod
    def title(self) -> str: ...

    @property
    def ref(self) -> str:
        return f"{self.kind}:{self.title}"

    @abstractmethod
    def apply(self, context: ApplyContext) -> bool: ...

    def refresh(self, context: ApplyContext) -> bool:
        """React to a notification from a changed resource."""
        return False


def _sync_tree(source: Path, target: Path, context: ApplyContext) -> bool:
    """Copy files from a local source tree whose content differs in target."""
    if not source.is_dir():
        raise ResourceError(f"source directory not found: {source}")
    changed = False
    for src in sorted(source.rglob("*")):
        dst = target / src.relative_to(source)
        if src.is_dir():
            if not dst.is_dir():
                if not context.noop:
                    dst.mkdir()
                changed = True
        elif not dst.exists() or dst.read_bytes() != src.read_bytes():
            if not context.noop:
                shutil.copyfile(src, dst)
            LOGGER.info("Copied %s to %s", src, dst)
            changed = True
    return changed


@dataclass(kw_only=True)
class Directory(Resource):
    """Directory, optionally seeded from a local source tree.

    Files from ``source`` are copied when missing or different; extra files
    in the directory are left alone.
    """

    kind: ClassVar[str] = "directory"

    path: Path
    ensure: Ensure = Ensure.PRESENT
    owner: str | None = None
    group: str | None = None
    mode: int | None = None
    force: bool = False
    source: str | None = None

    @property
    def title(self) -> str:
        return str(self.path)

    def apply(self, context: ApplyContext) -> bool:
        if self.ensure is Ensure.ABSENT:
            if not self.path.exists():
                return False
            if not context.noop:
                if self.force:
                    shutil.rmtree(self.path)
                else:
                    self.path.rmdir()
            LOGGER.info("Removed directory %s", self.path)
            return True

        changed = False
        if not self.path.is_dir():
            if self.path.exists():
                raise ResourceError(f"{self.path} exists and is not a directory")
            if context.noop:
                LOGGER.info("Would create directory %s", self.path)
                return True
            try:
                self.path.mkdir()
            except FileNotFoundError as e:
                raise ResourceError(f"parent of {self.path} does not exist") from e
            LOGGER.info("Created directory %s", self.path)
            changed = True

        if self.source is not None:
            changed |= _sync_tree(Path(self.source), self.path, context)
        changed |= _set_owner(self.path, self.owner, self.group, context)
        changed |= _set_mode(self.path, self.mode, context)
        return changed


@dataclass(kw_only=True)
class File(Resource):
    """Regular file with literal content or a fetched source.

    ensure=None manages mode and ownership of a file only when it already
    exists, without creating it.
    """

    kind: ClassVar[str] = "file"

    path: Path
    ensure: Ensure | None = Ensure.PRESENT
    content: str | None = None
    source: str | None = None
    owner: str | None = None
    group: str | None = None
    mode: int | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        if self.content is not None and self.source is not None:
            raise ValueError(f"{self.path}: content and source are mutually exclusive")

    @property
    def title(self) -> str:
        return self.name or str(self.path)

    def _desired(self, context: ApplyContext) -> bytes | None:
        if self.content is not None:
            return self.content.encode("utf-8")
        if self.source is not None:
            return fetch_source(self.source, region=context.aws_region)
        return None

    def _write(self, data: bytes) -> None:
        handle, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(handle, "wb") as out:
                out.write(data)
            if self.mode is not None:
                os.chmod(tmp_path, self.mode)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def apply(self, context: ApplyContext) -> bool:
        if self.ensure is Ensure.ABSENT:
            if not self.path.exists() and not self.path.is_symlink():
                return False
            if not context.noop:
                self.path.unlink()
            LOGGER.info("Removed file %s", self.path)
            return True

        exists = self.path.exists()
        if self.ensure is None and not exists:
            LOGGER.debug("Skipping unmanaged missing file %s", self.path)
            return False
        if context.noop and not exists:
            # source may be produced by a predecessor that noop did not run
            LOGGER.info("Would create %s", self.path)
            return True

        desired = self._desired(context)
        if desired is None and not exists:
            desired = b""

        changed = False
        if desired is not None:
            current = self.path.read_bytes() if exists else None
            if current != desired:
                if context.noop:
                    LOGGER.info("Would update content of %s", self.path)
                    return True
                if not self.path.parent.is_dir():
                    raise ResourceError(f"parent of {self.path} does not exist")
                self._write(desired)
                LOGGER.info("Updated content of %s", self.path)
                changed = True

        changed |= _set_owner(self.path, self.owner, self.group, context)
        changed |= _set_mode(self.path, self.mode, context)
        return changed


@dataclass(kw_only=True)
class Link(Resource):
    kind: ClassVar[str] = "link"

    path: Path
    target: Path
    ensure: Ensure = Ensure.PRESENT

    @property
    def title(self) -> str:
        return str(self.path)

    def apply(self, context: ApplyContext) -> bool:
        is_link = self.path.is_symlink()
        if self.ensure is Ensure.ABSENT:
            if not is_link and not self.path.exists():
                return False
            if not context.noop:
                self.path.unlink()
            LOGGER.info("Removed link %s", self.path)
            return True

        if is_link and Path(os.readlink(self.path)) == self.target:
            return False
        if self.path.exists() and not is_link:
            raise ResourceError(f"{self.path} exists and is not a symlink")
        if context.noop:
            LOGGER.info("Would link %s -> %s", self.path, self.target)
            return True
        if is_link:
            self.path.unlink()
        self.path.symlink_to(self.target)
        LOGGER.info("Linked %s -> %s", self.path, self.target)
        return True


@dataclass(kw_only=True)
class Exec(Resource):
    """External command.

    Skipped while ``creates`` exists. A refreshonly exec runs only when a
    changed resource notifies it.
    """

    kind: ClassVar[str] = "exec"

    name: str
    command: list[str]
    creates: Path | None = None
    refreshonly: bool = False

    @property
    def title(self) -> str:
        return self.name

    def _run(self, context: ApplyContext) -> bool:
        if context.noop:
            LOGGER.info("Would run %s", " ".join(self.command))
            return True
        try:
            result = subprocess.run(
                self.command, capture_output=True, encoding="utf-8", errors="replace", check=False
            )
        except OSError as e:
            raise ResourceError(f"{self.name}: cannot execute {self.command[0]}: {e}") from e
        if result.returncode != 0:
            raise ResourceError(
                f"{self.name}: {self.command[0]} exited with {result.returncode}",
                returncode=result.returncode,
                stderr=result.stderr,
            )
        LOGGER.info("Executed %s", self.name)
        return True

    def apply(self, context: ApplyContext) -> bool:
        if self.refreshonly:
            return False
        if self.creates is not None and self.creates.exists():
            LOGGER.debug("Skipping %s, %s exists", self.name, self.creates)
            return False
        return self._run(context)

    def refresh(self, context: ApplyContext) -> bool:
        if not self.refreshonly:
            return False
        return self._run(context)
