"""Tests for the CSR publication fragment."""

from pathlib import Path

from vhost_ssl.lib.catalog import Catalog
from vhost_ssl.lib.csr_file import declare_csr_file
from vhost_ssl.lib.models import CsrTarget, Ensure
from vhost_ssl.lib.resources import ApplyContext, File


class TestDeclareCsrFile:
    def test_declares_single_named_file(self, catalog: Catalog, tmp_path: Path) -> None:
        target = CsrTarget(ensure=Ensure.PRESENT, path=tmp_path / "htdocs" / "example.org.csr")

        ref = declare_csr_file(catalog, "example.org", tmp_path / "ssl" / "example.org.csr", target)

        assert ref == "file:public CSR file for example.org"
        resource = catalog[ref]
        assert isinstance(resource, File)
        assert resource.path == target.path
        assert resource.source == str(tmp_path / "ssl" / "example.org.csr")
        assert resource.mode == 0o640
        assert len(catalog) == 1

    def test_carries_requirements(self, catalog: Catalog, tmp_path: Path) -> None:
        target = CsrTarget(ensure=Ensure.ABSENT, path=tmp_path / "example.org.csr")

        ref = declare_csr_file(catalog, "example.org", tmp_path / "x.csr", target, require=["exec:generate"])

        assert catalog[ref].require == ["exec:generate"]
        assert catalog[ref].ensure is Ensure.ABSENT

    def test_publishes_copy(self, catalog: Catalog, tmp_path: Path, context: ApplyContext) -> None:
        csr = tmp_path / "request.csr"
        csr.write_text("-----BEGIN CERTIFICATE REQUEST-----\n")
        target = CsrTarget(ensure=Ensure.PRESENT, path=tmp_path / "public.csr")
        declare_csr_file(catalog, "example.org", csr, target)

        report = catalog.apply(context)

        assert report.changed == ["file:public CSR file for example.org"]
        assert target.path.read_text() == csr.read_text()

    def test_absent_removes_copy(self, catalog: Catalog, tmp_path: Path, context: ApplyContext) -> None:
        published = tmp_path / "public.csr"
        published.write_text("old")
        declare_csr_file(catalog, "example.org", tmp_path / "gone.csr", CsrTarget(Ensure.ABSENT, published))

        catalog.apply(context)

        assert not published.exists()
