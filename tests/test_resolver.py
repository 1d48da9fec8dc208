"""Tests for locating the servable site inside an extracted package."""

from pathlib import Path

import pytest

from template_market.modules.demos import SiteStructureResolver, UnrecognizedStructureError


def _write(root: Path, relative: str, content: str = "x") -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


@pytest.fixture
def resolver():
    return SiteStructureResolver()


class TestResolve:
    def test_root_index_wins(self, resolver, tmp_path):
        _write(tmp_path, "index.html")
        _write(tmp_path, "dist/index.html")
        site = resolver.resolve(tmp_path)
        assert site.deploy_dir == tmp_path
        assert not site.is_placeholder

    def test_build_before_dist(self, resolver, tmp_path):
        _write(tmp_path, "build/index.html")
        _write(tmp_path, "dist/index.html")
        assert resolver.resolve(tmp_path).deploy_dir == tmp_path / "build"

    def test_dist_output(self, resolver, tmp_path):
        _write(tmp_path, "package.json", "{}")
        _write(tmp_path, "dist/index.html")
        assert resolver.resolve(tmp_path).deploy_dir == tmp_path / "dist"

    def test_source_only_project_gets_placeholder(self, resolver, tmp_path):
        _write(tmp_path, "package.json", "{}")
        _write(tmp_path, "src/App.jsx", "export default () => null")

        site = resolver.resolve(tmp_path, title="Shop <Pro>")

        assert site.is_placeholder
        assert site.deploy_dir == tmp_path
        page = (tmp_path / "index.html").read_text(encoding="utf-8")
        assert "no compiled output was found" in page
        assert "Shop &lt;Pro&gt;" in page

    def test_manifest_without_entry_is_unrecognized(self, resolver, tmp_path):
        _write(tmp_path, "package.json", "{}")
        _write(tmp_path, "src/utils.js")
        with pytest.raises(UnrecognizedStructureError):
            resolver.resolve(tmp_path)
        assert not (tmp_path / "index.html").exists()

    def test_readme_only_is_unrecognized(self, resolver, tmp_path):
        _write(tmp_path, "README.md")
        with pytest.raises(UnrecognizedStructureError) as excinfo:
            resolver.resolve(tmp_path)
        assert excinfo.value.stage == "resolve"

    def test_nested_index_is_not_searched(self, resolver, tmp_path):
        _write(tmp_path, "project/index.html")
        with pytest.raises(UnrecognizedStructureError):
            resolver.resolve(tmp_path)


class TestFindSiteSubdirectory:
    def test_root_index(self, resolver, tmp_path):
        _write(tmp_path, "index.html")
        found = resolver.find_site_subdirectory(tmp_path)
        assert found.deploy_dir == tmp_path
        assert found.subpath == ""

    def test_single_subfolder(self, resolver, tmp_path):
        _write(tmp_path, "my-site/index.html")
        _write(tmp_path, ".hidden/index.html")
        found = resolver.find_site_subdirectory(tmp_path)
        assert found.deploy_dir == tmp_path / "my-site"
        assert found.subpath == "my-site"

    def test_ambiguous_subfolders(self, resolver, tmp_path):
        _write(tmp_path, "a/index.html")
        _write(tmp_path, "b/index.html")
        with pytest.raises(UnrecognizedStructureError):
            resolver.find_site_subdirectory(tmp_path)

    def test_nothing_found(self, resolver, tmp_path):
        _write(tmp_path, "a/readme.txt")
        with pytest.raises(UnrecognizedStructureError):
            resolver.find_site_subdirectory(tmp_path)
