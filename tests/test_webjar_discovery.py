from __future__ import annotations

import re
import zipfile
from pathlib import Path

import pytest

from webjar_locator import discovery
from webjar_locator.discovery import (
    SearchLocation,
    default_search_roots,
    get_asset_paths,
    register_scanner,
    resolve_search_roots,
    scanner_for,
)
from webjar_locator.errors import DepthExceededError, DiscoveryError


WEBJARS = "META-INF/resources/webjars"


def test_directory_root_yields_paths_starting_at_prefix(make_webjar_dir) -> None:
    root = make_webjar_dir(["jquery/3.1.0/jquery.js", "jquery/3.1.0/jquery.min.js"])
    assert get_asset_paths(".*", [root]) == {
        f"{WEBJARS}/jquery/3.1.0/jquery.js",
        f"{WEBJARS}/jquery/3.1.0/jquery.min.js",
    }


def test_archive_root_skips_directories_and_entries_outside_prefix(make_webjar_jar) -> None:
    jar = make_webjar_jar(
        "jquery-3.1.0.jar",
        ["jquery/3.1.0/jquery.js"],
        extra=[
            f"{WEBJARS}/jquery/",
            f"{WEBJARS}/jquery/3.1.0/",
            "org/webjars/Jquery.class",
            "META-INF/resources/other/x.js",
        ],
    )
    assert get_asset_paths(".*", [jar]) == {f"{WEBJARS}/jquery/3.1.0/jquery.js"}


def test_filter_must_match_whole_relative_path(make_webjar_dir, make_webjar_jar) -> None:
    root = make_webjar_dir(["lib/1.0/a.js", "lib/1.0/a.css"])
    jar = make_webjar_jar("lib.jar", ["other/2.0/b.js", "other/2.0/b.css"])
    paths = get_asset_paths(re.compile(r".*\.js"), [root, jar])
    assert paths == {f"{WEBJARS}/lib/1.0/a.js", f"{WEBJARS}/other/2.0/b.js"}
    # a partial match is not enough
    assert get_asset_paths(r"lib", [root, jar]) == set()


def test_roots_without_prefix_or_missing_are_skipped(tmp_path, make_webjar_dir) -> None:
    root = make_webjar_dir(["x/1.0/x.js"])
    plain = tmp_path / "plain"
    plain.mkdir()
    not_an_archive = tmp_path / "notes.txt"
    not_an_archive.write_text("hello", encoding="utf-8")
    unrelated_jar = tmp_path / "unrelated.jar"
    with zipfile.ZipFile(unrelated_jar, "w") as zf:
        zf.writestr("org/example/Main.class", "")

    roots = [root, plain, not_an_archive, unrelated_jar, tmp_path / "missing"]
    assert resolve_search_roots(roots) == [SearchLocation("file", (root / WEBJARS).as_posix())]
    assert get_asset_paths(".*", roots) == {f"{WEBJARS}/x/1.0/x.js"}


def test_resolve_search_roots_classifies_and_dedupes(make_webjar_dir, make_webjar_jar) -> None:
    root = make_webjar_dir(["x/1.0/x.js"])
    jar = make_webjar_jar("x.jar", ["x/2.0/x.js"])
    locations = resolve_search_roots([root, jar, "pkg:some.package", str(root), jar])
    assert [location.scheme for location in locations] == ["file", "jar", "pkg"]
    assert locations[1].target == jar.as_posix()
    assert str(locations[2]) == "pkg:some.package"


def test_duplicate_paths_from_two_roots_collapse(make_webjar_dir, make_webjar_jar) -> None:
    root = make_webjar_dir(["x/1.0/x.js"])
    jar = make_webjar_jar("x.jar", ["x/1.0/x.js"])
    assert get_asset_paths(".*", [root, jar]) == {f"{WEBJARS}/x/1.0/x.js"}


def test_directory_deeper_than_limit_is_fatal(make_webjar_dir) -> None:
    root = make_webjar_dir(["a/b/c/d/e/f/g.js"])
    with pytest.raises(DepthExceededError) as exc_info:
        get_asset_paths(".*", [root])
    assert exc_info.value.max_depth == 5
    assert "Got deeper than 5 levels" in str(exc_info.value)


def test_depth_limit_is_inclusive(make_webjar_dir) -> None:
    # directories at levels 1..5 below the prefix are allowed
    root = make_webjar_dir(["a/b/c/d/e/f.js"])
    assert get_asset_paths(".*", [root]) == {f"{WEBJARS}/a/b/c/d/e/f.js"}
    with pytest.raises(DepthExceededError):
        get_asset_paths(".*", [root], max_depth=4)


def test_archives_have_no_depth_limit(make_webjar_jar) -> None:
    jar = make_webjar_jar("deep.jar", ["a/b/c/d/e/f/g/h.js"])
    assert get_asset_paths(".*", [jar], max_depth=0) == {f"{WEBJARS}/a/b/c/d/e/f/g/h.js"}


def test_custom_prefix(tmp_path) -> None:
    static = tmp_path / "site" / "static" / "vendor" / "lib.js"
    static.parent.mkdir(parents=True)
    static.write_text("", encoding="utf-8")
    assert get_asset_paths(".*", [tmp_path / "site"], path_prefix="static") == {"static/vendor/lib.js"}


def _write_package(base: Path, name: str, files) -> None:
    pkg = base / name
    pkg.mkdir(parents=True)
    (pkg / "__init__.py").write_text("", encoding="utf-8")
    for rel in files:
        target = pkg / WEBJARS / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text("", encoding="utf-8")


def test_package_resources_are_walked(tmp_path, monkeypatch) -> None:
    _write_package(tmp_path / "site", "webjar_fixture_pkg", ["vue/3.4.0/vue.js", "vue/3.4.0/vue.css"])
    monkeypatch.syspath_prepend(str(tmp_path / "site"))
    paths = get_asset_paths(r".*\.js", ["pkg:webjar_fixture_pkg"])
    assert paths == {f"{WEBJARS}/vue/3.4.0/vue.js"}


def test_zip_imported_package_resources_are_walked(tmp_path, monkeypatch) -> None:
    archive = tmp_path / "bundle.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("webjar_zipped_pkg/__init__.py", "")
        zf.writestr(f"webjar_zipped_pkg/{WEBJARS}/react/18.2.0/react.js", "")
    monkeypatch.syspath_prepend(str(archive))
    assert get_asset_paths(".*", ["pkg:webjar_zipped_pkg"]) == {f"{WEBJARS}/react/18.2.0/react.js"}


def test_package_without_prefix_contributes_nothing(tmp_path, monkeypatch) -> None:
    _write_package(tmp_path / "site", "webjar_empty_pkg", [])
    monkeypatch.syspath_prepend(str(tmp_path / "site"))
    assert not (tmp_path / "site" / "webjar_empty_pkg" / "META-INF").exists()
    assert get_asset_paths(".*", ["pkg:webjar_empty_pkg"]) == set()


def test_missing_package_is_a_discovery_failure() -> None:
    with pytest.raises(DiscoveryError) as exc_info:
        get_asset_paths(".*", ["pkg:webjar_no_such_package_anywhere"])
    assert isinstance(exc_info.value.__cause__, ModuleNotFoundError)


def test_package_failing_on_import_is_a_discovery_failure(tmp_path, monkeypatch) -> None:
    _write_package(tmp_path / "site", "webjar_broken_pkg", ["x/1.0/x.js"])
    (tmp_path / "site" / "webjar_broken_pkg" / "__init__.py").write_text(
        'raise ImportError("optional dependency missing")\n', encoding="utf-8"
    )
    monkeypatch.syspath_prepend(str(tmp_path / "site"))
    with pytest.raises(DiscoveryError) as exc_info:
        get_asset_paths(".*", ["pkg:webjar_broken_pkg"])
    assert "optional dependency missing" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, ImportError)


def test_package_root_without_a_name_is_a_discovery_failure() -> None:
    with pytest.raises(DiscoveryError) as exc_info:
        get_asset_paths(".*", ["pkg:"])
    assert str(exc_info.value).startswith("cannot load package resources for pkg:")


def test_corrupt_archive_is_a_discovery_failure(make_webjar_jar) -> None:
    jar = make_webjar_jar("broken.jar", ["x/1.0/x.js"])
    data = jar.read_bytes()
    # keep the end record intact, break the second central directory header
    second = data.index(b"PK\x01\x02", data.index(b"PK\x01\x02") + 4)
    jar.write_bytes(data[:second] + b"XX" + data[second + 2:])
    assert zipfile.is_zipfile(jar)
    with pytest.raises(DiscoveryError) as exc_info:
        get_asset_paths(".*", [jar])
    assert isinstance(exc_info.value.__cause__, zipfile.BadZipFile)


def test_io_errors_from_scanners_are_wrapped(monkeypatch) -> None:
    def broken(location, filter_expr, path_prefix, max_depth):
        raise OSError("device not ready")

    monkeypatch.setitem(discovery._SCANNERS, "pkg", broken)
    with pytest.raises(DiscoveryError) as exc_info:
        get_asset_paths(".*", ["pkg:anything"])
    assert "device not ready" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, OSError)


def test_register_scanner_adds_a_scheme(monkeypatch) -> None:
    monkeypatch.setattr(discovery, "_SCANNERS", dict(discovery._SCANNERS))

    @register_scanner("mem")
    def scan_memory(location, filter_expr, path_prefix, max_depth):
        return {f"{path_prefix}/{location.target}/1.0/m.js"}

    assert scanner_for("mem") is scan_memory
    monkeypatch.setattr(
        discovery,
        "_locate",
        lambda root, prefix: SearchLocation("mem", str(root)),
    )
    assert get_asset_paths(".*", ["lib"]) == {f"{WEBJARS}/lib/1.0/m.js"}


def test_unknown_scheme_is_rejected() -> None:
    with pytest.raises(DiscoveryError):
        scanner_for("vfs")


def test_default_search_roots_honours_environment(monkeypatch, tmp_path) -> None:
    import os

    monkeypatch.setenv("WEBJARS_SEARCH_PATH", os.pathsep.join([str(tmp_path), "", "pkg:x"]))
    assert default_search_roots() == [str(tmp_path), "pkg:x"]

    monkeypatch.setenv("WEBJARS_SEARCH_PATH", os.pathsep.join(["pkg:a.static", "pkg:b", str(tmp_path)]))
    assert default_search_roots() == ["pkg:a.static", "pkg:b", str(tmp_path)]

    monkeypatch.delenv("WEBJARS_SEARCH_PATH")
    monkeypatch.setattr("sys.path", ["", "/opt/lib"])
    assert default_search_roots() == [".", "/opt/lib"]
