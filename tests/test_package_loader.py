"""Tests for package models and manifest loading."""

import json
import logging

import pytest

from common.errors import InvalidArgumentError
from package import (
    AutoloadKind,
    AutoloadRule,
    Package,
    dump_package,
    load_manifest,
    load_package,
    load_root_package,
)


class TestPackageModel:
    """Name and version normalization."""

    def test_normalized_identity(self):
        package = Package("Acme/Lib", "1.0")
        assert package.name == "acme/lib"
        assert package.version == "1.0.0"
        assert package.unique_name == "acme/lib-1.0.0"
        assert str(package) == "Acme/Lib (1.0)"

    def test_dev_versions_kept_verbatim(self):
        package = Package("acme/lib", "dev-master")
        assert package.version == "dev-master"
        assert package.is_dev is True

    def test_rules_by_kind(self):
        psr0 = AutoloadRule(kind=AutoloadKind.PSR0, prefix="A", paths=("src/",))
        classmap = AutoloadRule(kind=AutoloadKind.CLASSMAP, paths=("lib/",))
        package = Package("a/a", "1.0", autoload=(psr0, classmap))
        assert package.psr0_rules() == (psr0,)
        assert package.classmap_rules() == (classmap,)


class TestLoadPackage:
    """Manifest mapping to Package."""

    def test_full_manifest(self):
        package = load_package({
            "name": "acme/lib",
            "version": "1.2",
            "type": "library",
            "target-dir": "Acme/Lib/",
            "include-path": ["lib/"],
            "autoload": {
                "psr-0": {"Acme\\Lib": "src/", "": ["fallback/", "other/"]},
                "classmap": ["res/", "Legacy.php"],
            },
        })

        assert package.target_dir == "Acme/Lib"
        assert package.include_paths == ("lib/",)
        assert package.psr0_rules() == (
            AutoloadRule(kind=AutoloadKind.PSR0, prefix="Acme\\Lib", paths=("src/",)),
            AutoloadRule(kind=AutoloadKind.PSR0, prefix="", paths=("fallback/", "other/")),
        )
        assert package.classmap_rules() == (
            AutoloadRule(kind=AutoloadKind.CLASSMAP, paths=("res/", "Legacy.php")),
        )

    def test_defaults(self):
        package = load_package({"name": "a/a", "version": "1.0"})
        assert package.type == "library"
        assert package.autoload == ()
        assert package.target_dir is None

    def test_missing_name(self):
        with pytest.raises(InvalidArgumentError):
            load_package({"version": "1.0"})

    def test_missing_version_uses_default(self):
        assert load_package({"name": "root/app"}, default_version="dev-master").version == "dev-master"
        with pytest.raises(InvalidArgumentError):
            load_package({"name": "root/app"})

    def test_unknown_autoload_kind_ignored(self, caplog):
        caplog.set_level(logging.WARNING)
        package = load_package({"name": "a/a", "version": "1.0", "autoload": {"psr-4": {"A\\": "src/"}}})
        assert package.autoload == ()
        assert "psr-4" in caplog.text

    def test_malformed_psr0(self):
        with pytest.raises(InvalidArgumentError):
            load_package({"name": "a/a", "version": "1.0", "autoload": {"psr-0": ["src/"]}})

    def test_dump_round_trip(self):
        data = {
            "name": "acme/lib",
            "version": "1.2",
            "type": "library",
            "autoload": {"psr-0": {"Acme": "src/", "Lala": ["src/", "lib/"]}, "classmap": ["res/"]},
            "include-path": ["lib/"],
            "target-dir": "Acme",
        }
        assert dump_package(load_package(data)) == data


class TestManifestFiles:
    """Reading composer.json from disk."""

    def test_load_root_package(self, tmp_path):
        path = tmp_path / "composer.json"
        path.write_text(json.dumps({"name": "root/app", "autoload": {"psr-0": {"Main": "src/"}}}))

        root = load_root_package(str(path))

        assert root.pretty_version == "dev-master"
        assert root.psr0_rules()[0].prefix == "Main"

    def test_missing_manifest(self, tmp_path):
        with pytest.raises(InvalidArgumentError):
            load_manifest(str(tmp_path / "composer.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "composer.json"
        path.write_text("{not json")
        with pytest.raises(InvalidArgumentError):
            load_manifest(str(path))

    def test_non_object_manifest(self, tmp_path):
        path = tmp_path / "composer.json"
        path.write_text("[]")
        with pytest.raises(InvalidArgumentError):
            load_manifest(str(path))
