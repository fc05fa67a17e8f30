"""Tests for AutoloadGenerator.generate, asserting the emitted PHP textually."""

import os
from unittest.mock import MagicMock

import pytest

from autoload.generator import AutoloadGenerator
from common.errors import DuplicateClassError, FilesystemError
from installation import InstallationManager, LibraryInstaller
from package.models import AutoloadKind, AutoloadRule, Package
from repository.base import ArrayRepository

MAIN_NAMESPACES = r"""<?php

// autoload_namespaces.php generated by vendorkit

$vendorDir = dirname(__DIR__);
$baseDir = dirname($vendorDir);

return array(
    'Main' => $baseDir . '/src/',
    'Lala' => array($baseDir . '/src/', $baseDir . '/lib/'),
);
"""

MAIN_CLASSMAP = r"""<?php

// autoload_classmap.php generated by vendorkit

$vendorDir = dirname(__DIR__);
$baseDir = dirname($vendorDir);

return array(
    'ClassMapFoo' => $baseDir . '/.composersrc/foo.php',
);
"""

VENDOR_SAME_AS_WORKING_DIR_NAMESPACES = r"""<?php

// autoload_namespaces.php generated by vendorkit

$vendorDir = dirname(__DIR__);
$baseDir = $vendorDir;

return array(
    'Main' => $vendorDir . '/src/',
    'Lala' => $vendorDir . '/src/',
);
"""

ALTERNATIVE_VENDOR_DIR_NAMESPACES = r"""<?php

// autoload_namespaces.php generated by vendorkit

$vendorDir = dirname(__DIR__);
$baseDir = dirname(dirname($vendorDir));

return array(
    'Main' => $baseDir . '/src/',
    'Lala' => $baseDir . '/src/',
);
"""

VENDORS_NAMESPACES = r"""<?php

// autoload_namespaces.php generated by vendorkit

$vendorDir = dirname(__DIR__);
$baseDir = dirname($vendorDir);

return array(
    'B\\Sub\\Name' => $vendorDir . '/b/b/src/',
    'A\\B' => $vendorDir . '/a/a/lib/',
    'A' => $vendorDir . '/a/a/src/',
);
"""

OVERRIDE_VENDORS_NAMESPACES = r"""<?php

// autoload_namespaces.php generated by vendorkit

$vendorDir = dirname(__DIR__);
$baseDir = dirname($vendorDir);

return array(
    'B\\Sub\\Name' => $vendorDir . '/b/b/src/',
    'A\\B' => '/home/deveuser/local-packages/a-a/lib',
    'A' => $vendorDir . '/a/a/src/',
);
"""

EMPTY_CLASSMAP = r"""<?php

// autoload_classmap.php generated by vendorkit

$vendorDir = dirname(__DIR__);
$baseDir = dirname($vendorDir);

return array(
);
"""

VENDORS_CLASSMAP = r"""<?php

// autoload_classmap.php generated by vendorkit

$vendorDir = dirname(__DIR__);
$baseDir = dirname($vendorDir);

return array(
    'ClassMapFoo' => $vendorDir . '/a/a/src/a.php',
    'ClassMapBar' => $vendorDir . '/b/b/src/b.php',
    'ClassMapBaz' => $vendorDir . '/b/b/lib/c.php',
);
"""

EMPTY_DIR_AND_EXACT_FILE_CLASSMAP = r"""<?php

// autoload_classmap.php generated by vendorkit

$vendorDir = dirname(__DIR__);
$baseDir = dirname($vendorDir);

return array(
    'ClassMapFoo' => $vendorDir . '/a/a/src/a.php',
    'ClassMapBar' => $vendorDir . '/b/b/test.php',
    'ClassMapBaz' => $vendorDir . '/c/c/foo/test.php',
);
"""

INCLUDE_PATHS = r"""<?php

// include_paths.php generated by vendorkit

$vendorDir = dirname(__DIR__);
$baseDir = dirname($vendorDir);

return array(
    $vendorDir . '/a/a/lib/',
    $vendorDir . '/b/b/library',
);
"""


def psr0(prefix, *paths):
    return AutoloadRule(kind=AutoloadKind.PSR0, prefix=prefix, paths=tuple(paths))


def classmap(*paths):
    return AutoloadRule(kind=AutoloadKind.CLASSMAP, paths=tuple(paths))


def _write(path, contents):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents)


class AutoloadFixture:
    """Working dir, vendor dir and a mocked installation manager."""

    def __init__(self, working_dir):
        self.working_dir = working_dir
        self.vendor_dir = working_dir / "composer-test-autoload"
        self.manager = MagicMock()
        self.manager.get_install_path.side_effect = lambda p: f"{self.vendor_dir}/{p.name}"
        self.manager.get_vendor_path.side_effect = lambda absolute=False: str(self.vendor_dir)

    @property
    def output_dir(self):
        return self.vendor_dir / ".composer"

    def generate(self, root, packages=()):
        return AutoloadGenerator().generate(
            ArrayRepository(packages), root, self.manager, str(self.output_dir)
        )

    def read(self, name):
        return (self.output_dir / name).read_text()


@pytest.fixture
def fx(tmp_path, monkeypatch):
    working_dir = tmp_path.resolve() / "project"
    working_dir.mkdir()
    monkeypatch.chdir(working_dir)
    fixture = AutoloadFixture(working_dir)
    fixture.vendor_dir.mkdir()
    return fixture


class TestRootPackageAutoloading:
    """Root package rules resolved against the working directory."""

    def test_main_package(self, fx):
        root = Package("a", "1.0", autoload=(
            psr0("Main", "src/"),
            psr0("Lala", "src/", "lib/"),
            classmap(".composersrc/"),
        ))
        _write(fx.working_dir / ".composersrc" / "foo.php", "<?php class ClassMapFoo {}")

        fx.generate(root)

        assert fx.read("autoload_namespaces.php") == MAIN_NAMESPACES
        assert fx.read("autoload_classmap.php") == MAIN_CLASSMAP

    def test_vendor_dir_same_as_working_dir(self, fx):
        fx.vendor_dir = fx.working_dir
        root = Package("a", "1.0", autoload=(psr0("Main", "src/"), psr0("Lala", "src/")))

        fx.generate(root)

        assert fx.read("autoload_namespaces.php") == VENDOR_SAME_AS_WORKING_DIR_NAMESPACES

    def test_alternative_vendor_dir(self, fx):
        fx.vendor_dir = fx.vendor_dir / "subdir"
        fx.output_dir.mkdir(parents=True)
        root = Package("a", "1.0", autoload=(psr0("Main", "src/"), psr0("Lala", "src/")))

        fx.generate(root)

        assert fx.read("autoload_namespaces.php") == ALTERNATIVE_VENDOR_DIR_NAMESPACES

    def test_fallback_dirs_emitted_last_as_array(self, fx):
        root = Package("a", "1.0", autoload=(psr0("", "lib/"), psr0("Main", "src/")))

        fx.generate(root)

        content = fx.read("autoload_namespaces.php")
        assert content.endswith(
            "    'Main' => $baseDir . '/src/',\n"
            "    '' => array($baseDir . '/lib/'),\n"
            ");\n"
        )


class TestVendorAutoloading:
    """Dependency rules, overrides and classmaps."""

    def test_vendors(self, fx):
        packages = [
            Package("a/a", "1.0", autoload=(psr0("A", "src/"), psr0("A\\B", "lib/"))),
            Package("b/b", "1.0", autoload=(psr0("B\\Sub\\Name", "src/"),)),
        ]

        fx.generate(Package("a", "1.0"), packages)

        assert fx.read("autoload_namespaces.php") == VENDORS_NAMESPACES
        assert fx.read("autoload_classmap.php") == EMPTY_CLASSMAP

    def test_override_vendors(self, fx):
        root = Package("a", "1.0", autoload=(psr0("A\\B", "/home/deveuser/local-packages/a-a/lib"),))
        packages = [
            Package("a/a", "1.0", autoload=(psr0("A", "src/"), psr0("A\\B", "lib/"))),
            Package("b/b", "1.0", autoload=(psr0("B\\Sub\\Name", "src/"),)),
        ]

        fx.generate(root, packages)

        assert fx.read("autoload_namespaces.php") == OVERRIDE_VENDORS_NAMESPACES

    def test_vendors_classmap(self, fx):
        packages = [
            Package("a/a", "1.0", autoload=(classmap("src/"),)),
            Package("b/b", "1.0", autoload=(classmap("src/", "lib/"),)),
        ]
        _write(fx.vendor_dir / "a/a/src/a.php", "<?php class ClassMapFoo {}")
        _write(fx.vendor_dir / "b/b/src/b.php", "<?php class ClassMapBar {}")
        _write(fx.vendor_dir / "b/b/lib/c.php", "<?php class ClassMapBaz {}")

        fx.generate(Package("a", "1.0"), packages)

        assert fx.read("autoload_classmap.php") == VENDORS_CLASSMAP

    def test_classmap_empty_dir_and_exact_file(self, fx):
        packages = [
            Package("a/a", "1.0", autoload=(classmap(""),)),
            Package("b/b", "1.0", autoload=(classmap("test.php"),)),
            Package("c/c", "1.0", autoload=(classmap("./"),)),
        ]
        _write(fx.vendor_dir / "a/a/src/a.php", "<?php class ClassMapFoo {}")
        _write(fx.vendor_dir / "b/b/test.php", "<?php class ClassMapBar {}")
        _write(fx.vendor_dir / "c/c/foo/test.php", "<?php class ClassMapBaz {}")

        fx.generate(Package("a", "1.0"), packages)

        assert fx.read("autoload_classmap.php") == EMPTY_DIR_AND_EXACT_FILE_CLASSMAP

    def test_missing_classmap_root_is_skipped(self, fx):
        packages = [Package("a/a", "1.0", autoload=(classmap("generated/"),))]

        fx.generate(Package("a", "1.0"), packages)

        assert fx.read("autoload_classmap.php") == EMPTY_CLASSMAP

    def test_duplicate_class_aborts_before_writing(self, fx):
        packages = [
            Package("a/a", "1.0", autoload=(classmap("src/"),)),
            Package("b/b", "1.0", autoload=(classmap("src/"),)),
        ]
        _write(fx.vendor_dir / "a/a/src/a.php", "<?php class Foo {}")
        _write(fx.vendor_dir / "b/b/src/b.php", "<?php class Foo {}")

        with pytest.raises(DuplicateClassError) as exc:
            fx.generate(Package("a", "1.0"), packages)

        assert exc.value.class_name == "Foo"
        assert not (fx.output_dir / "autoload_namespaces.php").exists()
        assert not (fx.output_dir / "autoload_classmap.php").exists()

    def test_regeneration_is_idempotent(self, fx):
        packages = [Package("a/a", "1.0", autoload=(classmap("src/", "src/a.php"),))]
        _write(fx.vendor_dir / "a/a/src/a.php", "<?php class ClassMapFoo {}")

        fx.generate(Package("a", "1.0"), packages)
        first = fx.read("autoload_classmap.php")
        fx.generate(Package("a", "1.0"), packages)

        assert fx.read("autoload_classmap.php") == first
        assert "'ClassMapFoo' => $vendorDir . '/a/a/src/a.php'" in first

    def test_working_dir_classmap_skips_generated_files(self, fx):
        _write(fx.working_dir / "src" / "Foo.php", "<?php class Foo {}")
        root = Package("a", "1.0", autoload=(classmap(""),))

        fx.generate(root)
        first = fx.read("autoload_classmap.php")
        fx.generate(root)
        second = fx.read("autoload_classmap.php")

        assert second == first
        assert "'Foo' => $baseDir . '/src/Foo.php'," in first
        assert "ClassLoader" not in second

    def test_generated_loader_copy_elsewhere_is_not_a_duplicate(self, fx):
        fx.generate(Package("a", "1.0"))
        shipped = fx.vendor_dir / "c" / "c" / "ClassLoader.php"
        shipped.parent.mkdir(parents=True)
        shipped.write_text(fx.read("ClassLoader.php"))
        root = Package("a", "1.0", autoload=(classmap("."),))

        fx.generate(root)

        assert "'Vendorkit\\\\Autoload\\\\ClassLoader' => $vendorDir . '/c/c/ClassLoader.php'," in fx.read(
            "autoload_classmap.php"
        )

    def test_output_dir_is_a_file(self, fx):
        fx.output_dir.write_text("not a directory")

        with pytest.raises(FilesystemError) as exc:
            fx.generate(Package("a", "1.0"))

        assert exc.value.path == str(fx.output_dir)
        assert fx.output_dir.read_text() == "not a directory"


class TestIncludePaths:
    """include_paths.php emission and the bootstrap wiring."""

    def test_include_path_file_generation(self, fx):
        packages = [
            Package("a/a", "1.0", include_paths=("lib/",)),
            Package("b/b", "1.0", include_paths=("library",)),
        ]

        fx.generate(Package("a", "1.0"), packages)

        assert fx.read("include_paths.php") == INCLUDE_PATHS
        autoload = fx.read("autoload.php")
        assert "require $vendorkitDir . '/include_paths.php';" in autoload
        assert "array_push($includePaths, get_include_path());" in autoload
        assert "define('VENDORKIT_INCLUDE_PATHS_LOADED', true);" in autoload

    def test_include_path_file_without_paths_is_skipped(self, fx):
        fx.generate(Package("a", "1.0"), [Package("a/a", "1.0")])

        assert not (fx.output_dir / "include_paths.php").exists()
        assert "include_paths.php" not in fx.read("autoload.php")

    def test_stale_include_path_file_removed(self, fx):
        _write(fx.output_dir / "include_paths.php", "<?php return array('old');")

        fx.generate(Package("a", "1.0"), [Package("a/a", "1.0")])

        assert not (fx.output_dir / "include_paths.php").exists()


class TestBootstrapFiles:
    """autoload.php and ClassLoader.php."""

    def test_bootstrap_and_loader_written(self, fx):
        written = fx.generate(Package("a", "1.0"))

        names = sorted(os.path.basename(p) for p in written)
        assert names == [
            "ClassLoader.php",
            "autoload.php",
            "autoload_classmap.php",
            "autoload_namespaces.php",
        ]
        autoload = fx.read("autoload.php")
        assert autoload.startswith("<?php\n")
        assert "require __DIR__ . '/ClassLoader.php';" in autoload
        assert "require $vendorkitDir . '/autoload_namespaces.php';" in autoload
        assert "require $vendorkitDir . '/autoload_classmap.php';" in autoload
        assert "$loader->register();" in autoload
        loader = fx.read("ClassLoader.php")
        assert loader.startswith("<?php\n")
        assert "namespace Vendorkit\\Autoload;" in loader
        assert "class ClassLoader" in loader

    def test_output_dir_created(self, fx):
        assert not fx.output_dir.exists()
        fx.generate(Package("a", "1.0"))
        assert (fx.output_dir / "autoload_namespaces.php").is_file()


def test_symlinked_vendor_dir(tmp_path, monkeypatch):
    """Classmap realpaths inside a symlinked vendor dir stay $vendorDir-relative."""
    base = tmp_path.resolve()
    working_dir = base / "project"
    working_dir.mkdir()
    real_vendor = base / "shared" / "vendor"
    _write(real_vendor / "a/a/src/a.php", "<?php class ClassMapFoo {}")
    os.symlink(str(real_vendor), str(working_dir / "vendor"))
    monkeypatch.chdir(working_dir)

    manager = InstallationManager("vendor")
    manager.add_installer(LibraryInstaller(manager.get_vendor_path()))
    packages = [Package("a/a", "1.0", autoload=(classmap("src/"),))]

    AutoloadGenerator().generate(ArrayRepository(packages), Package("root", "1.0"), manager, "vendor/.composer")

    content = (working_dir / "vendor" / ".composer" / "autoload_classmap.php").read_text()
    assert "$vendorDir = dirname(__DIR__);" in content
    assert "$baseDir = dirname(dirname($vendorDir)) . '/project';" in content
    assert "'ClassMapFoo' => $vendorDir . '/a/a/src/a.php'," in content


def test_with_installation_manager(tmp_path, monkeypatch):
    """Relative install paths from the library installer resolve against the working dir."""
    working_dir = tmp_path.resolve()
    monkeypatch.chdir(working_dir)
    manager = InstallationManager("vendor")
    manager.add_installer(LibraryInstaller(manager.get_vendor_path()))
    packages = [Package("a/a", "1.0", autoload=(psr0("A", "src/"),), include_paths=("lib/",))]
    root = Package("root", "1.0", autoload=(psr0("Root", "src/"),))

    AutoloadGenerator().generate(ArrayRepository(packages), root, manager, "vendor/.composer")

    namespaces = (working_dir / "vendor" / ".composer" / "autoload_namespaces.php").read_text()
    assert "    'Root' => $baseDir . '/src/',\n    'A' => $vendorDir . '/a/a/src/',\n" in namespaces
    include_paths = (working_dir / "vendor" / ".composer" / "include_paths.php").read_text()
    assert "    $vendorDir . '/a/a/lib/',\n" in include_paths
