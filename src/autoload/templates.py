"""PHP templates for the generated autoload files."""

from __future__ import annotations

import textwrap
from typing import Iterable, List

from common.filesystem import export_php_string

__all__ = [
    "CLASS_LOADER",
    "export_php_string",
    "render_autoload",
    "render_path_list",
    "render_table",
]

_TABLE_TEMPLATE = textwrap.dedent("""\
    <?php

    // {file_name} generated by vendorkit

    $vendorDir = {vendor_code};
    $baseDir = {base_code};

    return array(
    {entries});
""")

_AUTOLOAD_TEMPLATE = textwrap.dedent("""\
    <?php

    // autoload.php generated by vendorkit

    if (!class_exists('Vendorkit\\\\Autoload\\\\ClassLoader', false)) {{
        require __DIR__ . '/ClassLoader.php';
    }}

    return call_user_func(function () {{
        $loader = new \\Vendorkit\\Autoload\\ClassLoader();
        $vendorkitDir = __DIR__;

        $map = require $vendorkitDir . '/{namespaces_file}';
        foreach ($map as $namespace => $path) {{
            $loader->add($namespace, $path);
        }}

        $classMap = require $vendorkitDir . '/{classmap_file}';
        if ($classMap) {{
            $loader->addClassMap($classMap);
        }}
    {include_paths}
        $loader->register();

        return $loader;
    }});
""")

# Inserted inside the closure body, hence the extra indent.
_INCLUDE_PATHS_SNIPPET = textwrap.indent(textwrap.dedent("""\

    if (!defined('VENDORKIT_INCLUDE_PATHS_LOADED')) {{
        define('VENDORKIT_INCLUDE_PATHS_LOADED', true);
        $includePaths = require $vendorkitDir . '/{include_paths_file}';
        array_push($includePaths, get_include_path());
        set_include_path(implode(PATH_SEPARATOR, $includePaths));
    }}
"""), "    ")

CLASS_LOADER = textwrap.dedent(r"""
    <?php

    /*
     * ClassLoader generated by vendorkit.
     *
     * Loads classes from a classmap first, then from PSR-0 namespace
     * prefixes in registration order, then from fallback directories.
     */

    namespace Vendorkit\Autoload;

    class ClassLoader
    {
        private $prefixes = array();
        private $fallbackDirs = array();
        private $useIncludePath = false;
        private $classMap = array();

        public function getPrefixes()
        {
            return $this->prefixes;
        }

        public function getFallbackDirs()
        {
            return $this->fallbackDirs;
        }

        public function getClassMap()
        {
            return $this->classMap;
        }

        public function addClassMap(array $classMap)
        {
            $this->classMap = array_merge($this->classMap, $classMap);
        }

        public function add($prefix, $paths)
        {
            if ('' === (string) $prefix) {
                foreach ((array) $paths as $path) {
                    $this->fallbackDirs[] = $path;
                }

                return;
            }
            if (isset($this->prefixes[$prefix])) {
                $this->prefixes[$prefix] = array_merge($this->prefixes[$prefix], (array) $paths);
            } else {
                $this->prefixes[$prefix] = (array) $paths;
            }
        }

        public function setUseIncludePath($useIncludePath)
        {
            $this->useIncludePath = $useIncludePath;
        }

        public function getUseIncludePath()
        {
            return $this->useIncludePath;
        }

        public function register($prepend = false)
        {
            spl_autoload_register(array($this, 'loadClass'), true, $prepend);
        }

        public function unregister()
        {
            spl_autoload_unregister(array($this, 'loadClass'));
        }

        public function loadClass($class)
        {
            if ($file = $this->findFile($class)) {
                include $file;

                return true;
            }
        }

        public function findFile($class)
        {
            if ('\\' == $class[0]) {
                $class = substr($class, 1);
            }

            if (isset($this->classMap[$class])) {
                return $this->classMap[$class];
            }

            if (false !== $pos = strrpos($class, '\\')) {
                // namespaced class name
                $classPath = str_replace('\\', DIRECTORY_SEPARATOR, substr($class, 0, $pos)) . DIRECTORY_SEPARATOR;
                $className = substr($class, $pos + 1);
            } else {
                // PEAR-like class name
                $classPath = null;
                $className = $class;
            }

            $classPath .= str_replace('_', DIRECTORY_SEPARATOR, $className) . '.php';

            foreach ($this->prefixes as $prefix => $dirs) {
                if (0 === strpos($class, $prefix)) {
                    foreach ($dirs as $dir) {
                        if (file_exists($dir . DIRECTORY_SEPARATOR . $classPath)) {
                            return $dir . DIRECTORY_SEPARATOR . $classPath;
                        }
                    }
                }
            }

            foreach ($this->fallbackDirs as $dir) {
                if (file_exists($dir . DIRECTORY_SEPARATOR . $classPath)) {
                    return $dir . DIRECTORY_SEPARATOR . $classPath;
                }
            }

            if ($this->useIncludePath && $file = stream_resolve_include_path($classPath)) {
                return $file;
            }

            return $this->classMap[$class] = false;
        }
    }
""").lstrip()


def render_table(file_name: str, vendor_code: str, base_code: str, entries: Iterable[str]) -> str:
    """Render a generated PHP file returning an array of ``entries``."""
    body = "".join(f"    {entry},\n" for entry in entries)
    return _TABLE_TEMPLATE.format(
        file_name=file_name,
        vendor_code=vendor_code,
        base_code=base_code,
        entries=body,
    )


def render_path_list(path_codes: List[str], force_array: bool = False) -> str:
    """Render one or more path expressions as a PHP value."""
    if len(path_codes) == 1 and not force_array:
        return path_codes[0]
    return "array(" + ", ".join(path_codes) + ")"


def render_autoload(
    namespaces_file: str,
    classmap_file: str,
    include_paths_file: str = "",
) -> str:
    """Render the bootstrap file; include paths are wired only when a file name is given."""
    include_paths = ""
    if include_paths_file:
        include_paths = _INCLUDE_PATHS_SNIPPET.format(include_paths_file=include_paths_file)
    return _AUTOLOAD_TEMPLATE.format(
        namespaces_file=namespaces_file,
        classmap_file=classmap_file,
        include_paths=include_paths,
    )
