"""vendorkit - package installation manager and PHP autoload generator.

    Returns:
        int: Exit code
"""
import logging
import os
import sys

from args import parse_args
from autoload.generator import AutoloadGenerator
from common.errors import DuplicateClassError, FilesystemError, InvalidArgumentError
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import Constants, ExitCodes, _load_yaml_config, apply_config
from installation import InstallationManager, LibraryInstaller, MetapackageInstaller
from package.loader import load_manifest, load_package
from repository.filesystem import InstalledFilesystemRepository

logger = logging.getLogger(__name__)


def _setup_logging(args):
    """Configure logging based on CLI arguments.

    Args:
        args: Parsed CLI arguments.
    """
    level = getattr(args, "LOG_LEVEL", None)
    if not level and getattr(args, "QUIET", False):
        level = "WARNING"
    configure_logging(level)

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def _load_config(args):
    """Apply the YAML configuration; an explicit --config file must exist."""
    config_path = getattr(args, "CONFIG", None)
    if config_path and not os.path.isfile(config_path):
        raise InvalidArgumentError(f"Config file not found: {config_path}")
    apply_config(_load_yaml_config(config_path))


def resolve_vendor_dir(args, manifest):
    """Return the vendor dir: CLI flag, then manifest config.vendor-dir, then Constants."""
    if getattr(args, "VENDOR_DIR", None):
        return args.VENDOR_DIR
    config = manifest.get("config")
    if isinstance(config, dict) and isinstance(config.get("vendor-dir"), str) and config["vendor-dir"].strip():
        return config["vendor-dir"].strip()
    return Constants.VENDOR_DIR


def build_installation_manager(vendor_dir):
    """Create the installation manager with the bundled installers registered."""
    manager = InstallationManager(vendor_dir)
    manager.add_installer(LibraryInstaller(manager.get_vendor_path()))
    manager.add_installer(MetapackageInstaller())
    return manager


def dump_autoload(args):
    """Generate the autoload files for the root package and installed packages.

    Returns:
        list: Paths of the generated files.
    """
    manifest = load_manifest(args.MANIFEST or Constants.MANIFEST_FILE)
    root_package = load_package(manifest, default_version=Constants.DEFAULT_ROOT_VERSION)
    manager = build_installation_manager(resolve_vendor_dir(args, manifest))

    autoload_dir = os.path.join(manager.get_vendor_path(), Constants.AUTOLOAD_DIR)
    installed_path = args.INSTALLED or os.path.join(autoload_dir, Constants.INSTALLED_FILE)
    repository = InstalledFilesystemRepository(installed_path)
    if is_debug_enabled(logger):
        logger.debug(
            "Loaded installed repository",
            extra=extra_context(
                event="decision",
                component="cli",
                action="dump_autoload",
                target=installed_path,
                count=len(repository),
            ),
        )

    output_dir = args.OUTPUT_DIR or autoload_dir
    return AutoloadGenerator().generate(repository, root_package, manager, output_dir)


def list_installers(args):
    """Print the package types handled by the registered installers."""
    manager = build_installation_manager(args.VENDOR_DIR or Constants.VENDOR_DIR)
    for installer in manager.installers:
        print(f"{installer.type}\t{type(installer).__name__}")


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    try:
        if args.WORKING_DIR:
            if not os.path.isdir(args.WORKING_DIR):
                raise InvalidArgumentError(f"Invalid working directory specified: {args.WORKING_DIR}")
            os.chdir(args.WORKING_DIR)
        _load_config(args)
    except InvalidArgumentError as e:
        _setup_logging(args)
        logger.error("%s", e)
        sys.exit(ExitCodes.INVALID_ARGUMENT.value)
    _setup_logging(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.COMMAND),
        )

    try:
        if args.COMMAND == "installers":
            list_installers(args)
        else:
            written = dump_autoload(args)
            logger.info("Generated %d autoload files", len(written))
    except DuplicateClassError as e:
        logger.error("%s", e)
        sys.exit(ExitCodes.DUPLICATE_CLASS.value)
    except FilesystemError as e:
        logger.error("%s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    except InvalidArgumentError as e:
        logger.error("%s", e)
        sys.exit(ExitCodes.INVALID_ARGUMENT.value)

    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
