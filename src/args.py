"""Argument parsing functionality for vendorkit."""

import argparse
from constants import Constants

def _add_common_arguments(parser):
    """Options shared by every subcommand."""
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Only report warnings and errors on the console.",
                        action="store_true")
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--working-dir",
                        dest="WORKING_DIR",
                        help="Run as if started in this directory",
                        action="store",
                        type=str)
    parser.add_argument("--vendor-dir",
                        dest="VENDOR_DIR",
                        help=f"Installation root (default: {Constants.VENDOR_DIR})",
                        action="store",
                        type=str)

def build_parser():
    """Build the argument parser with its subcommands."""
    parser = argparse.ArgumentParser(
        prog="vendorkit",
        description="vendorkit - package installation and PHP autoload generation",
        add_help=True,
    )
    subparsers = parser.add_subparsers(dest="COMMAND", metavar="COMMAND")
    subparsers.required = True

    dump = subparsers.add_parser("dump-autoload",
                                 help="Generate the autoload files for the installed packages")
    _add_common_arguments(dump)
    dump.add_argument("--manifest",
                      dest="MANIFEST",
                      help=f"Root package manifest (default: {Constants.MANIFEST_FILE})",
                      action="store",
                      type=str)
    dump.add_argument("--installed",
                      dest="INSTALLED",
                      help="Installed packages file (default: <vendor>/<autoload-dir>/installed.json)",
                      action="store",
                      type=str)
    dump.add_argument("--output-dir",
                      dest="OUTPUT_DIR",
                      help="Directory for generated files (default: <vendor>/<autoload-dir>)",
                      action="store",
                      type=str)

    installers = subparsers.add_parser("installers",
                                       help="List the registered installer package types")
    _add_common_arguments(installers)

    return parser

def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
