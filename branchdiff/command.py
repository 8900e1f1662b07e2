# Copyright Red Hat
#
# branchdiff/command.py - Branch comparison command interface
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""The ``branchdiff.command`` module provides both the branchdiff command
line interface infrastructure, and a simple procedural interface to the
``branchdiff`` library modules.

The procedural interface is used by the ``branchdiff`` command line tool,
and may be used by application programs, or interactively in the Python
shell by users who do not require all the features present in the
branchdiff object API.
"""
from argparse import ArgumentParser
from os.path import basename
import logging

from branchdiff import (
    BRANCHDIFF_CONFIG_FILE,
    BRANCHDIFF_DEBUG_COMMAND,
    BRANCHDIFF_DEBUG_REPO,
    BRANCHDIFF_DEBUG_COMPARE,
    BRANCHDIFF_DEBUG_REPORT,
    BRANCHDIFF_DEBUG_ALL,
    BRANCHDIFF_SUBSYSTEM_COMMAND,
    BranchDiffArgumentError,
    BranchDiffError,
    SubsystemFilter,
    set_debug_mask,
    __version__,
)
from branchdiff.compare import (
    BranchComparer,
    CompareOptions,
    ComparisonResult,
    open_repository,
)
from branchdiff.report import write_comparison_csv, write_comparison_json

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_command(msg, *args, **kwargs):
    """A wrapper for command subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": BRANCHDIFF_SUBSYSTEM_COMMAND}, **kwargs)


_DEFAULT_LOG_LEVEL = logging.WARNING
_CONSOLE_HANDLER = None


def compare_branches(
    branch_a: str, branch_b: str, options: CompareOptions
) -> ComparisonResult:
    """
    Compare two branches of the repository named in ``options``.

    :param branch_a: The name of the source (left hand) branch.
    :type branch_a: ``str``
    :param branch_b: The name of the target (right hand) branch.
    :type branch_b: ``str``
    :param options: Options controlling the comparison.
    :type options: ``CompareOptions``
    :returns: The comparison result. Changes that could not be classified
              are counted in ``ComparisonResult.failures``.
    :rtype: ``ComparisonResult``
    """
    if not branch_a or not branch_b:
        raise BranchDiffArgumentError("Both branch names must be provided")

    repo = open_repository(options.repository_dir)
    if options.work_tree is None and repo.working_tree_dir is None:
        raise BranchDiffArgumentError(
            f"Repository '{options.repository_dir}' has no work tree: "
            "use --work-tree to select a metadata directory"
        )
    try:
        return BranchComparer(repo, options).compare(branch_a, branch_b)
    finally:
        repo.close()


def write_reports(result: ComparisonResult, options: CompareOptions):
    """
    Write the CSV report, and the JSON report if enabled, for ``result``.

    :param result: The comparison result to write.
    :type result: ``ComparisonResult``
    :param options: Options naming the output files.
    :type options: ``CompareOptions``
    """
    write_comparison_csv(result, result.branch_a, result.branch_b, options.output_path)
    if options.write_json:
        write_comparison_json(result, options.json_output_path, pretty=True)


def _compare_cmd(cmd_args):
    """
    Compare branches command handler.

    :param cmd_args: Command line arguments for the command
    :returns: integer status code returned from ``main()``
    """
    if not cmd_args.source or not cmd_args.target:
        _log_error("Both branch names must be provided")
        return 1

    base = CompareOptions.from_file(cmd_args.config or BRANCHDIFF_CONFIG_FILE)
    options = CompareOptions.from_cmd_args(cmd_args, base=base)

    if not options.quiet:
        print(
            f"Comparing branches {cmd_args.source} and {cmd_args.target} "
            f"in {options.repository_dir}"
        )

    result = compare_branches(cmd_args.source, cmd_args.target, options)
    write_reports(result, options)

    if cmd_args.summary:
        print(result.summary())

    if result.failures:
        _log_error("Failed to process %d changes", result.failures)
        return 1

    if not options.quiet:
        print(f"Successfully wrote comparison to {options.output_path}")
    return 0


def setup_logging(cmd_args):
    """
    Set up branchdiff logging.
    """
    # pylint: disable=global-statement
    global _CONSOLE_HANDLER
    level = _DEFAULT_LOG_LEVEL
    if cmd_args.verbose and cmd_args.verbose > 1:
        level = logging.DEBUG
    elif cmd_args.verbose and cmd_args.verbose > 0:
        level = logging.INFO

    branchdiff_log = logging.getLogger("branchdiff")
    formatter = logging.Formatter("%(levelname)s - %(message)s")
    branchdiff_log.setLevel(level)
    if branchdiff_log.hasHandlers():
        branchdiff_log.handlers.clear()

    # Subsystem log filtering
    _branchdiff_subsystem_filter = SubsystemFilter("branchdiff")

    # Main console handler
    _CONSOLE_HANDLER = logging.StreamHandler()

    _CONSOLE_HANDLER.setLevel(level)
    _CONSOLE_HANDLER.setFormatter(formatter)
    _CONSOLE_HANDLER.addFilter(_branchdiff_subsystem_filter)

    branchdiff_log.addHandler(_CONSOLE_HANDLER)


def shutdown_logging():
    """
    Shut down branchdiff logging.
    """
    logging.shutdown()


def set_debug(debug_arg):
    """
    Set debugging mask from command line argument.
    """
    if not debug_arg:
        return

    mask_map = {
        "command": BRANCHDIFF_DEBUG_COMMAND,
        "repo": BRANCHDIFF_DEBUG_REPO,
        "compare": BRANCHDIFF_DEBUG_COMPARE,
        "report": BRANCHDIFF_DEBUG_REPORT,
        "all": BRANCHDIFF_DEBUG_ALL,
    }

    mask = 0
    for name in debug_arg.split(","):
        if name not in mask_map:
            raise ValueError(f"Unknown debug option: {name}")
        mask |= mask_map[name]
    set_debug_mask(mask)


def _add_compare_args(parser):
    parser.add_argument(
        "-s",
        "--source",
        metavar="BRANCH",
        type=str,
        help="Name of the first branch to compare",
    )
    parser.add_argument(
        "-t",
        "--target",
        metavar="BRANCH",
        type=str,
        help="Name of the second branch to compare",
    )
    parser.add_argument(
        "-D",
        "--dir",
        dest="repository_dir",
        metavar="DIR",
        type=str,
        help="Path to the repository directory (default: current directory)",
    )
    parser.add_argument(
        "-o",
        "--output",
        metavar="NAME",
        type=str,
        help="Path/name of the output CSV file without suffix "
        "(default: comparison)",
    )
    parser.add_argument(
        "-w",
        "--work-tree",
        dest="work_tree",
        metavar="DIR",
        type=str,
        help="Directory to read file metadata from (default: the repository "
        "directory)",
    )
    parser.add_argument(
        "-R",
        "--no-renames",
        dest="detect_renames",
        action="store_false",
        default=None,
        help="Report renamed files as a removal and an addition",
    )
    parser.add_argument(
        "-f",
        "--file-types",
        dest="use_magic_file_type",
        action="store_true",
        default=None,
        help="Generate file type information using libmagic",
    )
    parser.add_argument(
        "-j",
        "--json",
        dest="write_json",
        action="store_true",
        default=None,
        help="Also write the comparison as JSON to NAME.json",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=None,
        help="Do not output status messages",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print a summary of the changes found",
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        type=str,
        help=f"Configuration file to use (default: {BRANCHDIFF_CONFIG_FILE})",
    )


def main(args):
    """
    Main entry point for branchdiff.
    """
    parser = ArgumentParser(
        description="Compare the files of two branches", prog=basename(args[0])
    )

    # Global arguments
    parser.add_argument(
        "-d",
        "--debug",
        metavar="DEBUGOPTS",
        type=str,
        help="A list of debug options to enable",
    )
    parser.add_argument("-v", "--verbose", help="Enable verbose output", action="count")
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        help="Report the version number of branchdiff",
        version=__version__,
    )
    _add_compare_args(parser)

    cmd_args = parser.parse_args(args[1:])

    status = 1

    try:
        set_debug(cmd_args.debug)
    except ValueError as err:
        print(err)
        parser.print_help()
        return status

    setup_logging(cmd_args)

    _log_debug_command("Parsed %s", " ".join(args[1:]))

    if cmd_args.debug:
        status = _compare_cmd(cmd_args)
    else:
        try:
            status = _compare_cmd(cmd_args)
        except KeyboardInterrupt:  # pragma: no cover
            _log_info("Exiting on user cancel")
        except BranchDiffError as err:
            _log_error("Command failed: %s", err)

    shutdown_logging()
    return status


# vim: set et ts=4 sw=4 :
