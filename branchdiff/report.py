# Copyright Red Hat
#
# branchdiff/report.py - Branch comparison report writers
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Write comparison results as delimited tabular or JSON reports.
"""
from typing import Iterable, List
import logging
import csv
import os

from branchdiff import BRANCHDIFF_SUBSYSTEM_REPORT, ReportWriteError
from branchdiff.compare.classifier import FileDescriptorPair
from branchdiff.compare.comparer import ComparisonResult

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Sub-headers repeated for each branch column group
SIDE_HEADERS = ["Library/Object", "Type", "Compile/Promote Date", "Size (KBytes)"]


def _log_debug_report(msg, *args, **kwargs):
    """A wrapper for report subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": BRANCHDIFF_SUBSYSTEM_REPORT}, **kwargs)


def branch_headers(branch_a: str, branch_b: str) -> List[str]:
    """
    Return the first report row: each branch name heading its four column
    group.

    :param branch_a: The source branch name.
    :type branch_a: ``str``
    :param branch_b: The target branch name.
    :type branch_b: ``str``
    :returns: A list of eight strings.
    :rtype: ``List[str]``
    """
    pad = [""] * (len(SIDE_HEADERS) - 1)
    return [branch_a, *pad, branch_b, *pad]


def _remove_partial(output_path: str):
    """
    Remove a partially written report file.

    :param output_path: The path of the report that failed to write.
    :type output_path: ``str``
    """
    try:
        os.unlink(output_path)
    except FileNotFoundError:
        return
    except OSError as err:
        _log_warn("Could not remove partial report '%s': %s", output_path, err)
        return
    _log_debug_report("Removed partial report '%s'", output_path)


def write_comparison_csv(
    pairs: Iterable[FileDescriptorPair],
    branch_a: str,
    branch_b: str,
    output_path: str,
    separator: str = ",",
) -> int:
    """
    Write a comparison report to ``output_path``.

    Paths that are not valid UTF-8 are written back as their original
    bytes. If writing fails no report file is left behind.

    :param pairs: The ordered descriptor pairs to write.
    :type pairs: ``Iterable[FileDescriptorPair]``
    :param branch_a: The source branch name.
    :type branch_a: ``str``
    :param branch_b: The target branch name.
    :type branch_b: ``str``
    :param output_path: The path of the file to create.
    :type output_path: ``str``
    :param separator: The field delimiter.
    :type separator: ``str``
    :returns: The number of data rows written.
    :rtype: ``int``
    :raises ReportWriteError: If the file cannot be written.
    """
    count = 0
    try:
        with open(
            output_path, "w", encoding="utf8", errors="surrogateescape", newline=""
        ) as out:
            writer = csv.writer(out, delimiter=separator)
            writer.writerow(branch_headers(branch_a, branch_b))
            writer.writerow(SIDE_HEADERS + SIDE_HEADERS)
            for pair in pairs:
                writer.writerow(pair.to_row())
                count += 1
    except (OSError, UnicodeError, csv.Error) as err:
        _remove_partial(output_path)
        raise ReportWriteError(
            f"Could not write report to '{output_path}': {err}"
        ) from err
    _log_debug_report("Wrote %d rows to '%s'", count, output_path)
    return count


def write_comparison_json(
    result: ComparisonResult, output_path: str, pretty: bool = False
):
    """
    Write the JSON form of ``result`` to ``output_path``.

    :param result: The comparison result to write.
    :type result: ``ComparisonResult``
    :param output_path: The path of the file to create.
    :type output_path: ``str``
    :param pretty: Indent JSON to be human readable.
    :type pretty: ``bool``
    :raises ReportWriteError: If the file cannot be written.
    """
    try:
        with open(output_path, "w", encoding="utf8") as out:
            out.write(result.json(pretty=pretty))
            out.write("\n")
    except (OSError, UnicodeError) as err:
        _remove_partial(output_path)
        raise ReportWriteError(
            f"Could not write report to '{output_path}': {err}"
        ) from err
    _log_debug_report("Wrote JSON report to '%s'", output_path)
