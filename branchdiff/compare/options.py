# Copyright Red Hat
#
# branchdiff/compare/options.py - Branch comparison options
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Branch comparison options and configuration file support.
"""
from dataclasses import dataclass, fields, replace
from configparser import ConfigParser, Error as ConfigParserError
from typing import Optional, Union
from argparse import Namespace
from os.path import exists
import logging

from branchdiff import BranchDiffArgumentError

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Configuration file section for comparison options
_CFG_GLOBAL = "global"

#: Default output file base name
DEFAULT_OUTPUT = "comparison"

#: Default repository directory
DEFAULT_REPOSITORY_DIR = "."


@dataclass(frozen=True)
class CompareOptions:
    """
    Branch comparison options.
    """

    #: Path to the repository directory
    repository_dir: str = DEFAULT_REPOSITORY_DIR
    #: Output file base name (".csv" is appended)
    output: str = DEFAULT_OUTPUT
    #: Directory used for file metadata lookups (defaults to repository_dir)
    work_tree: Optional[str] = None
    #: Report exact-content renames as a single paired change
    detect_renames: bool = True
    #: Generate file type information using magic
    use_magic_file_type: bool = False
    #: Also write a JSON report alongside the CSV report
    write_json: bool = False
    #: Do not output status updates
    quiet: bool = False

    def __str__(self):
        """
        Return a human readable string representation of this
        ``CompareOptions`` instance.

        :returns: A human readable string.
        :rtype: ``str``
        """
        return "\n".join(f"{key}={val}" for key, val in self.__dict__.items())

    @property
    def working_directory(self) -> str:
        """
        The directory that repository relative paths are resolved against
        when reading file metadata.

        :returns: The effective working directory path.
        :rtype: ``str``
        """
        return self.work_tree or self.repository_dir

    @property
    def output_path(self) -> str:
        """
        The path of the CSV report file.

        :returns: The output base name with the ``.csv`` suffix.
        :rtype: ``str``
        """
        return f"{self.output}.csv"

    @property
    def json_output_path(self) -> str:
        """
        The path of the optional JSON report file.

        :returns: The output base name with the ``.json`` suffix.
        :rtype: ``str``
        """
        return f"{self.output}.json"

    @classmethod
    def from_cmd_args(
        cls, cmd_args: Namespace, base: Optional["CompareOptions"] = None
    ) -> "CompareOptions":
        """
        Initialise CompareOptions from command line arguments.

        Values present in ``cmd_args`` that are not ``None`` override the
        corresponding values of ``base`` (or the defaults if ``base`` is not
        given).

        :param cmd_args: The command line arguments.
        :type cmd_args: ``Namespace``
        :param base: Options to use for values not given on the command line.
        :type base: ``Optional[CompareOptions]``
        :returns: A new ``CompareOptions`` instance
        :rtype: ``CompareOptions``
        """
        base = base or cls()
        field_names = {f.name for f in fields(cls)}
        kwargs = {
            name: getattr(cmd_args, name)
            for name in field_names
            if getattr(cmd_args, name, None) is not None
        }
        options = replace(base, **kwargs)
        _log_debug("Initialised CompareOptions from arguments: %s", repr(options))
        return options

    @classmethod
    def from_file(cls, config_file: str) -> "CompareOptions":
        """
        Load ``CompareOptions`` from an INI-style configuration file located
        at ``config_file``.

        :param config_file: path to branchdiff.conf
        :type config_file: ``str``.
        :returns: A ``CompareOptions`` instance initialised from
                  ``config_file``.
        :rtype: ``CompareOptions``
        """
        if not exists(config_file):
            return cls()

        _log_debug("Loading configuration from '%s'", config_file)
        cfg = ConfigParser()
        try:
            cfg.read([config_file])
        except ConfigParserError as err:
            raise BranchDiffArgumentError(
                f"Could not parse configuration file '{config_file}': {err}"
            ) from err

        if not cfg.has_section(_CFG_GLOBAL):
            return cls()

        section = cfg[_CFG_GLOBAL]
        kwargs = {}
        for opt in fields(cls):
            if opt.name not in section:
                continue
            kwargs[opt.name] = _get_config_value(section, opt.name, opt.type)

        options = cls(**kwargs)
        _log_debug("Initialised CompareOptions from file: %s", repr(options))
        return options


def _get_config_value(section, name: str, type_name) -> Union[bool, str]:
    """
    Read one option from a configuration file section.

    :param section: The ``SectionProxy`` to read from.
    :param name: The option name.
    :param type_name: The declared type of the ``CompareOptions`` field.
    :returns: The option value converted to the field type.
    """
    if type_name in (bool, "bool"):
        try:
            return section.getboolean(name)
        except ValueError as err:
            raise BranchDiffArgumentError(
                f"Invalid boolean value for '{name}': {section[name]}"
            ) from err
    return section[name].strip()
