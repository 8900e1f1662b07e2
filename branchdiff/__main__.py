# Copyright Red Hat
#
# branchdiff/__main__.py - Branch comparison command entry point
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Entry point for ``python -m branchdiff`` and the ``branchdiff`` command.
"""
import sys

from branchdiff.command import main


def run():
    """Run the branchdiff command with ``sys.argv``."""
    sys.exit(main(sys.argv))


if __name__ == "__main__":
    run()
