# Copyright Red Hat
#
# branchdiff/__init__.py - Branch comparison package initialisation
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Branchdiff top-level package.
"""
from ._branchdiff import *  # noqa: F401, F403
from ._branchdiff import __all__  # noqa: F401

__version__ = "0.1.0"
