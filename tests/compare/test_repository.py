# Copyright Red Hat
#
# tests/compare/test_repository.py - Repository access tests.
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
import os
import tempfile
import unittest

from branchdiff import RepositoryNotFoundError
from branchdiff.compare.repository import open_repository

from ._util import RepoBuilder


class TestOpenRepository(unittest.TestCase):
    """Test opening repositories."""

    def test_open_repository(self):
        builder = RepoBuilder()
        try:
            repo = open_repository(builder.path)
            self.assertEqual(
                os.path.realpath(repo.working_tree_dir),
                os.path.realpath(builder.path),
            )
            repo.close()
        finally:
            builder.cleanup()

    def test_open_repository_missing_path(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            missing = os.path.join(tmpdir, "missing")
            with self.assertRaises(RepositoryNotFoundError) as cm:
                open_repository(missing)
            self.assertEqual(cm.exception.path, missing)

    def test_open_repository_not_a_repository(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(RepositoryNotFoundError):
                open_repository(tmpdir)
