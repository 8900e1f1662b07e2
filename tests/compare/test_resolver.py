# Copyright Red Hat
#
# tests/compare/test_resolver.py - Branch snapshot resolution tests.
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
import os
import unittest

from branchdiff import BranchNotFoundError, CommitNotFoundError
from branchdiff.compare.resolver import SnapshotResolver, resolve

from ._util import RepoBuilder


class TestSnapshotResolver(unittest.TestCase):
    """Test resolving branch names to snapshots."""

    def setUp(self):
        self.builder = RepoBuilder()
        self.main = self.builder.commit_branch("main", {"README": 100})
        self.feature = self.builder.commit_branch(
            "feature", {"README": 100, "lib/a.so": 512}, parent=self.main
        )

    def tearDown(self):
        self.builder.cleanup()

    def _write_ref(self, name, sha):
        ref_path = os.path.join(self.builder.repo.git_dir, "refs", "heads", name)
        with open(ref_path, "w", encoding="utf8") as f:
            f.write(f"{sha}\n")

    def test_resolve(self):
        snapshot = resolve(self.builder.repo, "feature")
        self.assertEqual(snapshot.branch, "feature")
        self.assertEqual(snapshot.commit_id, self.feature.hexsha)
        self.assertEqual(snapshot.tree_id, self.feature.tree.hexsha)
        self.assertEqual(str(snapshot), f"feature@{self.feature.hexsha[0:12]}")

    def test_resolve_same_commit_twice(self):
        resolver = SnapshotResolver(self.builder.repo)
        self.assertEqual(
            resolver.resolve("main").tree_id, resolver.resolve("main").tree_id
        )

    def test_resolve_missing_branch(self):
        resolver = SnapshotResolver(self.builder.repo)
        with self.assertRaises(BranchNotFoundError) as cm:
            resolver.resolve("nope")
        self.assertEqual(str(cm.exception), "Could not find branch 'nope'")

    def test_resolve_no_partial_match(self):
        resolver = SnapshotResolver(self.builder.repo)
        with self.assertRaises(BranchNotFoundError):
            resolver.resolve("feat")

    def test_resolve_empty_name(self):
        resolver = SnapshotResolver(self.builder.repo)
        with self.assertRaises(BranchNotFoundError):
            resolver.resolve("")

    def test_resolve_dangling_branch(self):
        self._write_ref("dangling", "0123456789abcdef0123456789abcdef01234567")
        resolver = SnapshotResolver(self.builder.repo)
        with self.assertRaises(CommitNotFoundError) as cm:
            resolver.resolve("dangling")
        self.assertEqual(
            cm.exception.commit_id, "0123456789abcdef0123456789abcdef01234567"
        )

    def test_resolve_branch_to_non_commit(self):
        self._write_ref("treeref", self.main.tree.hexsha)
        resolver = SnapshotResolver(self.builder.repo)
        with self.assertRaises(CommitNotFoundError):
            resolver.resolve("treeref")
