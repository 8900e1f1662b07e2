# Copyright Red Hat
#
# tests/compare/test_treediff.py - Tree differ tests.
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
import os
import unittest

from branchdiff import DiffComputationError
from branchdiff.compare.resolver import Snapshot, resolve
from branchdiff.compare.treediff import (
    DiffType,
    StructuralChange,
    TreeDiffer,
    diff,
)

from ._util import (
    EXECUTABLE_FILE_MODE,
    REGULAR_FILE_MODE,
    SYMLINK_MODE,
    RepoBuilder,
    make_snapshot,
)


class TestStructuralChange(unittest.TestCase):
    """Test StructuralChange construction and ordering."""

    def test_inferred_types(self):
        self.assertEqual(StructuralChange("", "a").diff_type, DiffType.ADDED)
        self.assertEqual(StructuralChange("a", "").diff_type, DiffType.REMOVED)
        self.assertEqual(StructuralChange("a", "a").diff_type, DiffType.MODIFIED)
        self.assertEqual(StructuralChange("a", "b").diff_type, DiffType.RENAMED)

    def test_requires_a_path(self):
        with self.assertRaises(ValueError):
            StructuralChange("", "")

    def test_path_prefers_from_path(self):
        self.assertEqual(StructuralChange("old", "new").path, "old")
        self.assertEqual(StructuralChange("", "new").path, "new")

    def test_str(self):
        self.assertEqual(str(StructuralChange("a", "")), "removed: a")
        self.assertEqual(str(StructuralChange("a", "b")), "renamed: a -> b")

    def test_to_dict(self):
        self.assertEqual(
            StructuralChange("", "x.txt").to_dict(),
            {"from_path": "", "to_path": "x.txt", "diff_type": "added"},
        )


class TestTreeDifferMocked(unittest.TestCase):
    """Test TreeDiffer against in-memory trees."""

    def test_identical_trees(self):
        snap_a = make_snapshot("a", [("x", "1")], tree_id="same")
        snap_b = make_snapshot("b", [("y", "2")], tree_id="same")
        self.assertEqual(TreeDiffer().diff(snap_a, snap_b), [])
        snap_a.tree.traverse.assert_not_called()

    def test_changes_sorted_by_path(self):
        snap_a = make_snapshot("a", [])
        snap_b = make_snapshot("b", [("b.txt", "2"), ("a.txt", "1")])
        changes = TreeDiffer().diff(snap_a, snap_b)
        self.assertEqual([c.to_path for c in changes], ["a.txt", "b.txt"])
        self.assertTrue(all(c.diff_type == DiffType.ADDED for c in changes))

    def test_modified_removed_added(self):
        snap_a = make_snapshot("a", [("keep", "1"), ("mod", "2"), ("gone", "3")])
        snap_b = make_snapshot("b", [("keep", "1"), ("mod", "4"), ("new", "5")])
        changes = TreeDiffer().diff(snap_a, snap_b)
        self.assertEqual(
            changes,
            [
                StructuralChange("gone", "", DiffType.REMOVED),
                StructuralChange("mod", "mod", DiffType.MODIFIED),
                StructuralChange("", "new", DiffType.ADDED),
            ],
        )

    def test_rename_detection(self):
        snap_a = make_snapshot("a", [("old.c", "1")])
        snap_b = make_snapshot("b", [("new.c", "1")])
        changes = TreeDiffer().diff(snap_a, snap_b)
        self.assertEqual(changes, [StructuralChange("old.c", "new.c", DiffType.RENAMED)])

    def test_rename_detection_disabled(self):
        snap_a = make_snapshot("a", [("old.c", "1")])
        snap_b = make_snapshot("b", [("new.c", "1")])
        changes = TreeDiffer(detect_renames=False).diff(snap_a, snap_b)
        self.assertEqual(
            changes,
            [
                StructuralChange("", "new.c", DiffType.ADDED),
                StructuralChange("old.c", "", DiffType.REMOVED),
            ],
        )

    def test_rename_uses_each_destination_once(self):
        snap_a = make_snapshot("a", [("a1", "1"), ("a2", "1")])
        snap_b = make_snapshot("b", [("z2", "1"), ("z1", "1"), ("z3", "1")])
        changes = TreeDiffer().diff(snap_a, snap_b)
        self.assertEqual(
            changes,
            [
                StructuralChange("a1", "z1", DiffType.RENAMED),
                StructuralChange("a2", "z2", DiffType.RENAMED),
                StructuralChange("", "z3", DiffType.ADDED),
            ],
        )

    def test_mode_only_change(self):
        snap_a = make_snapshot("a", [("run.sh", "1", REGULAR_FILE_MODE)])
        snap_b = make_snapshot("b", [("run.sh", "1", EXECUTABLE_FILE_MODE)])
        self.assertEqual(
            TreeDiffer().diff(snap_a, snap_b),
            [StructuralChange("run.sh", "run.sh", DiffType.MODIFIED)],
        )

    def test_file_replaced_by_symlink(self):
        snap_a = make_snapshot("a", [("lib/current", "1", REGULAR_FILE_MODE)])
        snap_b = make_snapshot("b", [("lib/current", "1", SYMLINK_MODE)])
        self.assertEqual(
            TreeDiffer().diff(snap_a, snap_b),
            [StructuralChange("lib/current", "lib/current", DiffType.MODIFIED)],
        )

    def test_rename_with_mode_change(self):
        snap_a = make_snapshot("a", [("build.sh", "1", REGULAR_FILE_MODE)])
        snap_b = make_snapshot("b", [("bin/build", "1", EXECUTABLE_FILE_MODE)])
        self.assertEqual(
            TreeDiffer().diff(snap_a, snap_b),
            [StructuralChange("build.sh", "bin/build", DiffType.RENAMED)],
        )

    def test_tree_read_error(self):
        snap_a = make_snapshot("a", [])
        snap_b = make_snapshot("b", [])
        snap_b.tree.traverse.side_effect = ValueError("corrupt tree")
        with self.assertRaises(DiffComputationError):
            TreeDiffer().diff(snap_a, snap_b)

    def test_tree_id_error(self):
        class BrokenTree:
            @property
            def hexsha(self):
                raise OSError("object store unavailable")

        snap_a = Snapshot("a", "c" * 40, BrokenTree())
        snap_b = make_snapshot("b", [])
        with self.assertRaises(DiffComputationError):
            TreeDiffer().diff(snap_a, snap_b)


class TestTreeDifferRepository(unittest.TestCase):
    """Test TreeDiffer against real repository trees."""

    def setUp(self):
        self.builder = RepoBuilder()

    def tearDown(self):
        self.builder.cleanup()

    def test_same_commit(self):
        self.builder.commit_branch("main", {"README": 100})
        self.builder.repo.create_head("other", "main")
        repo = self.builder.repo
        self.assertEqual(diff(resolve(repo, "main"), resolve(repo, "other")), [])

    def test_nested_paths(self):
        main = self.builder.commit_branch(
            "main", {"README": 100, "lib/a.so": 512, "lib/sub/c.o": 300}
        )
        self.builder.commit_branch(
            "feature",
            {"README": 100, "lib/b.so": 2048, "lib/sub/c.o": 301},
            parent=main,
        )
        repo = self.builder.repo
        changes = diff(resolve(repo, "main"), resolve(repo, "feature"))
        self.assertEqual(
            changes,
            [
                StructuralChange("lib/a.so", "", DiffType.REMOVED),
                StructuralChange("", "lib/b.so", DiffType.ADDED),
                StructuralChange("lib/sub/c.o", "lib/sub/c.o", DiffType.MODIFIED),
            ],
        )

    def test_repository_rename(self):
        main = self.builder.commit_branch("main", {"src/old.c": b"int main;\n"})
        self.builder.commit_branch(
            "feature", {"src/new.c": b"int main;\n"}, parent=main
        )
        repo = self.builder.repo
        self.assertEqual(
            diff(resolve(repo, "main"), resolve(repo, "feature")),
            [StructuralChange("src/old.c", "src/new.c", DiffType.RENAMED)],
        )
        self.assertEqual(
            diff(resolve(repo, "main"), resolve(repo, "feature"), detect_renames=False),
            [
                StructuralChange("", "src/new.c", DiffType.ADDED),
                StructuralChange("src/old.c", "", DiffType.REMOVED),
            ],
        )

    def test_repository_mode_change(self):
        main = self.builder.commit_branch("main", {"run.sh": 100})
        os.chmod(self.builder.full_path("run.sh"), 0o755)
        self.builder.commit_branch("feature", {"run.sh": 100}, parent=main)
        repo = self.builder.repo
        self.assertEqual(
            diff(resolve(repo, "main"), resolve(repo, "feature")),
            [StructuralChange("run.sh", "run.sh", DiffType.MODIFIED)],
        )
