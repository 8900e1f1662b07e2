# Copyright Red Hat
#
# tests/test_branchdiff.py - Branchdiff core package tests
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import logging

import branchdiff as bd

log = logging.getLogger()


class BranchdiffTests(unittest.TestCase):
    """Test branchdiff package"""

    def tearDown(self):
        bd.set_debug_mask(0)

    def test_set_debug_mask(self):
        bd.set_debug_mask(bd.BRANCHDIFF_DEBUG_ALL)
        self.assertEqual(bd.get_debug_mask(), bd.BRANCHDIFF_DEBUG_ALL)

    def test_set_debug_mask_subset(self):
        mask = bd.BRANCHDIFF_DEBUG_REPO | bd.BRANCHDIFF_DEBUG_REPORT
        bd.set_debug_mask(mask)
        self.assertEqual(bd.get_debug_mask(), mask)

    def test_set_debug_mask_bad_mask(self):
        with self.assertRaises(ValueError):
            bd.set_debug_mask(bd.BRANCHDIFF_DEBUG_ALL + 1)
        with self.assertRaises(ValueError):
            bd.set_debug_mask(-1)

    def test_subsystem_filter(self):
        bd.set_debug_mask(bd.BRANCHDIFF_DEBUG_REPO)
        filt = bd.SubsystemFilter("branchdiff")

        def _record(level, subsystem=None):
            record = logging.LogRecord(
                "branchdiff.x", level, __file__, 1, "msg", None, None
            )
            if subsystem:
                record.subsystem = subsystem
            return record

        self.assertTrue(filt.filter(_record(logging.DEBUG)))
        self.assertTrue(filt.filter(_record(logging.INFO, bd.BRANCHDIFF_SUBSYSTEM_COMPARE)))
        self.assertTrue(filt.filter(_record(logging.DEBUG, bd.BRANCHDIFF_SUBSYSTEM_REPO)))
        self.assertFalse(filt.filter(_record(logging.DEBUG, bd.BRANCHDIFF_SUBSYSTEM_COMPARE)))

    def test_branch_not_found_message(self):
        err = bd.BranchNotFoundError("feature")
        self.assertEqual(str(err), "Could not find branch 'feature'")
        self.assertEqual(err.branch_name, "feature")
        self.assertIsInstance(err, bd.BranchDiffError)

    def test_metadata_unavailable_path(self):
        err = bd.MetadataUnavailableError("lib/a.so", "No such file or directory")
        self.assertEqual(err.path, "lib/a.so")
        self.assertIn("lib/a.so", str(err))
        self.assertIn("No such file or directory", str(err))

    def test_partial_comparison_error(self):
        err = bd.PartialComparisonError(2, None)
        self.assertEqual(str(err), "Failed to process 2 changes")
        self.assertEqual(err.failures, 2)

    def test_repository_not_found_message(self):
        err = bd.RepositoryNotFoundError("/nonexistent", "no such directory")
        self.assertIn("/nonexistent", str(err))
        self.assertTrue(str(err).endswith("no such directory"))
