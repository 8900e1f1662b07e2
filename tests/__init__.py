# Copyright Red Hat
#
# tests/__init__.py - Branch comparison test package
#
# This file is part of the branchdiff project.
#
# SPDX-License-Identifier: Apache-2.0
import logging
import os
import time

log = logging.getLogger()
log.setLevel(logging.DEBUG)
formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
file_handler = logging.FileHandler("test.log")
file_handler.setFormatter(formatter)
console_handler = logging.StreamHandler()
console_handler.setFormatter(formatter)
log.addHandler(file_handler)
log.addHandler(console_handler)

os.environ["TZ"] = "UTC"
time.tzset()


class MockArgs(object):
    source = None
    target = None
    repository_dir = None
    output = None
    work_tree = None
    detect_renames = None
    use_magic_file_type = None
    write_json = None
    quiet = None
    summary = False
    config = None
    debug = None
    verbose = 0
