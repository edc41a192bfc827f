# __init__.py -- The tests for treegraft
# Copyright (C) 2026 The treegraft developers
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# treegraft is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Tests for treegraft."""

import os
import unittest
from unittest import TestCase as _TestCase

_ENVIRONMENT = {
    "HOME": "/nonexistent",
    "GIT_COMMITTER_NAME": "Test Committer",
    "GIT_COMMITTER_EMAIL": "committer@example.com",
    "GIT_TRACE": None,
    "GITHUB_TOKEN": None,
}


class TestCase(_TestCase):
    """Base class for treegraft tests.

    Runs every test with a predictable environment.
    """

    def setUp(self) -> None:
        super().setUp()
        self._old_environ = {name: os.environ.get(name) for name in _ENVIRONMENT}
        for name, value in _ENVIRONMENT.items():
            if value is None:
                os.environ.pop(name, None)
            else:
                os.environ[name] = value

    def tearDown(self) -> None:
        for name, value in self._old_environ.items():
            if value is None:
                os.environ.pop(name, None)
            else:
                os.environ[name] = value
        super().tearDown()

    def overrideEnv(self, name: str, value: "str | None") -> None:
        def restore(oldvalue: "str | None") -> None:
            if oldvalue is None:
                os.environ.pop(name, None)
            else:
                os.environ[name] = oldvalue

        self.addCleanup(restore, os.environ.get(name))
        if value is None:
            os.environ.pop(name, None)
        else:
            os.environ[name] = value


def test_suite() -> unittest.TestSuite:
    loader = unittest.TestLoader()
    here = os.path.dirname(__file__)
    return loader.discover(here, top_level_dir=os.path.dirname(here))
