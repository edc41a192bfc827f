# test_refs.py -- tests for refs.py
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

"""Tests for ref name handling."""

from treegraft.errors import RefFormatError
from treegraft.refs import check_ref_format, check_refname, to_ref

from . import TestCase


class CheckRefFormatTests(TestCase):
    """Tests for the check_ref_format function.

    These are the same tests as in the git test suite.
    """

    def test_valid(self) -> None:
        self.assertTrue(check_ref_format(b"heads/foo"))
        self.assertTrue(check_ref_format(b"foo/bar/baz"))
        self.assertTrue(check_ref_format(b"refs///heads/foo"))
        self.assertTrue(check_ref_format(b"foo./bar"))
        self.assertTrue(check_ref_format(b"heads/foo@bar"))
        self.assertTrue(check_ref_format(b"heads/fix.lock.error"))

    def test_invalid(self) -> None:
        self.assertFalse(check_ref_format(b"foo"))
        self.assertFalse(check_ref_format(b"heads/foo/"))
        self.assertFalse(check_ref_format(b"./foo"))
        self.assertFalse(check_ref_format(b".refs/foo"))
        self.assertFalse(check_ref_format(b"heads/foo..bar"))
        self.assertFalse(check_ref_format(b"heads/foo?bar"))
        self.assertFalse(check_ref_format(b"heads/foo.lock"))
        self.assertFalse(check_ref_format(b"heads/v@{ation"))
        self.assertFalse(check_ref_format(b"heads/foo\bar"))


class CheckRefnameTests(TestCase):
    def test_valid(self) -> None:
        check_refname(b"refs/heads/main")

    def test_outside_refs(self) -> None:
        self.assertRaises(RefFormatError, check_refname, b"heads/main")
        self.assertRaises(RefFormatError, check_refname, b"HEAD")


class ToRefTests(TestCase):
    def test_branch_name(self) -> None:
        self.assertEqual(b"refs/heads/feature", to_ref("feature"))
        self.assertEqual(b"refs/heads/feature", to_ref(b"feature"))

    def test_partial_name(self) -> None:
        self.assertEqual(b"refs/heads/topic/x", to_ref("heads/topic/x"))
        self.assertEqual(b"refs/tags/v1.0", to_ref("tags/v1.0"))

    def test_full_name(self) -> None:
        self.assertEqual(b"refs/heads/main", to_ref(b"refs/heads/main"))

    def test_invalid(self) -> None:
        self.assertRaises(RefFormatError, to_ref, "bad..name")
        self.assertRaises(RefFormatError, to_ref, "refs/heads/with space")
