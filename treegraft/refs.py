# refs.py -- Reference name handling
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

"""Ref name handling."""

from typing import Union

from .errors import RefFormatError

Ref = bytes

REFS_PREFIX = b"refs/"
LOCAL_BRANCH_PREFIX = b"refs/heads/"
BAD_REF_CHARS = set(b"\177 ~^:?*[")


def check_ref_format(refname: Ref) -> bool:
    """Check if a refname is correctly formatted.

    Implements all the same rules as git-check-ref-format[1].

    [1]
    http://www.kernel.org/pub/software/scm/git/docs/git-check-ref-format.html

    Args:
      refname: The refname to check
    Returns: True if refname is valid, False otherwise
    """
    if b"/." in refname or refname.startswith(b"."):
        return False
    if b"/" not in refname:
        return False
    if b".." in refname:
        return False
    for i, c in enumerate(refname):
        if ord(refname[i : i + 1]) < 0o40 or c in BAD_REF_CHARS:
            return False
    if refname[-1] in b"/.":
        return False
    if refname.endswith(b".lock"):
        return False
    if b"@{" in refname:
        return False
    if b"\\" in refname:
        return False
    return True


def check_refname(name: Ref) -> None:
    """Ensure a refname is valid and lives under refs/.

    Raises:
      RefFormatError: if the name is not valid.
    """
    if not name.startswith(REFS_PREFIX) or not check_ref_format(name[5:]):
        raise RefFormatError(name)


def to_ref(name: Union[str, bytes]) -> Ref:
    """Expand a reference name to its full form.

    ``feature`` becomes ``refs/heads/feature`` and ``heads/feature`` becomes
    ``refs/heads/feature``; full names are returned unchanged.
    """
    if isinstance(name, str):
        name = name.encode("utf-8")
    if name.startswith(REFS_PREFIX):
        ref = name
    elif b"/" in name:
        ref = REFS_PREFIX + name
    else:
        ref = LOCAL_BRANCH_PREFIX + name
    check_refname(ref)
    return ref
