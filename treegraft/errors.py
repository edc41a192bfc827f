# errors.py -- errors for treegraft
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

"""treegraft-related exception classes."""

from collections.abc import Sequence
from typing import Optional


def _decode(value: bytes) -> str:
    return value.decode("utf-8", "replace")


class WrongObjectException(Exception):
    """Baseclass for all the _ is not a _ exceptions on objects.

    Do not instantiate directly.

    Subclasses should define a type_name attribute that indicates what
    was expected if they were raised.
    """

    type_name: str

    def __init__(self, sha: bytes) -> None:
        """Initialize a WrongObjectException.

        Args:
          sha: The SHA of the object that was not of the expected type.
        """
        self.sha = sha
        Exception.__init__(self, f"{_decode(sha)} is not a {self.type_name}")


class NotCommitError(WrongObjectException):
    """Indicates that the sha requested does not point to a commit."""

    type_name = "commit"


class NotTreeError(WrongObjectException):
    """Indicates that the sha requested does not point to a tree."""

    type_name = "tree"


class NotBlobError(WrongObjectException):
    """Indicates that the sha requested does not point to a blob."""

    type_name = "blob"


class ConflictError(Exception):
    """A commit could not be merged cleanly onto the destination tip."""

    def __init__(self, commit_id: bytes, paths: Sequence[bytes]) -> None:
        """Initialize a ConflictError.

        Args:
          commit_id: SHA of the source commit that failed to apply
          paths: Conflicting paths, relative to the root of the tree
        """
        self.commit_id = commit_id
        self.paths = list(paths)
        super().__init__(
            f"Merge conflict applying {_decode(commit_id)} in: "
            + ", ".join(_decode(p) for p in self.paths)
        )


class UnsupportedCommit(Exception):
    """A source commit does not have exactly one parent."""

    def __init__(self, commit_id: bytes, num_parents: int) -> None:
        self.commit_id = commit_id
        self.num_parents = num_parents
        super().__init__(
            f"Cannot cherry-pick {_decode(commit_id)}: "
            f"expected exactly one parent, found {num_parents}"
        )


class ConcurrentUpdateError(Exception):
    """The reference moved between reading it and writing it."""

    def __init__(self, ref: bytes, expected: Optional[bytes] = None) -> None:
        self.ref = ref
        self.expected = expected
        message = f"Update is not a fast forward: {_decode(ref)} was modified"
        if expected is not None:
            message += f" (expected {_decode(expected)})"
        super().__init__(message)


class RefFormatError(Exception):
    """Indicates an invalid ref name."""


class ObjectStoreError(Exception):
    """The object store failed to perform a request."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        self.status = status
        super().__init__(message)


class HTTPUnauthorized(ObjectStoreError):
    """Raised when authentication fails."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"No valid credentials provided for {url}", status=401)
