# objects.py -- Content-addressed git objects
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

"""Blobs, trees and commits.

Objects are identified by the hex SHA-1 of their git serialization, so two
objects with the same id always have the same content. Objects obtained from
a store remember the id they were stored under.
"""

import binascii
import stat
from collections.abc import Iterable, Iterator
from hashlib import sha1
from typing import NamedTuple, Optional, Union

ObjectID = bytes

ZERO_SHA = b"0" * 40

S_IFGITLINK = 0o160000

BLOB_TYPE = b"blob"
TREE_TYPE = b"tree"
COMMIT_TYPE = b"commit"

_TREE_HEADER = b"tree"
_PARENT_HEADER = b"parent"
_AUTHOR_HEADER = b"author"
_COMMITTER_HEADER = b"committer"


def S_ISGITLINK(m: int) -> bool:
    """Check if a mode indicates a submodule.

    Args:
      m: Mode to check
    Returns: a ``boolean``
    """
    return stat.S_IFMT(m) == S_IFGITLINK


def object_type_for_mode(mode: int) -> bytes:
    """Return the type name of the object a tree entry with `mode` points at."""
    if stat.S_ISDIR(mode):
        return TREE_TYPE
    if S_ISGITLINK(mode):
        return COMMIT_TYPE
    return BLOB_TYPE


def valid_hexsha(hex: Union[bytes, str]) -> bool:
    """Check whether `hex` looks like a full hex object id."""
    if len(hex) != 40:
        return False
    try:
        binascii.unhexlify(hex)
    except (TypeError, binascii.Error):
        return False
    else:
        return True


def to_object_id(value: Union[bytes, str]) -> ObjectID:
    """Normalize a str or bytes object id to lowercase hex bytes."""
    if isinstance(value, str):
        value = value.encode("ascii")
    if not valid_hexsha(value):
        raise ValueError(f"invalid object id {value!r}")
    return value.lower()


def format_timezone(offset: int) -> bytes:
    """Format a timezone offset in seconds as git does, e.g. ``-0500``."""
    if offset % 60 != 0:
        raise ValueError("Unable to handle non-minute offset.")
    sign = "-" if offset < 0 else "+"
    offset = abs(offset)
    return f"{sign}{offset // 3600:02d}{(offset // 60) % 60:02d}".encode("ascii")


class FixedSha:
    """SHA object that behaves like hashlib's but is given a fixed value."""

    __slots__ = ("_hexsha",)

    def __init__(self, hexsha: ObjectID) -> None:
        self._hexsha = to_object_id(hexsha)

    def hexdigest(self) -> str:
        return self._hexsha.decode("ascii")


class ShaFile:
    """A git object addressed by the SHA-1 of its serialization."""

    type_name: bytes

    def __init__(self) -> None:
        self._sha: Optional[FixedSha] = None

    def as_raw_chunks(self) -> list[bytes]:
        """Return the serialized object body, without the header."""
        raise NotImplementedError(self.as_raw_chunks)

    def as_raw_string(self) -> bytes:
        return b"".join(self.as_raw_chunks())

    def _header(self, length: int) -> bytes:
        return self.type_name + b" " + str(length).encode("ascii") + b"\0"

    def sha(self):
        """The SHA-1 object of this object."""
        if self._sha is not None:
            return self._sha
        chunks = self.as_raw_chunks()
        obj = sha1(self._header(sum(len(c) for c in chunks)))
        for chunk in chunks:
            obj.update(chunk)
        return obj

    @property
    def id(self) -> ObjectID:
        """The hex SHA-1 of this object."""
        return self.sha().hexdigest().encode("ascii")

    def set_id(self, sha: ObjectID) -> None:
        """Pin the id of this object to the one a store assigned it."""
        self._sha = FixedSha(sha)

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ShaFile) and self.id == other.id

    def __ne__(self, other: object) -> bool:
        return not self == other

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.id.decode('ascii')}>"


class Blob(ShaFile):
    """A git blob."""

    type_name = BLOB_TYPE

    def __init__(self, data: bytes = b"") -> None:
        super().__init__()
        self.data = data

    @classmethod
    def from_string(cls, data: bytes) -> "Blob":
        return cls(data)

    def as_raw_chunks(self) -> list[bytes]:
        return [self.data]

    def copy(self) -> "Blob":
        blob = Blob(self.data)
        blob._sha = self._sha
        return blob


class TreeEntry(NamedTuple):
    """Named tuple encapsulating a single tree entry."""

    path: bytes
    mode: int
    sha: ObjectID

    @property
    def type_name(self) -> bytes:
        return object_type_for_mode(self.mode)


def _tree_sort_key(item: tuple[bytes, tuple[int, ObjectID]]) -> bytes:
    name, (mode, _sha) = item
    if stat.S_ISDIR(mode):
        return name + b"/"
    return name


def sorted_tree_items(
    entries: dict[bytes, tuple[int, ObjectID]],
) -> Iterator[TreeEntry]:
    """Iterate over tree entries in the order git serializes them.

    Args:
      entries: Dictionary mapping names to (mode, sha) tuples
    Returns: Iterator over TreeEntry
    """
    for name, (mode, sha) in sorted(entries.items(), key=_tree_sort_key):
        yield TreeEntry(name, mode, sha)


def check_tree_entry_name(name: bytes) -> None:
    if not name or name in (b".", b"..") or b"/" in name or b"\0" in name:
        raise ValueError(f"invalid tree entry name {name!r}")


class Tree(ShaFile):
    """A git tree: a directory snapshot mapping names to (mode, sha)."""

    type_name = TREE_TYPE

    def __init__(self) -> None:
        super().__init__()
        self._entries: dict[bytes, tuple[int, ObjectID]] = {}

    @classmethod
    def from_entries(cls, entries: Iterable[TreeEntry]) -> "Tree":
        tree = cls()
        for entry in entries:
            tree.add(entry.path, entry.mode, entry.sha)
        return tree

    def add(self, name: bytes, mode: int, sha: ObjectID) -> None:
        """Add an entry to the tree.

        Args:
          name: The name of the entry, a single path component
          mode: The mode of the entry as an integral type
          sha: The hex SHA of the entry
        """
        check_tree_entry_name(name)
        self._entries[name] = (mode, to_object_id(sha))
        self._sha = None

    def get(
        self, name: bytes, default: Optional[tuple[int, ObjectID]] = None
    ) -> Optional[tuple[int, ObjectID]]:
        return self._entries.get(name, default)

    def __contains__(self, name: bytes) -> bool:
        return name in self._entries

    def __getitem__(self, name: bytes) -> tuple[int, ObjectID]:
        return self._entries[name]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._entries)

    def items(self) -> Iterator[TreeEntry]:
        """Iterate over the entries in git's canonical order."""
        return sorted_tree_items(self._entries)

    def as_raw_chunks(self) -> list[bytes]:
        return [
            b"%o %s\0%s" % (mode, name, binascii.unhexlify(sha))
            for name, mode, sha in self.items()
        ]

    def copy(self) -> "Tree":
        tree = Tree()
        tree._entries = dict(self._entries)
        tree._sha = self._sha
        return tree


class Commit(ShaFile):
    """A git commit.

    ``author`` and ``committer`` are identities of the form
    ``b"Name <email>"``; times are seconds since the epoch and timezones are
    offsets in seconds east of UTC.
    """

    type_name = COMMIT_TYPE

    def __init__(self) -> None:
        super().__init__()
        self.tree: ObjectID = ZERO_SHA
        self.parents: list[ObjectID] = []
        self.author: bytes = b""
        self.committer: bytes = b""
        self.author_time = 0
        self.author_timezone = 0
        self.commit_time = 0
        self.commit_timezone = 0
        self.message: bytes = b""

    def as_raw_chunks(self) -> list[bytes]:
        for identity in (self.author, self.committer):
            if b"\n" in identity or b"\0" in identity:
                raise ValueError(f"invalid identity {identity!r}")
        chunks = [_TREE_HEADER + b" " + self.tree + b"\n"]
        for parent in self.parents:
            chunks.append(_PARENT_HEADER + b" " + parent + b"\n")
        chunks.append(
            b"%s %s %d %s\n"
            % (
                _AUTHOR_HEADER,
                self.author,
                self.author_time,
                format_timezone(self.author_timezone),
            )
        )
        chunks.append(
            b"%s %s %d %s\n"
            % (
                _COMMITTER_HEADER,
                self.committer,
                self.commit_time,
                format_timezone(self.commit_timezone),
            )
        )
        # There must be a new line after the headers
        chunks.append(b"\n")
        chunks.append(self.message)
        return chunks

    def copy(self) -> "Commit":
        commit = Commit()
        commit.tree = self.tree
        commit.parents = list(self.parents)
        commit.author = self.author
        commit.committer = self.committer
        commit.author_time = self.author_time
        commit.author_timezone = self.author_timezone
        commit.commit_time = self.commit_time
        commit.commit_timezone = self.commit_timezone
        commit.message = self.message
        commit._sha = self._sha
        return commit
