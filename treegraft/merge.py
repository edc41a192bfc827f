# merge.py -- Three-way merge of trees
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

"""Three-way merge of trees held in a remote object store.

Entries are compared by (mode, sha) only; two entries with the same sha
have the same content. Nothing is written to the store until the whole
merge is known to be clean.
"""

import stat
from collections.abc import Sequence
from typing import Optional, Union

import merge3

from .log_utils import getLogger
from .object_store import ObjectStoreClient
from .objects import ObjectID, Tree, TreeEntry

logger = getLogger(__name__)

Entry = tuple[int, ObjectID]


class _PendingBlob:
    """Merged file contents that have not been written yet."""

    __slots__ = ("data",)

    def __init__(self, data: bytes) -> None:
        self.data = data


class _PendingTree:
    """A merged tree that has not been written yet."""

    __slots__ = ("entries",)

    def __init__(self, entries: dict[bytes, tuple[int, "_Value"]]) -> None:
        self.entries = entries


_Value = Union[ObjectID, _PendingBlob, _PendingTree]


class MergeResult:
    """Outcome of a tree merge.

    Either ``tree`` is the id of the merged tree and ``conflicts`` is empty,
    or ``tree`` is None and ``conflicts`` lists the conflicting paths.
    """

    __slots__ = ("tree", "conflicts")

    def __init__(
        self, tree: Optional[ObjectID] = None, conflicts: Sequence[bytes] = ()
    ) -> None:
        if (tree is None) == (not conflicts):
            raise ValueError("a merge result has either a tree or conflicts")
        self.tree = tree
        self.conflicts = list(conflicts)

    @property
    def clean(self) -> bool:
        return not self.conflicts

    def __repr__(self) -> str:
        if self.clean:
            return f"<MergeResult tree={self.tree!r}>"
        return f"<MergeResult conflicts={self.conflicts!r}>"


def merge_lines(
    base_lines: Sequence[bytes],
    ours_lines: Sequence[bytes],
    theirs_lines: Sequence[bytes],
) -> Optional[bytes]:
    """Merge line sequences, returning None if any region conflicts."""
    m = merge3.Merge3(base_lines, ours_lines, theirs_lines, is_cherrypick=True)
    result: list[bytes] = []
    for group in m.merge_groups():
        if group[0] == "conflict":
            return None
        result.extend(group[1])
    return b"".join(result)


class Merger:
    """Handles three-way merges of trees.

    Args:
      object_store: Store to read trees from and write merged trees to
      content_merge: Whether to merge files modified on both sides line by
        line instead of reporting them as conflicts
    """

    def __init__(
        self, object_store: ObjectStoreClient, content_merge: bool = False
    ) -> None:
        self.object_store = object_store
        self.content_merge = content_merge

    def merge_trees(
        self,
        base_tree: Optional[ObjectID],
        ours_tree: ObjectID,
        theirs_tree: ObjectID,
    ) -> MergeResult:
        """Perform three-way merge on trees.

        Args:
            base_tree: Common ancestor tree (None for no common ancestor)
            ours_tree: Our version of the tree
            theirs_tree: Their version of the tree

        Returns:
            MergeResult with the id of the written merged tree, or the sorted
            conflicting paths if the merge was not clean
        """
        conflicts: list[bytes] = []
        merged = self._merge_tree(b"", base_tree, ours_tree, theirs_tree, conflicts)
        if conflicts:
            logger.debug("tree merge produced %d conflicts", len(conflicts))
            return MergeResult(conflicts=sorted(conflicts))
        return MergeResult(tree=self._write(merged))

    def _load(self, sha: Optional[ObjectID]) -> Tree:
        if sha is None:
            return Tree()
        return self.object_store.get_tree(sha)

    def _merge_tree(
        self,
        prefix: bytes,
        base_id: Optional[ObjectID],
        ours_id: Optional[ObjectID],
        theirs_id: Optional[ObjectID],
        conflicts: list[bytes],
    ) -> _Value:
        if ours_id == theirs_id or base_id == theirs_id:
            assert ours_id is not None
            return ours_id
        if base_id == ours_id:
            assert theirs_id is not None
            return theirs_id

        base, ours, theirs = self._load(base_id), self._load(ours_id), self._load(theirs_id)
        entries: dict[bytes, tuple[int, _Value]] = {}
        for name in sorted(set(base) | set(ours) | set(theirs)):
            merged = self._merge_entry(
                prefix + name,
                base.get(name),
                ours.get(name),
                theirs.get(name),
                conflicts,
            )
            if merged is None:
                continue
            if isinstance(merged[1], _PendingTree) and not merged[1].entries:
                # git does not record empty directories
                continue
            entries[name] = merged

        if all(isinstance(value, bytes) for _mode, value in entries.values()):
            for name, (mode, value) in entries.items():
                if ours.get(name) != (mode, value):
                    break
            else:
                if len(entries) == len(ours) and ours_id is not None:
                    return ours_id
        return _PendingTree(entries)

    def _merge_entry(
        self,
        path: bytes,
        base: Optional[Entry],
        ours: Optional[Entry],
        theirs: Optional[Entry],
        conflicts: list[bytes],
    ) -> Optional[tuple[int, _Value]]:
        # Unchanged on one side, or changed identically on both
        if ours == theirs or base == theirs:
            return ours
        if base == ours:
            return theirs

        if ours is None or theirs is None:
            # Deleted on one side, modified on the other
            conflicts.append(path)
            return ours

        ours_mode, ours_sha = ours
        theirs_mode, theirs_sha = theirs
        if stat.S_ISDIR(ours_mode) and stat.S_ISDIR(theirs_mode):
            base_sha = None
            if base is not None and stat.S_ISDIR(base[0]):
                base_sha = base[1]
            return (
                ours_mode,
                self._merge_tree(path + b"/", base_sha, ours_sha, theirs_sha, conflicts),
            )

        if (
            self.content_merge
            and base is not None
            and stat.S_ISREG(base[0])
            and stat.S_ISREG(ours_mode)
            and ours_mode == theirs_mode
        ):
            data = self._merge_blobs(base[1], ours_sha, theirs_sha)
            if data is not None:
                return (ours_mode, _PendingBlob(data))

        conflicts.append(path)
        return ours

    def _merge_blobs(
        self, base_sha: ObjectID, ours_sha: ObjectID, theirs_sha: ObjectID
    ) -> Optional[bytes]:
        get_blob = self.object_store.get_blob
        return merge_lines(
            get_blob(base_sha).splitlines(True),
            get_blob(ours_sha).splitlines(True),
            get_blob(theirs_sha).splitlines(True),
        )

    def _write(self, value: _Value) -> ObjectID:
        if isinstance(value, bytes):
            return value
        if isinstance(value, _PendingBlob):
            return self.object_store.create_blob(value.data)
        return self.object_store.create_tree(
            [
                TreeEntry(name, mode, self._write(child))
                for name, (mode, child) in value.entries.items()
            ]
        )
