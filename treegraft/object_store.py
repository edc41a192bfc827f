# object_store.py -- Object store client interface and in-memory store
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

"""Access to a remote content-addressed object store."""

import threading
from collections.abc import Iterable, Iterator

from .errors import (
    NotBlobError,
    NotCommitError,
    NotTreeError,
    ObjectStoreError,
)
from .objects import (
    COMMIT_TYPE,
    TREE_TYPE,
    Blob,
    Commit,
    ObjectID,
    ShaFile,
    Tree,
    TreeEntry,
    to_object_id,
)
from .refs import Ref, check_refname


class ObjectStoreClient:
    """Primitive operations against a content-addressed object store.

    Blobs, trees and commits are write-once; the only mutable state is the
    set of references, which can only be changed with a compare-and-swap.
    """

    def create_blob(self, data: bytes) -> ObjectID:
        """Store a blob and return its id."""
        raise NotImplementedError(self.create_blob)

    def get_blob(self, sha: ObjectID) -> bytes:
        """Return the contents of a blob."""
        raise NotImplementedError(self.get_blob)

    def create_tree(self, entries: Iterable[TreeEntry]) -> ObjectID:
        """Store a tree made of `entries` and return its id.

        Every entry must refer to an object that already exists in the store,
        except for submodule entries.
        """
        raise NotImplementedError(self.create_tree)

    def get_tree(self, sha: ObjectID) -> Tree:
        raise NotImplementedError(self.get_tree)

    def create_commit(self, commit: Commit) -> ObjectID:
        """Store a commit and return its id."""
        raise NotImplementedError(self.create_commit)

    def get_commit(self, sha: ObjectID) -> Commit:
        raise NotImplementedError(self.get_commit)

    def get_reference(self, name: Ref) -> ObjectID:
        """Return the commit a reference points at.

        Raises:
          KeyError: if the reference does not exist
        """
        raise NotImplementedError(self.get_reference)

    def update_reference(
        self, name: Ref, new_sha: ObjectID, expected_sha: ObjectID
    ) -> bool:
        """Point `name` at `new_sha` only if it currently points at `expected_sha`.

        Args:
          name: The refname to set.
          new_sha: The new sha the refname will refer to.
          expected_sha: The sha the refname must currently refer to.
        Returns: True if the set was successful, False otherwise.
        """
        raise NotImplementedError(self.update_reference)


class MemoryObjectStore(ObjectStoreClient):
    """Object store that keeps all objects and references in memory.

    Reference updates are atomic with respect to other threads sharing the
    store.
    """

    def __init__(self) -> None:
        self._data: dict[ObjectID, ShaFile] = {}
        self._refs: dict[Ref, ObjectID] = {}
        self._lock = threading.Lock()

    def __contains__(self, sha: ObjectID) -> bool:
        return sha in self._data

    def __iter__(self) -> Iterator[ObjectID]:
        """Iterate over the SHAs that are present in this store."""
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def __getitem__(self, sha: ObjectID) -> ShaFile:
        """Retrieve a copy of an object by SHA.

        Raises:
          KeyError: If the object is not found
        """
        return self._data[to_object_id(sha)].copy()

    def add_object(self, obj: ShaFile) -> ObjectID:
        """Add a single object to this object store."""
        sha = obj.id
        self._data.setdefault(sha, obj.copy())
        return sha

    def _get_typed(self, sha: ObjectID, cls, error):
        obj = self[sha]
        if not isinstance(obj, cls):
            raise error(sha)
        return obj

    def _check_exists(self, sha: ObjectID, type_name: bytes) -> None:
        obj = self._data.get(sha)
        if obj is None:
            raise ObjectStoreError(f"object {sha.decode('ascii')} does not exist")
        if obj.type_name != type_name:
            raise ObjectStoreError(
                f"object {sha.decode('ascii')} is a {obj.type_name.decode('ascii')}, "
                f"not a {type_name.decode('ascii')}"
            )

    def create_blob(self, data: bytes) -> ObjectID:
        return self.add_object(Blob.from_string(data))

    def get_blob(self, sha: ObjectID) -> bytes:
        return self._get_typed(sha, Blob, NotBlobError).data

    def create_tree(self, entries: Iterable[TreeEntry]) -> ObjectID:
        tree = Tree.from_entries(entries)
        for entry in tree.items():
            if entry.type_name != COMMIT_TYPE:
                self._check_exists(entry.sha, entry.type_name)
        return self.add_object(tree)

    def get_tree(self, sha: ObjectID) -> Tree:
        return self._get_typed(sha, Tree, NotTreeError)

    def create_commit(self, commit: Commit) -> ObjectID:
        self._check_exists(commit.tree, TREE_TYPE)
        for parent in commit.parents:
            self._check_exists(parent, COMMIT_TYPE)
        return self.add_object(commit)

    def get_commit(self, sha: ObjectID) -> Commit:
        return self._get_typed(sha, Commit, NotCommitError)

    def get_reference(self, name: Ref) -> ObjectID:
        with self._lock:
            return self._refs[name]

    def set_reference(self, name: Ref, sha: ObjectID) -> None:
        """Set a reference unconditionally.

        Note: This method unconditionally overwrites the contents of a
            reference. To update atomically only if the reference has not
            changed, use update_reference().
        """
        check_refname(name)
        self._check_exists(sha, COMMIT_TYPE)
        with self._lock:
            self._refs[name] = sha

    def remove_reference(self, name: Ref) -> None:
        """Remove a reference unconditionally.

        Raises:
          KeyError: if the reference does not exist
        """
        with self._lock:
            del self._refs[name]

    def update_reference(
        self, name: Ref, new_sha: ObjectID, expected_sha: ObjectID
    ) -> bool:
        check_refname(name)
        self._check_exists(new_sha, COMMIT_TYPE)
        with self._lock:
            if self._refs.get(name) != expected_sha:
                return False
            self._refs[name] = new_sha
        return True

    def references(self) -> dict[Ref, ObjectID]:
        """Return a snapshot of all references."""
        with self._lock:
            return dict(self._refs)
