# utils.py -- Test utilities for treegraft.
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

"""Utility functions common to treegraft tests."""

import stat
from collections.abc import Mapping, Sequence

from treegraft.object_store import ObjectStoreClient
from treegraft.objects import Commit, ObjectID, TreeEntry

# Plain files are very frequently used in tests, so let the mode be very short.
F = 0o100644

AUTHOR = b"Test Author <author@example.com>"
COMMITTER = b"Test Committer <committer@example.com>"


def build_tree(store: ObjectStoreClient, files: Mapping[bytes, bytes]) -> ObjectID:
    """Write a tree holding `files`, a mapping of slash-separated paths to contents."""
    nested: dict = {}
    for path, data in files.items():
        parts = path.split(b"/")
        node = nested
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = data
    return _write_tree(store, nested)


def _write_tree(store: ObjectStoreClient, node: dict) -> ObjectID:
    entries = []
    for name, value in node.items():
        if isinstance(value, dict):
            entries.append(TreeEntry(name, stat.S_IFDIR, _write_tree(store, value)))
        else:
            entries.append(TreeEntry(name, F, store.create_blob(value)))
    return store.create_tree(entries)


def make_commit(
    store: ObjectStoreClient,
    files: Mapping[bytes, bytes],
    parents: Sequence[ObjectID] = (),
    message: bytes = b"Test commit",
    author: bytes = AUTHOR,
    commit_time: int = 1700000000,
) -> ObjectID:
    """Write a commit whose tree holds `files` and return its id."""
    commit = Commit()
    commit.tree = build_tree(store, files)
    commit.parents = list(parents)
    commit.message = message
    commit.author = author
    commit.committer = author
    commit.author_time = commit.commit_time = commit_time
    commit.author_timezone = commit.commit_timezone = 0
    return store.create_commit(commit)


def build_history(
    store: ObjectStoreClient,
    parent: ObjectID,
    steps: Sequence[tuple[bytes, Mapping[bytes, bytes]]],
) -> list[ObjectID]:
    """Write a linear chain of commits on top of `parent`.

    Args:
      store: Store to write to
      parent: Commit the first step is based on
      steps: (message, files) pairs, each giving the full tree of a commit
    Returns: ids of the new commits, oldest first
    """
    shas = []
    for i, (message, files) in enumerate(steps):
        parent = make_commit(
            store, files, [parent], message=message, commit_time=1700000000 + i + 1
        )
        shas.append(parent)
    return shas


def read_tree_files(store: ObjectStoreClient, tree_id: ObjectID) -> dict[bytes, bytes]:
    """Map the slash-separated path of every blob in a tree to its contents."""
    files = {}
    for entry in store.get_tree(tree_id).items():
        if stat.S_ISDIR(entry.mode):
            for path, data in read_tree_files(store, entry.sha).items():
                files[entry.path + b"/" + path] = data
        else:
            files[entry.path] = store.get_blob(entry.sha)
    return files
