# apply.py -- Apply a single commit onto a destination tip
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

"""Apply the changes of a single commit onto another commit."""

import time
from typing import Callable, Optional, Union

from .errors import ConflictError, UnsupportedCommit
from .identity import check_user_identity, get_user_identity, local_timezone
from .log_utils import getLogger
from .merge import Merger
from .object_store import ObjectStoreClient
from .objects import Commit, ObjectID, to_object_id

logger = getLogger(__name__)


class CommitApplier:
    """Layer the changes a commit made to its parent onto another commit.

    Args:
      object_store: Store to read from and write the new commit to
      committer: Identity to record as committer of new commits; defaults to
        the identity from the environment
      merger: Tree merger to use; defaults to a path-level Merger
      clock: Callable returning the current time, used for commit times
    """

    def __init__(
        self,
        object_store: ObjectStoreClient,
        committer: Optional[bytes] = None,
        merger: Optional[Merger] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.object_store = object_store
        if committer is None:
            committer = get_user_identity("COMMITTER")
        check_user_identity(committer)
        self.committer = committer
        self.merger = merger if merger is not None else Merger(object_store)
        self.clock = clock

    def apply(
        self, source: Union[Commit, ObjectID, str], destination_tip: ObjectID
    ) -> ObjectID:
        """Create a commit applying `source` onto `destination_tip`.

        Args:
          source: The commit to cherry-pick, or its id
          destination_tip: The commit the new commit is layered onto
        Returns: id of the new commit
        Raises:
          UnsupportedCommit: if `source` does not have exactly one parent
          ConflictError: if the changes cannot be merged cleanly
        """
        if not isinstance(source, Commit):
            source = self.object_store.get_commit(to_object_id(source))
        if len(source.parents) != 1:
            raise UnsupportedCommit(source.id, len(source.parents))

        base = self.object_store.get_commit(source.parents[0])
        ours = self.object_store.get_commit(destination_tip)
        result = self.merger.merge_trees(base.tree, ours.tree, source.tree)
        if not result.clean:
            raise ConflictError(source.id, result.conflicts)
        assert result.tree is not None

        commit = Commit()
        commit.tree = result.tree
        commit.parents = [destination_tip]
        commit.message = source.message
        commit.author = source.author
        commit.author_time = source.author_time
        commit.author_timezone = source.author_timezone
        commit.committer = self.committer
        now = self.clock()
        commit.commit_time = int(now)
        commit.commit_timezone = local_timezone(now)
        new_id = self.object_store.create_commit(commit)
        logger.debug(
            "applied %s onto %s as %s",
            source.id.decode("ascii"),
            destination_tip.decode("ascii"),
            new_id.decode("ascii"),
        )
        return new_id
