# porcelain.py -- High-level cherry-pick operation
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

"""Cherry-pick commits onto a reference held in a remote object store.

The reference is read once at the start and written at most once at the
end, with a compare-and-swap against the value read. Commits and trees
created by a run that fails are left in the store unreferenced.
"""

from collections.abc import Iterable
from typing import Callable, Optional, Union

from .apply import CommitApplier
from .errors import ConcurrentUpdateError
from .log_utils import getLogger
from .merge import Merger
from .object_store import ObjectStoreClient
from .objects import Commit, ObjectID, to_object_id
from .refs import to_ref

logger = getLogger(__name__)

Committish = Union[Commit, ObjectID, str]


def _short(sha: ObjectID) -> str:
    return sha[:7].decode("ascii")


def cherry_pick(
    object_store: ObjectStoreClient,
    commits: Iterable[Committish],
    head: Union[bytes, str],
    committer: Optional[bytes] = None,
    content_merge: bool = False,
    intercept: Optional[Callable[[ObjectID], None]] = None,
) -> ObjectID:
    """Cherry-pick a sequence of commits onto a reference.

    Each commit is merged onto the tip produced by the previous one, using
    its own parent as the merge base. The reference is only moved once all
    commits applied cleanly, and only if nobody else moved it meanwhile.

    Args:
      object_store: Store holding the commits and the reference
      commits: Commits (or their ids) to apply, in order
      head: Name of the reference to update, e.g. ``refs/heads/feature``
      committer: Identity to record as committer of the new commits
      content_merge: Merge files changed on both sides line by line instead
        of treating them as conflicts
      intercept: Called with the original head sha once it has been read;
        meant for tests that simulate a concurrent writer

    Returns:
      The id of the new tip of `head`

    Raises:
      ValueError: if `commits` is empty
      ConflictError: if a commit cannot be merged cleanly
      UnsupportedCommit: if a commit does not have exactly one parent
      ConcurrentUpdateError: if `head` moved while the commits were applied
    """
    commits = [c if isinstance(c, Commit) else to_object_id(c) for c in commits]
    if not commits:
        raise ValueError("at least one commit is required")
    ref = to_ref(head)

    original_sha = object_store.get_reference(ref)
    logger.debug("%s is at %s", ref.decode("utf-8"), _short(original_sha))
    if intercept is not None:
        intercept(original_sha)

    applier = CommitApplier(
        object_store,
        committer=committer,
        merger=Merger(object_store, content_merge=content_merge),
    )
    tip = original_sha
    for commit in commits:
        try:
            tip = applier.apply(commit, tip)
        except Exception as e:
            logger.info(
                "Aborting cherry-pick onto %s, reference left untouched: %s",
                ref.decode("utf-8"),
                e,
            )
            raise

    if not object_store.update_reference(ref, tip, original_sha):
        logger.info("%s moved during cherry-pick", ref.decode("utf-8"))
        raise ConcurrentUpdateError(ref, original_sha)
    logger.info(
        "Cherry-picked %d commit(s) onto %s: %s -> %s",
        len(commits),
        ref.decode("utf-8"),
        _short(original_sha),
        _short(tip),
    )
    return tip
