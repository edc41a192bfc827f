# github.py -- Object store client for the GitHub Git Data API
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

"""Object store client backed by the GitHub Git Data REST API.

See https://docs.github.com/en/rest/git for the endpoints used here.
"""

import base64
import json
import os
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import urllib3
import urllib3.exceptions

from . import __version__
from .errors import HTTPUnauthorized, ObjectStoreError
from .identity import parse_identity
from .log_utils import getLogger
from .object_store import ObjectStoreClient
from .objects import Commit, ObjectID, Tree, TreeEntry, to_object_id
from .refs import REFS_PREFIX, Ref, check_refname

logger = getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
USER_AGENT = "treegraft/{}".format(".".join(map(str, __version__)))

# Messages of the 422 responses GitHub sends when a reference update loses
# against another writer.
_STALE_REF_REASONS = ("fast forward", "Reference does not exist")


def format_date(timestamp: int, offset: int) -> str:
    """Format a git timestamp and timezone offset as ISO 8601."""
    tz = timezone(timedelta(seconds=offset))
    return datetime.fromtimestamp(timestamp, tz).isoformat()


def parse_date(text: str) -> tuple[int, int]:
    """Parse an ISO 8601 date into a (timestamp, offset) pair."""
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    offset = dt.utcoffset()
    assert offset is not None
    return int(dt.timestamp()), int(offset.total_seconds())


def _person(identity: bytes, timestamp: int, offset: int) -> dict[str, str]:
    name, email = parse_identity(identity)
    return {
        "name": name.decode("utf-8"),
        "email": email.decode("utf-8"),
        "date": format_date(timestamp, offset),
    }


def _identity(person: dict[str, str]) -> tuple[bytes, int, int]:
    timestamp, offset = parse_date(person["date"])
    identity = "{} <{}>".format(person["name"], person["email"]).encode("utf-8")
    return identity, timestamp, offset


class GitHubObjectStore(ObjectStoreClient):
    """Object store client for a single GitHub repository.

    GitHub does not offer a compare-and-swap on references; it only offers a
    fast-forward-only update. update_reference() therefore re-reads the
    reference, refuses if it no longer matches the expected value, and then
    issues a non-forced update, which GitHub rejects if the reference moved
    to a commit the new tip does not descend from. A reference deleted in
    the meantime counts as moved.

    Args:
      owner: Owner of the repository
      repo: Name of the repository
      token: API token; defaults to $GITHUB_TOKEN
      base_url: API root, for GitHub Enterprise installations
      pool_manager: urllib3 pool manager to issue requests with
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        token: Optional[str] = None,
        base_url: str = DEFAULT_API_URL,
        pool_manager: Optional[urllib3.PoolManager] = None,
    ) -> None:
        self.owner = owner
        self.repo = repo
        if token is None:
            token = os.environ.get("GITHUB_TOKEN")
        self._token = token
        self.base_url = base_url.rstrip("/")
        if pool_manager is None:
            pool_manager = urllib3.PoolManager(retries=False)
        self.pool_manager = pool_manager

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.owner!r}, {self.repo!r})"

    def _url(self, path: str) -> str:
        return f"{self.base_url}/repos/{self.owner}/{self.repo}/{path}"

    def _request(self, method: str, path: str, data: Optional[dict] = None) -> Any:
        url = self._url(path)
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": USER_AGENT,
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        body = None
        if data is not None:
            body = json.dumps(data).encode("utf-8")
            headers["Content-Type"] = "application/json"
        logger.debug("%s %s", method, url)
        try:
            resp = self.pool_manager.request(method, url, body=body, headers=headers)
        except urllib3.exceptions.HTTPError as e:
            raise ObjectStoreError(f"{method} {url} failed: {e}") from e
        if resp.status == 401:
            raise HTTPUnauthorized(url)
        if resp.status >= 400:
            raise ObjectStoreError(
                f"{method} {url} returned {resp.status}: "
                + resp.data.decode("utf-8", "replace"),
                status=resp.status,
            )
        return json.loads(resp.data)

    def create_blob(self, data: bytes) -> ObjectID:
        result = self._request(
            "POST",
            "git/blobs",
            {"content": base64.b64encode(data).decode("ascii"), "encoding": "base64"},
        )
        return to_object_id(result["sha"])

    def get_blob(self, sha: ObjectID) -> bytes:
        result = self._request("GET", "git/blobs/" + sha.decode("ascii"))
        if result.get("encoding") == "base64":
            return base64.b64decode(result["content"])
        return result["content"].encode("utf-8")

    def create_tree(self, entries: Iterable[TreeEntry]) -> ObjectID:
        tree = [
            {
                "path": entry.path.decode("utf-8"),
                "mode": f"{entry.mode:06o}",
                "type": entry.type_name.decode("ascii"),
                "sha": entry.sha.decode("ascii"),
            }
            for entry in entries
        ]
        result = self._request("POST", "git/trees", {"tree": tree})
        return to_object_id(result["sha"])

    def get_tree(self, sha: ObjectID) -> Tree:
        result = self._request("GET", "git/trees/" + sha.decode("ascii"))
        tree = Tree()
        for item in result["tree"]:
            tree.add(item["path"].encode("utf-8"), int(item["mode"], 8), item["sha"])
        tree.set_id(to_object_id(result["sha"]))
        return tree

    def create_commit(self, commit: Commit) -> ObjectID:
        data = {
            "message": commit.message.decode("utf-8"),
            "tree": commit.tree.decode("ascii"),
            "parents": [p.decode("ascii") for p in commit.parents],
            "author": _person(commit.author, commit.author_time, commit.author_timezone),
            "committer": _person(
                commit.committer, commit.commit_time, commit.commit_timezone
            ),
        }
        result = self._request("POST", "git/commits", data)
        return to_object_id(result["sha"])

    def get_commit(self, sha: ObjectID) -> Commit:
        result = self._request("GET", "git/commits/" + sha.decode("ascii"))
        commit = Commit()
        commit.tree = to_object_id(result["tree"]["sha"])
        commit.parents = [to_object_id(p["sha"]) for p in result["parents"]]
        commit.message = result["message"].encode("utf-8")
        commit.author, commit.author_time, commit.author_timezone = _identity(
            result["author"]
        )
        commit.committer, commit.commit_time, commit.commit_timezone = _identity(
            result["committer"]
        )
        commit.set_id(to_object_id(result["sha"]))
        return commit

    def _ref_path(self, name: Ref) -> str:
        check_refname(name)
        return name[len(REFS_PREFIX) :].decode("utf-8")

    def get_reference(self, name: Ref) -> ObjectID:
        try:
            result = self._request("GET", "git/ref/" + self._ref_path(name))
        except ObjectStoreError as e:
            if e.status == 404:
                raise KeyError(name) from e
            raise
        return to_object_id(result["object"]["sha"])

    def update_reference(
        self, name: Ref, new_sha: ObjectID, expected_sha: ObjectID
    ) -> bool:
        try:
            current = self.get_reference(name)
        except KeyError:
            current = None
        if current != expected_sha:
            return False
        try:
            self._request(
                "PATCH",
                "git/refs/" + self._ref_path(name),
                {"sha": new_sha.decode("ascii"), "force": False},
            )
        except ObjectStoreError as e:
            if e.status == 422 and any(
                reason in str(e) for reason in _STALE_REF_REASONS
            ):
                logger.debug("GitHub refused to update %r: %s", name, e)
                return False
            raise
        return True
