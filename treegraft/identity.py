# identity.py -- Committer identities and timestamps
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

"""Committer identities and timestamps."""

import os
import socket
import time
from typing import Optional


class DefaultIdentityNotFound(Exception):
    """Default identity could not be determined."""


def _get_default_identity() -> tuple[str, str]:
    for name in ("LOGNAME", "USER", "LNAME", "USERNAME"):
        username = os.environ.get(name)
        if username:
            break
    else:
        username = None

    try:
        import pwd
    except ImportError:
        fullname = None
    else:
        try:
            entry = pwd.getpwuid(os.getuid())
        except KeyError:
            fullname = None
        else:
            if getattr(entry, "pw_gecos", None):
                fullname = entry.pw_gecos.split(",")[0]
            else:
                fullname = None
            if username is None:
                username = entry.pw_name
    if not fullname:
        if username is None:
            raise DefaultIdentityNotFound("no username found")
        fullname = username
    email = os.environ.get("EMAIL")
    if email is None:
        email = f"{username}@{socket.gethostname()}"
    return (fullname, email)


def get_user_identity(kind: Optional[str] = None) -> bytes:
    """Determine the identity to use for new commits.

    If kind is set, this first checks GIT_${KIND}_NAME and GIT_${KIND}_EMAIL.

    If those variables are not set, it falls back to the current user's
    identity as obtained from the host system (the gecos field, $EMAIL,
    $USER@$(hostname)).

    Args:
      kind: Optional kind to return identity for,
        usually either "AUTHOR" or "COMMITTER".

    Returns:
      A user identity
    """
    user: Optional[bytes] = None
    email: Optional[bytes] = None
    if kind:
        user_uc = os.environ.get("GIT_" + kind + "_NAME")
        if user_uc is not None:
            user = user_uc.encode("utf-8")
        email_uc = os.environ.get("GIT_" + kind + "_EMAIL")
        if email_uc is not None:
            email = email_uc.encode("utf-8")
    if user is None or email is None:
        default_user, default_email = _get_default_identity()
        if user is None:
            user = default_user.encode("utf-8")
        if email is None:
            email = default_email.encode("utf-8")
    if email.startswith(b"<") and email.endswith(b">"):
        email = email[1:-1]
    return user + b" <" + email + b">"


def check_user_identity(identity: bytes) -> None:
    """Verify that a user identity is formatted correctly.

    Args:
      identity: User identity bytestring
    Raises:
      ValueError: if the identity is incorrectly formatted
    """
    try:
        fst, snd = identity.split(b" <", 1)
    except ValueError as exc:
        raise ValueError(identity) from exc
    if b">" not in snd:
        raise ValueError(identity)
    if b"\0" in identity or b"\n" in identity:
        raise ValueError(identity)


def parse_identity(identity: bytes) -> tuple[bytes, bytes]:
    """Split ``b"Name <email>"`` into its name and email."""
    check_user_identity(identity)
    name, rest = identity.split(b" <", 1)
    return name, rest[: rest.index(b">")]


def local_timezone(timestamp: Optional[float] = None) -> int:
    """Offset of the local timezone at `timestamp`, in seconds east of UTC."""
    if timestamp is None:
        timestamp = time.time()
    return time.localtime(timestamp).tm_gmtoff
