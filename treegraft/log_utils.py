# log_utils.py -- Logging utilities for treegraft
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


"""Logging utilities for treegraft.

treegraft is used as a library, so its loggers are silent unless the caller
configures logging. Applications that want treegraft's own output call
default_logging_config(), which honours GIT_TRACE:

- ``1``, ``2`` or ``true``: debug output on stderr
- ``3`` to ``9``: debug output on that file descriptor
- an absolute path: debug output appended to that file

Modules only need getLogger, which this module re-exports.
"""

import logging
import os
import sys
from typing import Optional, Union

getLogger = logging.getLogger

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s: %(message)s"
_TRACE_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"

_NULL_HANDLER = logging.NullHandler()
_TREEGRAFT_LOGGER = getLogger("treegraft")
_TREEGRAFT_LOGGER.addHandler(_NULL_HANDLER)

# Handler installed by default_logging_config, if any
_handler: Optional[logging.Handler] = None


def _get_trace_target() -> Optional[Union[str, int]]:
    """Get the trace target from the GIT_TRACE environment variable.

    Returns:
        - None if tracing is disabled
        - 2 for stderr output
        - int (3-9) for a file descriptor
        - str for an absolute file path
    """
    value = os.environ.get("GIT_TRACE", "")
    if value.lower() in ("1", "2", "true"):
        return 2
    if value.isdigit() and 3 <= int(value) <= 9:
        return int(value)
    if os.path.isabs(value):
        return value
    return None


def _open_trace_handler(target: Union[str, int]) -> logging.Handler:
    if target == 2:
        return logging.StreamHandler(sys.stderr)
    if isinstance(target, int):
        return logging.StreamHandler(os.fdopen(target, "w", buffering=1))
    return logging.FileHandler(target, mode="a")


def default_logging_config() -> None:
    """Send treegraft's log records to stderr, or to the GIT_TRACE target.

    Without GIT_TRACE, records of level INFO and above are shown. With it,
    everything down to DEBUG is, including every request made to a remote
    object store. Calling this again replaces the previous configuration.
    """
    global _handler

    handler: Optional[logging.Handler] = None
    level = logging.INFO
    fmt = _DEFAULT_FORMAT
    target = _get_trace_target()
    if target is not None:
        try:
            handler = _open_trace_handler(target)
        except OSError as e:
            sys.stderr.write(f"Warning: Failed to open GIT_TRACE {target}: {e}\n")
        else:
            level = logging.DEBUG
            fmt = _TRACE_FORMAT
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))

    _TREEGRAFT_LOGGER.removeHandler(_NULL_HANDLER)
    if _handler is not None:
        _TREEGRAFT_LOGGER.removeHandler(_handler)
        _handler.close()
    _handler = handler
    _TREEGRAFT_LOGGER.addHandler(handler)
    _TREEGRAFT_LOGGER.setLevel(level)
