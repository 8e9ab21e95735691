# -*- coding: utf-8 -*-

# Fieldware
# Copyright (C) 2025 Fieldware contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""
Fieldware Configuration.

Centralized storage for settings and constants.
Loads environment variables and provides typed access to them.

Side effect: importing this module calls load_dotenv(), which reads a `.env`
file from the current working directory into os.environ. Variables already
set in the environment are not overridden.
"""

import os
import sys
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

# Load environment variables
load_dotenv()

# ==================================================================================================
# Version
# ==================================================================================================

APP_VERSION: str = "1.0.0"

# ==================================================================================================
# Logging Settings
# ==================================================================================================

# Log level for the stderr sink installed by configure_logging().
# Available levels: TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL
# Default: INFO
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# Log every middleware validate() call and its stages at DEBUG level.
# Noisy; meant for troubleshooting custom modifier functions.
# Default: false
_TRACE_VALIDATION_RAW: str = os.getenv("FIELDWARE_TRACE_VALIDATION", "false").lower()
TRACE_VALIDATION: bool = _TRACE_VALIDATION_RAW in (
    "true",
    "1",
    "yes",
    "enabled",
    "on",
)

# ==================================================================================================
# Schema Settings
# ==================================================================================================

# Error reported by field mapping schemas when the validated value is not a mapping.
NOT_A_MAPPING_MESSAGE: str = os.getenv(
    "FIELDWARE_NOT_A_MAPPING_MESSAGE", "Expected a mapping"
)


# Sink installed by the last configure_logging() call
_sink_id: Optional[int] = None


def configure_logging(level: Optional[str] = None) -> int:
    """
    Enable fieldware log records and route them to a stderr sink.

    Only the sink added by a previous call is replaced. Sinks added by the
    host application are left untouched.

    Args:
        level: Log level name; defaults to LOG_LEVEL

    Returns:
        Identifier of the installed sink (usable with logger.remove())
    """
    global _sink_id

    logger.enable("fieldware")
    if _sink_id is not None:
        try:
            logger.remove(_sink_id)
        except ValueError:
            # Already removed by the host application
            pass

    _sink_id = logger.add(
        sys.stderr,
        level=(level or LOG_LEVEL).upper(),
        format=(
            "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
        ),
    )
    return _sink_id
