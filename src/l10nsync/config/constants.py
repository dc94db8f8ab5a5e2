"""Configuration constants.

This module contains truly constant values that should NOT be user-configurable.

For configurable values, see models.py.
"""

# =============================================================================
# Scheduler Groups
# =============================================================================

DEFAULT_GROUP = "DEFAULT"
"""Group of the statically declared jobs and triggers. Reconciled at startup."""

DYNAMIC_GROUP = "DYNAMIC"
"""Group of deduplicated one-off jobs. Never touched by startup cleanup."""

# =============================================================================
# Job Types
# =============================================================================

BRANCH_STATISTICS_JOB_TYPE = "branch-statistics"
BRANCH_NOTIFICATION_JOB_TYPE = "branch-notification"

# =============================================================================
# Defaults referenced by models.py
# =============================================================================

DEFAULT_PRIMARY_BRANCH = "master"
"""Name given to the primary line of development when assets are extracted."""

DEFAULT_SCHEDULER_NAME = "l10nsync"

DEFAULT_START_DELAY_SEC = 2.0
