"""
Logbook services - Business logic layer.

This package contains all business operations for the logbook app:
- Pure bundling core (allocation and consolidation planning)
- Log entry CRUD operations
- Bundle (RMP) submission, deletion and status changes
- Balance and dashboard summaries
"""

# Bundling core
from .bundling import (
    BUNDLE_HOURS,
    EntrySnapshot,
    BundlePlan,
    ConsolidationPlan,
    Remainder,
    clean_hours,
    plan_bundle,
    plan_consolidation,
    merge_notes,
)

# Log management
from .log_management import (
    LogTimes,
    compute_log_times,
    create_log,
    update_log,
    delete_log,
    get_log_for_user,
    get_user_logs,
)

# Bundle management
from .bundle_management import (
    bundle_quota,
    submit_bundle,
    delete_bundle,
    get_bundle_for_user,
    get_user_bundles,
    set_bundle_status,
    toggle_bundle_paid,
)

# Balance
from .balance import (
    get_balance,
    get_status_counts,
    get_dashboard_summary,
)

# Domain Exceptions
from .exceptions import (
    LogbookServiceError,
    LogEntryNotFoundError,
    LogEntryLockedError,
    BundleNotFoundError,
    InvalidBundleStatusError,
)

__all__ = [
    # Bundling core
    'BUNDLE_HOURS',
    'EntrySnapshot',
    'BundlePlan',
    'ConsolidationPlan',
    'Remainder',
    'clean_hours',
    'plan_bundle',
    'plan_consolidation',
    'merge_notes',
    # Log Management Services
    'LogTimes',
    'compute_log_times',
    'create_log',
    'update_log',
    'delete_log',
    'get_log_for_user',
    'get_user_logs',
    # Bundle Management Services
    'bundle_quota',
    'submit_bundle',
    'delete_bundle',
    'get_bundle_for_user',
    'get_user_bundles',
    'set_bundle_status',
    'toggle_bundle_paid',
    # Balance Services
    'get_balance',
    'get_status_counts',
    'get_dashboard_summary',
    # Exceptions
    'LogbookServiceError',
    'LogEntryNotFoundError',
    'LogEntryLockedError',
    'BundleNotFoundError',
    'InvalidBundleStatusError',
]
