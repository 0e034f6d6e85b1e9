# workzen_api/services/activity_log.py
from __future__ import annotations

import json
from typing import Any, Optional

from workzen_api.models.activity import ActivityLog


def log_activity(store, actor_id: Optional[int], action: str, module: str, details: Any) -> ActivityLog:
    """Queue an audit row on the store's session; the caller owns the commit."""
    user = store.get_user(actor_id)
    if not isinstance(details, str):
        details = json.dumps(details, default=str)
    entry = ActivityLog(
        user_id=actor_id,
        user_name=(user.full_name or user.email) if user else None,
        user_role=user.primary_role if user else None,
        action=action,
        module=module,
        details=details,
    )
    store.add_activity(entry)
    return entry
