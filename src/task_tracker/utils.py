from __future__ import annotations

import uuid
from datetime import datetime, timezone


# PUBLIC_INTERFACE
def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
def new_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


def normalize_email(email: str) -> str:
    return email.strip().lower()
