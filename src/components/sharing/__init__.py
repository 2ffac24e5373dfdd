"""
Sharing component - Share links for the read-only client view.
"""

from ._memory import InMemoryShareRepo
from .component import (
    DEFAULT_RECENT_VIEW_WINDOW_HOURS,
    DEFAULT_SHARE_ID_LENGTH,
    create_shareable_link,
    generate_share_id,
    get_engagement_signals,
    most_recent_view,
    record_share_view,
    run_create_link,
    run_record_view,
    run_signals,
    verify_share_password,
)
from .models import (
    CreateShareLinkInput,
    EngagementSignal,
    EngagementSignalsInput,
    EngagementSignalsOutput,
    RecordShareViewInput,
    ShareableLink,
    ShareLinkOutput,
    SharingValidationError,
    SignalType,
    SignalUrgency,
)
from .ports import PasswordHasherPort, ShareRepoPort, SharingRulesPort, TimePort

__all__ = [
    # Component functions
    "run_create_link",
    "run_record_view",
    "run_signals",
    # Pure functions
    "create_shareable_link",
    "generate_share_id",
    "get_engagement_signals",
    "most_recent_view",
    "record_share_view",
    "verify_share_password",
    "DEFAULT_SHARE_ID_LENGTH",
    "DEFAULT_RECENT_VIEW_WINDOW_HOURS",
    "InMemoryShareRepo",
    # Models
    "CreateShareLinkInput",
    "EngagementSignal",
    "EngagementSignalsInput",
    "EngagementSignalsOutput",
    "RecordShareViewInput",
    "ShareableLink",
    "ShareLinkOutput",
    "SharingValidationError",
    "SignalType",
    "SignalUrgency",
    # Ports
    "PasswordHasherPort",
    "ShareRepoPort",
    "SharingRulesPort",
    "TimePort",
]
