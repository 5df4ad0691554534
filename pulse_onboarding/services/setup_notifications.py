"""
Pending setup items shown in the notification dropdown and the
"Getting Started" widget.
"""
from typing import Any, Dict, List, Optional
from pulse_onboarding.schemas.onboarding import GettingStartedSummary, Priority, SetupNotification
from pulse_onboarding.services.onboarding_validator import has_active_subscription, is_subscriber
from pulse_onboarding.utils.kv_storage import KeyValueStorage

Record = Optional[Dict[str, Any]]

PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}

GETTING_STARTED_DISMISSED_KEY = "getting_started_dismissed"

# Every item get_setup_notifications can produce
TOTAL_SETUP_ITEMS = 7
GETTING_STARTED_MAX_ITEMS = 5


def get_setup_notifications(user: Record, onboarding: Record, subscription: Record = None) -> List[SetupNotification]:
    """
    Build the list of setup items the user still has to do.

    Items are produced in a fixed order and then sorted by priority with a
    stable sort, so items of equal priority keep that order.
    """
    if not user or not onboarding:
        return []

    notifications = []

    if not onboarding.get("profile_completed"):
        notifications.append(SetupNotification(
            id="profile",
            title="Complete Your Profile",
            description="Add your basic information to personalize your experience",
            icon="👤",
            priority=Priority.HIGH,
            action_url="onboarding?step=profile",
            action_label="Complete Profile",
            category="core",
        ))

    if not onboarding.get("market_setup_completed"):
        notifications.append(SetupNotification(
            id="market",
            title="Set Up Your Market",
            description="Define your territory to get personalized insights",
            icon="📍",
            priority=Priority.HIGH,
            action_url="onboarding?step=market",
            action_label="Set Up Market",
            category="core",
        ))

    if not onboarding.get("preferences_completed"):
        notifications.append(SetupNotification(
            id="preferences",
            title="Configure Preferences",
            description="Set your coaching style and notification preferences",
            icon="⚙️",
            priority=Priority.MEDIUM,
            action_url="onboarding?step=preferences",
            action_label="Configure Preferences",
            category="core",
        ))

    if not onboarding.get("goals_setup_completed"):
        notifications.append(SetupNotification(
            id="goals",
            title="Set Your Annual Goals",
            description="Plan your business targets and track progress",
            icon="🎯",
            priority=Priority.HIGH,
            action_url="Goals?tab=planner",
            action_label="Set Goals",
            category="core",
        ))

    if not onboarding.get("agent_intelligence_completed"):
        notifications.append(SetupNotification(
            id="agent-intelligence",
            title="Complete Intelligence Survey",
            description="Help us understand your business to provide better guidance",
            icon="🧠",
            priority=Priority.MEDIUM,
            action_url="IntelligenceSurvey",
            action_label="Take Survey",
            category="core",
        ))

    if is_subscriber(user) and not onboarding.get("agent_onboarding_completed"):
        notifications.append(SetupNotification(
            id="ai-agents",
            title="Setup AI Agents",
            description="Configure your AI assistants to automate tasks",
            icon="🤖",
            priority=Priority.HIGH,
            action_url="Agents",
            action_label="Setup Agents",
            category="subscriber",
        ))

    if has_active_subscription(subscription) and not onboarding.get("call_center_onboarding_completed"):
        notifications.append(SetupNotification(
            id="call-center",
            title="Setup Call Center",
            description="Configure team calling and lead management features",
            icon="📞",
            priority=Priority.HIGH,
            action_url="Agents?tab=leads_agent",
            action_label="Setup Call Center",
            category="callcenter",
        ))

    # sorted() is stable
    return sorted(notifications, key=lambda n: PRIORITY_ORDER[n.priority])


def get_high_priority_count(notifications: List[SetupNotification]) -> int:
    return len([n for n in notifications if n.priority == Priority.HIGH])


def get_total_notification_count(notifications: List[SetupNotification]) -> int:
    return len(notifications)


def build_getting_started(
    user: Record,
    onboarding: Record,
    subscription: Record,
    storage: KeyValueStorage
) -> GettingStartedSummary:
    """
    Summary for the dashboard "Getting Started" widget.

    Only high priority items are listed. The widget stays hidden once the
    user dismissed it or when nothing is left to do.
    """
    pending = get_setup_notifications(user, onboarding, subscription)
    dismissed = storage.get(GETTING_STARTED_DISMISSED_KEY) == "true"

    completed = TOTAL_SETUP_ITEMS - len(pending)
    progress_percentage = round(completed / TOTAL_SETUP_ITEMS * 100)

    return GettingStartedSummary(
        visible=not dismissed and len(pending) > 0,
        dismissed=dismissed,
        progress_percentage=progress_percentage,
        pending_count=len(pending),
        top_priority=[n for n in pending if n.priority == Priority.HIGH][:GETTING_STARTED_MAX_ITEMS],
    )


def dismiss_getting_started(storage: KeyValueStorage) -> None:
    storage.set(GETTING_STARTED_DISMISSED_KEY, "true")
