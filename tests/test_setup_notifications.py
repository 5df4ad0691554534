from pulse_onboarding.schemas.onboarding import Priority
from pulse_onboarding.services.setup_notifications import (
    build_getting_started,
    dismiss_getting_started,
    get_high_priority_count,
    get_setup_notifications,
    get_total_notification_count,
)
from pulse_onboarding.utils.kv_storage import InMemoryStorage

FREE_USER = {"id": "u1", "subscription_tier": "Free"}
SUBSCRIBER = {"id": "u2", "subscription_tier": "Subscriber"}
ACTIVE_PLAN = {"status": "active", "plan_type": "call_center_pro"}
EMPTY_PROGRESS = {"completed_steps": []}


def test_missing_inputs_give_no_notifications():
    assert get_setup_notifications(None, EMPTY_PROGRESS, None) == []
    assert get_setup_notifications(FREE_USER, None, None) == []


def test_free_user_notifications_sorted_by_priority():
    notifications = get_setup_notifications(FREE_USER, EMPTY_PROGRESS, None)

    assert [n.id for n in notifications] == [
        "profile", "market", "goals", "preferences", "agent-intelligence",
    ]
    assert get_total_notification_count(notifications) == 5
    assert get_high_priority_count(notifications) == 3


def test_subscriber_with_active_plan_gets_every_item():
    notifications = get_setup_notifications(SUBSCRIBER, EMPTY_PROGRESS, ACTIVE_PLAN)

    assert [n.id for n in notifications] == [
        "profile", "market", "goals", "ai-agents", "call-center", "preferences", "agent-intelligence",
    ]
    # no medium item ahead of a high one
    priorities = [n.priority for n in notifications]
    assert priorities == sorted(priorities, key=lambda p: p != Priority.HIGH)


def test_completed_items_are_dropped():
    onboarding = {
        "profile_completed": True,
        "market_setup_completed": True,
        "preferences_completed": True,
        "goals_setup_completed": True,
        "agent_intelligence_completed": True,
    }

    assert get_setup_notifications(FREE_USER, onboarding, None) == []


def test_notifications_are_deterministic():
    first = get_setup_notifications(SUBSCRIBER, EMPTY_PROGRESS, ACTIVE_PLAN)
    second = get_setup_notifications(SUBSCRIBER, EMPTY_PROGRESS, ACTIVE_PLAN)

    assert first == second


def test_getting_started_progress():
    summary = build_getting_started(FREE_USER, EMPTY_PROGRESS, None, InMemoryStorage())

    assert summary.visible is True
    assert summary.dismissed is False
    assert summary.pending_count == 5
    assert summary.progress_percentage == 29
    assert [n.id for n in summary.top_priority] == ["profile", "market", "goals"]


def test_getting_started_shows_at_most_five_items():
    summary = build_getting_started(SUBSCRIBER, EMPTY_PROGRESS, ACTIVE_PLAN, InMemoryStorage())

    assert summary.progress_percentage == 0
    assert len(summary.top_priority) == 5
    assert all(n.priority == Priority.HIGH for n in summary.top_priority)


def test_getting_started_dismissal_is_stored():
    storage = InMemoryStorage()
    dismiss_getting_started(storage)

    summary = build_getting_started(FREE_USER, EMPTY_PROGRESS, None, storage)

    assert storage.get("getting_started_dismissed") == "true"
    assert summary.dismissed is True
    assert summary.visible is False
