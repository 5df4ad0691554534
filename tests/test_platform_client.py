import json
from datetime import datetime, timezone
import httpx
import pytest
from pulse_onboarding.services.entity_store import AuthenticationError, PlatformEntityStore
from pulse_onboarding.services.onboarding_state import OnboardingStateManager
from pulse_onboarding.services.platform_client import PlatformClient, PlatformError, from_wire, to_wire
from conftest import FakePlatform


def test_wire_conversion_keeps_builtin_fields():
    record = {"user_id": "u1", "full_name": "Jane Doe", "core_completed": True,
              "survey_completed_at": datetime(2026, 1, 1, tzinfo=timezone.utc)}

    wire = to_wire(record)

    assert wire == {
        "userId": "u1",
        "full_name": "Jane Doe",
        "coreCompleted": True,
        "surveyCompletedAt": "2026-01-01T00:00:00+00:00",
    }
    assert from_wire({"userId": "u1", "full_name": "Jane Doe", "created_date": "x"}) == {
        "user_id": "u1", "full_name": "Jane Doe", "created_date": "x",
    }


def test_entities_round_trip_through_platform(platform_client, fake_platform):
    created = platform_client.entities.UserOnboarding.create({"user_id": "u1", "completed_steps": []})

    assert created["user_id"] == "u1"
    assert fake_platform.records["UserOnboarding"][created["id"]]["userId"] == "u1"

    updated = platform_client.entities.UserOnboarding.update(created["id"], {"core_completed": True})
    assert updated["core_completed"] is True

    found = platform_client.entities.UserOnboarding.filter({"user_id": "u1"})
    assert [r["id"] for r in found] == [created["id"]]
    assert platform_client.entities.UserOnboarding.filter({"user_id": "nobody"}) == []


def test_service_token_is_sent(platform_client, fake_platform):
    platform_client.entities.UserPreferences.filter({"user_id": "u1"})

    request = fake_platform.requests[-1]
    assert request.headers["api_key"] == "service-token"
    assert request.url.path == "/api/apps/test-app/entities/UserPreferences"


def test_auth_me_and_update(fake_platform, platform_client):
    fake_platform.users_by_token["user-token"] = {"id": "u1", "email": "a@b.c", "subscriptionTier": "Subscriber"}

    me = platform_client.auth.me("user-token")
    assert me["subscription_tier"] == "Subscriber"

    platform_client.auth.update_me("user-token", {"first_name": "Jane"})
    assert fake_platform.users_by_token["user-token"]["firstName"] == "Jane"

    with pytest.raises(PlatformError) as exc_info:
        platform_client.auth.me("bad-token")
    assert exc_info.value.status_code == 401

    platform_client.auth.logout("user-token")


def test_function_errors_are_returned(platform_client):
    ok = platform_client.functions.invoke("syncCrm", {"full": True})
    assert ok == {"data": {"function": "syncCrm", "payload": {"full": True}}, "error": None}

    failed = platform_client.functions.invoke("broken", {})
    assert failed["data"] is None
    assert "500" in failed["error"]


def test_network_errors_raise_platform_error():
    fake = FakePlatform(fail=True)
    client = PlatformClient(
        base_url="https://platform.test/api/apps/test-app",
        service_token="service-token",
        transport=httpx.MockTransport(fake.handler),
    )

    with pytest.raises(PlatformError):
        client.entities.UserOnboarding.filter({"user_id": "u1"})
    client.close()


def test_platform_store_current_user(platform_store, fake_platform):
    fake_platform.users_by_token["good"] = {"id": "u1", "email": "a@b.c"}

    assert platform_store.current_user("good")["id"] == "u1"
    with pytest.raises(PlatformError):
        platform_store.current_user("bad")

    fake_platform.users_by_token["empty"] = {}
    with pytest.raises(AuthenticationError):
        platform_store.current_user("empty")


def test_step_save_against_platform(platform_store, fake_platform):
    manager = OnboardingStateManager(platform_store)
    manager.ensure_progress("u1")

    first = manager.save_step_data("market_setup", {"state": "Texas", "city": "Austin"}, "u1")
    second = manager.save_step_data("market_setup", {"state": "Texas", "city": "Houston"}, "u1")

    assert first.success and second.success
    configs = list(fake_platform.records["UserMarketConfig"].values())
    assert len(configs) == 1
    assert configs[0]["city"] == "Houston"
    assert configs[0]["propertyTypes"] == []

    onboarding = list(fake_platform.records["UserOnboarding"].values())
    assert len(onboarding) == 1
    assert onboarding[0]["completedSteps"] == ["market_setup"]
    assert onboarding[0]["coreCompleted"] is True
    assert json.dumps(onboarding[0])  # completion date went over the wire as text


def test_network_failure_during_step_save():
    fake = FakePlatform()
    client = PlatformClient(
        base_url="https://platform.test/api/apps/test-app",
        service_token="service-token",
        transport=httpx.MockTransport(fake.handler),
    )
    manager = OnboardingStateManager(PlatformEntityStore(client))
    manager.ensure_progress("u9")
    fake.fail = True

    result = manager.save_step_data("preferences", {}, "u9")

    assert result.success is False
    assert "Network error" in result.error
    fake.fail = False
    assert list(fake.records["UserOnboarding"].values())[0]["completedSteps"] == []
    client.close()
