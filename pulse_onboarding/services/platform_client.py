"""
HTTP client for the hosted entity platform.

Mirrors the platform's own SDK surface: `auth`, `entities.<Type>` and
`functions`. Records are exchanged as snake_case dicts; the wire format is
camelCase.
"""

import json
import httpx
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from pydantic.alias_generators import to_camel, to_snake
from pulse_onboarding.core.config import settings
from pulse_onboarding.core.logging_config import logger

# Built-in platform fields that are snake_case on the wire already
_WIRE_SNAKE_FIELDS = {"full_name", "created_date", "updated_date", "created_by"}


class PlatformError(Exception):
    """Raised when the platform rejects a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def _wire_value(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def to_wire(record: Dict[str, Any]) -> Dict[str, Any]:
    return {
        (key if key in _WIRE_SNAKE_FIELDS else to_camel(key)): _wire_value(value)
        for key, value in record.items()
    }


def from_wire(record: Dict[str, Any]) -> Dict[str, Any]:
    return {
        (key if key in _WIRE_SNAKE_FIELDS else to_snake(key)): value
        for key, value in record.items()
    }


def _send(http: httpx.Client, method: str, url: str, **kwargs) -> Any:
    try:
        response = http.request(method, url, **kwargs)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error(f"Platform API error: {method} {url} -> {e.response.status_code} {e.response.text}")
        raise PlatformError(
            f"Platform request failed with status {e.response.status_code}",
            status_code=e.response.status_code
        ) from e
    except httpx.HTTPError as e:
        logger.error(f"Platform API unreachable: {method} {url}: {str(e)}")
        raise PlatformError(f"Platform request failed: {str(e)}") from e

    if not response.content:
        return None
    return response.json()


class EntityResource:
    """filter/create/update for one entity type."""

    def __init__(self, http: httpx.Client, name: str):
        self.http = http
        self.name = name

    def filter(self, criteria: Dict[str, Any]) -> List[Dict[str, Any]]:
        data = _send(
            self.http, "GET", f"/entities/{self.name}",
            params={"q": json.dumps(to_wire(criteria))}
        )
        return [from_wire(item) for item in data or []]

    def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        data = _send(self.http, "POST", f"/entities/{self.name}", json=to_wire(record))
        return from_wire(data)

    def update(self, id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        data = _send(self.http, "PUT", f"/entities/{self.name}/{id}", json=to_wire(patch))
        return from_wire(data)


class EntitiesAPI:
    """Attribute access by entity type name, e.g. `entities.UserOnboarding`."""

    def __init__(self, http: httpx.Client):
        self._http = http
        self._resources: Dict[str, EntityResource] = {}

    def __getattr__(self, name: str) -> EntityResource:
        if name.startswith("_"):
            raise AttributeError(name)
        if name not in self._resources:
            self._resources[name] = EntityResource(self._http, name)
        return self._resources[name]


class AuthAPI:
    """Calls made on behalf of the signed-in user, authorized by their token."""

    def __init__(self, http: httpx.Client):
        self.http = http

    def me(self, token: str) -> Dict[str, Any]:
        data = _send(self.http, "GET", "/entities/User/me", headers={"Authorization": f"Bearer {token}"})
        return from_wire(data)

    def update_me(self, token: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        data = _send(
            self.http, "PUT", "/entities/User/me",
            json=to_wire(patch),
            headers={"Authorization": f"Bearer {token}"}
        )
        return from_wire(data)

    def logout(self, token: str) -> None:
        _send(self.http, "POST", "/auth/logout", headers={"Authorization": f"Bearer {token}"})


class FunctionsAPI:
    def __init__(self, http: httpx.Client):
        self.http = http

    def invoke(self, name: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Call a named server-side function.

        Failures are reported in the result rather than raised so callers
        can show the message and move on.

        Returns:
            {"data": <response body or None>, "error": <message or None>}
        """
        logger.info(f"Invoking platform function: {name}")
        try:
            data = _send(self.http, "POST", f"/functions/{name}", json=payload)
        except PlatformError as e:
            return {"data": None, "error": str(e)}
        return {"data": data, "error": None}


class PlatformClient:
    """Client for the hosted platform, authenticated with the service token."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        service_token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Args:
            base_url: App API root (defaults to settings)
            service_token: Service-role token (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
            transport: Optional httpx transport, used by tests
        """
        token = service_token or settings.PLATFORM_SERVICE_TOKEN
        if not token:
            logger.warning("PLATFORM_SERVICE_TOKEN not set. Platform requests will be rejected.")

        headers = {"Accept": "application/json"}
        if token:
            headers["api_key"] = token

        self.http = httpx.Client(
            base_url=base_url or settings.platform_app_url,
            headers=headers,
            timeout=timeout or settings.PLATFORM_TIMEOUT_SECONDS,
            transport=transport,
        )
        self.auth = AuthAPI(self.http)
        self.entities = EntitiesAPI(self.http)
        self.functions = FunctionsAPI(self.http)

    def close(self) -> None:
        self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
