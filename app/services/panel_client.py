"""
HTTP client for the external account panel.

The panel owns the accounts ("lines"); this service only proxies three
operations to it:

- POST /ext/line/create        create a line
- GET  /ext/lines?username=..  find lines by username
- POST /ext/line/{id}/renew    extend a line's package

Every call carries X-Api-Key and X-Auth-User headers. When the configured
credentials are the simulation pair (test/test by default) the client
answers with mock data and never opens a connection.
"""
import json
import logging
import random
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import quote

import httpx
from pydantic import BaseModel, Field, ValidationError

from app.core.config import get_settings
from app.models.enums import PanelPackage

logger = logging.getLogger(__name__)

HTML_MARKERS = ("<!DOCTYPE", "<html", "<body", "<head", "<title")


class PanelAPIError(Exception):
    """Raised when a panel call fails. The message is shown to users."""
    pass


# =============================================================================
# Wire models
# =============================================================================

class CreateAccountRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
    package: int
    reseller_notes: Optional[str] = None
    bouquets: Optional[list[int]] = None
    rid: str


class CreateAccountResponse(BaseModel):
    line_id: str
    expire_at: datetime
    transaction_amount: float
    rid: str


class ExtendPackageRequest(BaseModel):
    package: int
    rid: str


class ExtendPackageResponse(BaseModel):
    line_id: str
    expire_at: datetime
    transaction_amount: float
    rid: str


class Line(BaseModel):
    """A panel account record."""
    line_id: str
    username: str = ""
    password: str = ""
    mac_addr: Optional[str] = None
    owner: str = ""
    type: str = ""
    expire_at: Optional[datetime] = None
    is_enabled: bool = False
    is_restreamer: bool = False
    is_trial: bool = False
    package_id: Optional[int] = None
    bouquets: list[int] = Field(default_factory=list)
    max_connections: int = 0
    reseller_notes: Optional[str] = None


# =============================================================================
# Error classification
# =============================================================================

def is_html_response(body: str) -> bool:
    """Detect an HTML page where a JSON API response was expected.

    This usually means the panel URL points at a website rather than the
    panel API.
    """
    return any(marker in body for marker in HTML_MARKERS)


def format_connection_error(status_code: int) -> str:
    """User-facing message for an HTML error page with *status_code*."""
    if status_code == 404:
        return "The panel URL is incorrect or the service could not be found. Please check your settings."
    if status_code >= 500:
        return "The external service is currently unavailable. Please try again later."
    return "Could not connect to the panel. Please verify your panel URL and try again."


def describe_error_response(status_code: int, body: str) -> str:
    """Turn a non-200 panel response into an error message."""
    if is_html_response(body):
        return f"connection error: {format_connection_error(status_code)}"

    if body.startswith("{"):
        try:
            envelope = json.loads(body)
        except ValueError:
            return f"error response (status {status_code}): {body}"
        return f"API error: {envelope.get('error', '')} (RID: {envelope.get('rid', '')})"

    return f"unexpected response (status {status_code}): {body}"


def _package_terms(package: int) -> tuple[int, float]:
    """Months and price for a package code; unknown codes bill as one month."""
    try:
        plan = PanelPackage(package)
    except ValueError:
        return 1, PanelPackage.ONE_MONTH.price
    return plan.months, plan.price


def _months_from_now(months: int) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=30 * months)


# =============================================================================
# Client
# =============================================================================

class PanelAPIClient:
    """
    Synchronous panel client built on httpx.

    Usage:
        with PanelAPIClient(url, api_key, auth_user) as client:
            lines = client.find_account("alice")

    Args:
        base_url: Panel base URL; a trailing slash is ignored
        api_key: Value of the X-Api-Key header
        auth_user: Value of the X-Auth-User header
        timeout: Per-request timeout in seconds (defaults to settings)
        transport: Optional httpx transport, used by tests
        rng: Random source for simulated data
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        auth_user: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        rng: Optional[random.Random] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.auth_user = auth_user
        self._simulation_credentials = (
            settings.simulation_api_key,
            settings.simulation_auth_user,
        )
        self._rng = rng or random.Random()
        self._http = httpx.Client(
            timeout=timeout if timeout is not None else settings.panel_request_timeout,
            transport=transport,
            headers={
                "X-Api-Key": api_key,
                "X-Auth-User": auth_user,
            },
        )

    @classmethod
    def from_settings(cls, user_settings, **kwargs) -> "PanelAPIClient":
        """Build a client from a UserSettings row."""
        return cls(
            base_url=user_settings.website_url,
            api_key=user_settings.api_key,
            auth_user=user_settings.auth_user,
            **kwargs,
        )

    @property
    def is_simulation_mode(self) -> bool:
        return (self.api_key, self.auth_user) == self._simulation_credentials

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "PanelAPIClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}{path}"
        logger.info(f"Panel request: {method} {url}")

        try:
            response = self._http.request(method, url, **kwargs)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise PanelAPIError(f"error making request: {e}") from e

        if response.status_code != 200:
            message = describe_error_response(response.status_code, response.text)
            logger.error(f"Panel request failed: {method} {url}: {message}")
            raise PanelAPIError(message)

        return response

    @staticmethod
    def _decode(response: httpx.Response, model):
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise PanelAPIError(f"error decoding response: {e}") from e

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def create_account(self, request: CreateAccountRequest) -> CreateAccountResponse:
        """Create a line on the panel."""
        if self.is_simulation_mode:
            return self.simulate_create_account(request)

        response = self._request(
            "POST",
            "/ext/line/create",
            json=request.model_dump(exclude_none=True),
        )
        return self._decode(response, CreateAccountResponse)

    def find_account(self, username: str) -> list[Line]:
        """Find lines by username."""
        if self.is_simulation_mode:
            return self.simulate_find_account(username)

        response = self._request("GET", "/ext/lines", params={"username": username})
        try:
            return [Line.model_validate(item) for item in response.json()]
        except (TypeError, ValueError, ValidationError) as e:
            raise PanelAPIError(f"error decoding response: {e}") from e

    def extend_package(self, line_id: str, request: ExtendPackageRequest) -> ExtendPackageResponse:
        """Renew an existing line with a new package."""
        if self.is_simulation_mode:
            return self.simulate_extend_package(line_id, request)

        response = self._request(
            "POST",
            f"/ext/line/{quote(line_id, safe='')}/renew",
            json=request.model_dump(),
        )
        return self._decode(response, ExtendPackageResponse)

    # -------------------------------------------------------------------------
    # Simulation
    # -------------------------------------------------------------------------

    def simulate_create_account(self, request: CreateAccountRequest) -> CreateAccountResponse:
        months, price = _package_terms(request.package)
        return CreateAccountResponse(
            line_id=f"sim-{_uuid_from(self._rng)}",
            expire_at=_months_from_now(months),
            transaction_amount=price,
            rid=request.rid,
        )

    def simulate_find_account(self, username: str) -> list[Line]:
        # One line for an explicit username, otherwise a handful of strangers
        count = 1 if username else self._rng.randint(1, 3)

        lines = []
        for _ in range(count):
            sim_username = username or f"test_user_{self._rng.randrange(10000):04d}"
            expire_at = datetime.now(timezone.utc) + timedelta(
                days=30 * self._rng.randrange(12) + self._rng.randrange(30)
            )
            lines.append(
                Line(
                    line_id=f"sim-{_uuid_from(self._rng)}",
                    username=sim_username,
                    password=f"TestPass{self._rng.randrange(10000):04d}!",
                    expire_at=expire_at,
                    is_enabled=True,
                    max_connections=1,
                )
            )
        return lines

    def simulate_extend_package(
        self,
        line_id: str,
        request: ExtendPackageRequest,
    ) -> ExtendPackageResponse:
        months, price = _package_terms(request.package)
        return ExtendPackageResponse(
            line_id=line_id,
            expire_at=_months_from_now(months),
            transaction_amount=price,
            rid=request.rid,
        )


def _uuid_from(rng: random.Random) -> str:
    """Random UUID4 string drawn from *rng*."""
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))
