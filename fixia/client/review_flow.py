"""State machine behind the Explorer "mandatory reviews" page.

IDLE -> LOADING -> EMPTY | LISTING -> REVIEWING -> SUBMITTING
    -> LISTING | REDIRECT (nothing left) | REVIEWING (with error)

Auth failures at any step end in LOGIN_REDIRECT. The local obligation list
only changes after the server acknowledges a submission.
"""

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fixia.client.api import ApiError, AuthError, Conflict, ExplorerApiClient, ValidationFailed
from fixia.models.review import SUB_RATING_FIELDS

logger = logging.getLogger(__name__)

DASHBOARD_PATH = "/explorador/dashboard"
LOGIN_PATH = "/auth/login"

RATING_FIELDS = ("rating", *SUB_RATING_FIELDS)


class FlowState(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    EMPTY = "empty"
    LISTING = "listing"
    REVIEWING = "reviewing"
    SUBMITTING = "submitting"
    REDIRECT = "redirect"
    LOGIN_REDIRECT = "login_redirect"


def blank_form(connection_id: str) -> dict[str, Any]:
    return {
        "connection_id": connection_id,
        "rating": 0,
        "comment": "",
        "service_quality_rating": 0,
        "punctuality_rating": 0,
        "communication_rating": 0,
        "value_for_money_rating": 0,
        "would_hire_again": True,
        "recommend_to_others": True,
        "review_photos": [],
    }


def _as_rating(value: Any) -> int | None:
    """Form widgets hand back ints, numeric strings or nothing."""
    if value in (None, ""):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def validate_form(form: dict[str, Any]) -> dict[str, str]:
    """Inline checks run before anything is sent."""
    errors: dict[str, str] = {}
    if not form.get("connection_id"):
        errors["connection_id"] = "Connection is required"
    rating = _as_rating(form.get("rating"))
    if rating is None or not 1 <= rating <= 5:
        errors["rating"] = "Rating must be between 1 and 5"
    if not str(form.get("comment") or "").strip():
        errors["comment"] = "Comment is required"
    for field in SUB_RATING_FIELDS:
        value = _as_rating(form.get(field))
        if value is None or (value and not 1 <= value <= 5):
            errors[field] = "Must be between 1 and 5"
    return errors


def to_payload(form: dict[str, Any]) -> dict[str, Any]:
    """Request body for a form that passed validate_form."""
    payload = dict(form)
    for field in RATING_FIELDS:
        payload[field] = _as_rating(form.get(field))
    return payload


Navigate = Callable[[str], Awaitable[None]]


class ReviewFlow:
    def __init__(
        self,
        api: ExplorerApiClient,
        navigate: Navigate,
        redirect_delay: float = 1.0,
    ) -> None:
        self.api = api
        self._navigate = navigate
        self.redirect_delay = redirect_delay

        self.state = FlowState.IDLE
        self.obligations: list[dict[str, Any]] = []
        self.blocking_status: dict[str, Any] | None = None
        self.active_obligation_id: str | None = None
        self.form: dict[str, Any] | None = None
        self.error: str | None = None
        self.field_errors: dict[str, str] = {}

    async def load(self) -> None:
        """Fetch obligations and blocking status together."""
        self.state = FlowState.LOADING
        self.error = None
        try:
            obligations, blocking = await self._fetch_page()
        except AuthError:
            await self._to_login()
            return
        except ApiError as exc:
            logger.error("Could not load review obligations: %s", exc.message)
            self.error = exc.message
            self.state = FlowState.IDLE
            return

        self.obligations = obligations
        self.blocking_status = blocking
        self.state = FlowState.LISTING if obligations else FlowState.EMPTY

    async def _fetch_page(self) -> tuple[list[dict[str, Any]], dict[str, Any]]:
        """Both reads run concurrently; if one fails the other is cancelled."""
        tasks = [
            asyncio.create_task(self.api.get_review_obligations()),
            asyncio.create_task(self.api.get_blocking_status()),
        ]
        try:
            obligations, blocking = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return obligations, blocking

    def start_review(self, obligation_id: str) -> None:
        obligation = self._find(obligation_id)
        if obligation is None:
            raise KeyError(obligation_id)
        self.active_obligation_id = obligation_id
        self.form = blank_form(obligation["connection_id"])
        self.error = None
        self.field_errors = {}
        self.state = FlowState.REVIEWING

    def update_form(self, **fields: Any) -> None:
        if self.state is not FlowState.REVIEWING or self.form is None:
            raise RuntimeError("No review in progress")
        self.form.update(fields)

    def cancel(self) -> None:
        self._clear_form()
        self.state = FlowState.LISTING if self.obligations else FlowState.EMPTY

    async def submit(self) -> bool:
        """Send the active form. Returns True once the server accepted it."""
        if self.state is not FlowState.REVIEWING or self.form is None:
            raise RuntimeError("No review in progress")

        self.field_errors = validate_form(self.form)
        if self.field_errors:
            self.error = "Please fix the highlighted fields"
            return False

        self.state = FlowState.SUBMITTING
        self.error = None
        try:
            await self.api.submit_review(to_payload(self.form))
        except AuthError:
            await self._to_login()
            return False
        except Conflict as exc:
            self.error = exc.message
            await self._reconcile()
            return False
        except ValidationFailed as exc:
            self.error = exc.message
            self.field_errors = exc.errors
            self.state = FlowState.REVIEWING
            return False
        except ApiError as exc:
            self.error = exc.message
            self.state = FlowState.REVIEWING
            return False

        # Server acknowledged: apply the confirmed removal locally
        self.obligations = [o for o in self.obligations if o["id"] != self.active_obligation_id]
        self._clear_form()
        try:
            self.blocking_status = await self.api.get_blocking_status()
        except AuthError:
            await self._to_login()
            return True
        except ApiError as exc:
            logger.warning("Could not refresh blocking status: %s", exc.message)

        if self.obligations:
            self.state = FlowState.LISTING
        else:
            await self._redirect(DASHBOARD_PATH)
        return True

    async def _reconcile(self) -> None:
        """Re-read the server's obligations after a conflict."""
        active = self.active_obligation_id
        try:
            self.obligations = await self.api.get_review_obligations()
            self.blocking_status = await self.api.get_blocking_status()
        except AuthError:
            await self._to_login()
            return
        except ApiError as exc:
            logger.warning("Could not reconcile obligations: %s", exc.message)
            self.state = FlowState.REVIEWING
            return

        if active is not None and self._find(active) is not None:
            self.state = FlowState.REVIEWING
            return
        self._clear_form()
        if self.obligations:
            self.state = FlowState.LISTING
        else:
            await self._redirect(DASHBOARD_PATH)

    async def _redirect(self, path: str) -> None:
        self.state = FlowState.REDIRECT
        if self.redirect_delay > 0:
            await asyncio.sleep(self.redirect_delay)
        await self._navigate(path)

    async def _to_login(self) -> None:
        self._clear_form()
        self.state = FlowState.LOGIN_REDIRECT
        await self._navigate(LOGIN_PATH)

    def _find(self, obligation_id: str) -> dict[str, Any] | None:
        for obligation in self.obligations:
            if obligation["id"] == obligation_id:
                return obligation
        return None

    def _clear_form(self) -> None:
        self.active_obligation_id = None
        self.form = None
        self.field_errors = {}
