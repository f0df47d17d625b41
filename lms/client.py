"""HTTP client for the SmartLearn API.

Mirrors how the dashboards consume the API: one authenticated GET per load,
no retries, every failure reported once through ``notify`` and left terminal
for that action.
"""
import logging

import requests
from django.conf import settings

from .filters import ALL, filter_ratings
from .serializers import LoginForm, RegistrationForm

logger = logging.getLogger(__name__)

GENERIC_ERROR = "An error occurred. Please try again."
FORM_ERROR = "Please fix the errors in the form"


class ApiError(Exception):
    def __init__(self, message, status=None):
        super().__init__(message)
        self.message = message
        self.status = status


class FormInvalid(Exception):
    def __init__(self, errors):
        super().__init__(FORM_ERROR)
        self.errors = errors


def log_notify(level, message):
    logger.log(logging.ERROR if level == "error" else logging.INFO, "%s", message)


def _form_errors(form):
    errors = {}
    for field, messages in form.errors.items():
        errors[field] = str(messages[0]) if isinstance(messages, (list, tuple)) and messages else str(messages)
    return errors


class CredentialStore:
    """Token, user and remembered email for one client session."""

    def __init__(self, token=None, user=None, remembered_email=None):
        self.token = token
        self.user = user
        self.remembered_email = remembered_email

    def save_session(self, token, user):
        self.token = token
        self.user = user

    def clear(self):
        self.token = None
        self.user = None


class SmartLearnClient:
    def __init__(self, base_url=None, store=None, session=None, timeout=5, notify=None):
        self.base_url = (base_url or getattr(settings, "SMARTLEARN_API_URL", "http://localhost:5000/api")).rstrip("/")
        self.store = store if store is not None else CredentialStore()
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.notify = notify or log_notify

    def url(self, path):
        return f"{self.base_url}/{path.lstrip('/')}"

    def auth_headers(self, required=True):
        token = self.store.token
        if not token and required:
            raise ApiError("No authentication token found")
        return {"Content-Type": "application/json", "Authorization": f"Bearer {token or ''}"}

    def get(self, path, params=None, required_auth=True):
        return self.session.get(
            self.url(path),
            headers=self.auth_headers(required=required_auth),
            params=params,
            timeout=self.timeout,
        )

    def _submit(self, path, payload):
        try:
            response = self.session.post(self.url(path), json=payload, timeout=self.timeout)
            body = response.json()
            if not isinstance(body, dict):
                raise ValueError(f"unexpected response body: {body!r}")
            return body
        except (requests.RequestException, ValueError) as exc:
            logger.error("POST %s failed: %s", path, exc)
            self.notify("error", GENERIC_ERROR)
            raise ApiError(GENERIC_ERROR) from exc

    def login(self, email, password, remember=False):
        """Validate, then post credentials; returns the logged-in user dict."""
        form = LoginForm(data={"email": email, "password": password})
        if not form.is_valid():
            self.notify("error", FORM_ERROR)
            raise FormInvalid(_form_errors(form))

        body = self._submit("/auth/login", {"email": email, "password": password})
        if body.get("success") and body.get("data"):
            user = body["data"]["user"]
            self.store.save_session(body["data"]["token"], user)
            if remember:
                self.store.remembered_email = email
            else:
                self.store.remembered_email = None
            self.notify("success", f"Welcome back, {user.get('firstName')}!")
            return user

        message = body.get("message") or "Login failed"
        self.notify("error", message)
        raise ApiError(message)

    def register(self, **data):
        form = RegistrationForm(data=data)
        if not form.is_valid():
            self.notify("error", FORM_ERROR)
            raise FormInvalid(_form_errors(form))

        payload = {k: v for k, v in data.items() if k != "confirmPassword"}
        payload["role"] = "student"
        body = self._submit("/auth/register", payload)
        if body.get("success"):
            self.store.save_session(body["data"]["token"], body["data"]["user"])
            self.notify("success", "Registration successful! Welcome to CUG SmartLearn!")
            return body["data"]["user"]

        message = body.get("message") or "Registration failed"
        self.notify("error", message)
        raise ApiError(message)

    def logout(self):
        self.store.clear()


class DashboardView:
    """Fetch-then-render state for a stats dashboard.

    ``load`` moves ``loading`` to ``success`` or ``error`` exactly once.
    ``stats`` is only ever set from a complete ``success: true`` payload.
    """

    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"

    def __init__(self, client, path="/stats/admin", notify=None):
        self.client = client
        self.path = path
        self.notify = notify or client.notify
        self.state = self.LOADING
        self.stats = None
        self.error = None

    @property
    def is_loading(self):
        return self.state == self.LOADING

    def _fail(self, message):
        self.state = self.ERROR
        self.error = message
        self.notify("error", message)
        return None

    def load(self):
        self.state = self.LOADING
        self.stats = None
        if not self.client.store.token:
            return self._fail("No authentication token found")

        try:
            response = self.client.get(self.path)
            if not response.ok:
                logger.warning("GET %s -> %s", self.path, response.status_code)
                return self._fail("Failed to fetch stats")
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.error("Error fetching stats: %s", exc)
            return self._fail("Failed to fetch dashboard statistics")

        if not isinstance(body, dict):
            logger.error("GET %s returned %r", self.path, body)
            return self._fail("Failed to fetch dashboard statistics")
        if not body.get("success"):
            return self._fail(body.get("message") or "Failed to fetch stats")

        self.stats = body.get("data")
        self.state = self.SUCCESS
        return self.stats


class RatingsBrowser:
    """Loads every rating once and filters the copy in memory."""

    def __init__(self, client, notify=None):
        self.client = client
        self.notify = notify or client.notify
        self.loading = False
        self.ratings = []
        self.visible = []
        self.search = ""
        self.type_filter = ALL
        self.semester_filter = ALL

    def load(self):
        self.loading = True
        try:
            response = self.client.get("/ratings", params={"limit": 0}, required_auth=False)
            if not response.ok:
                raise ApiError("Failed to fetch ratings", status=response.status_code)
            body = response.json()
            if not isinstance(body, dict):
                raise ApiError("Failed to fetch ratings", status=response.status_code)
            self.ratings = body.get("data") or []
        except (ApiError, requests.RequestException, ValueError) as exc:
            logger.error("loading ratings failed: %s", exc)
            self.notify("error", "Failed to load ratings")
        finally:
            self.loading = False
        self.refresh()
        return self.visible

    def refresh(self):
        self.visible = filter_ratings(
            self.ratings,
            search=self.search,
            type=self.type_filter,
            semester=self.semester_filter,
        )
        return self.visible

    def set_search(self, value):
        self.search = value or ""
        return self.refresh()

    def set_type(self, value):
        self.type_filter = value or ALL
        return self.refresh()

    def set_semester(self, value):
        self.semester_filter = value or ALL
        return self.refresh()

    def semesters(self):
        return sorted({r.get("semester") for r in self.ratings if r.get("semester")})
