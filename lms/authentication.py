"""JWT authentication that also accepts the server-set session cookie."""
from django.conf import settings
from rest_framework import exceptions
from rest_framework.authentication import CSRFCheck
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.tokens import RefreshToken


def auth_cookie_name() -> str:
	return getattr(settings, "SMARTLEARN_AUTH_COOKIE", "smartlearn_token")


def issue_token(user) -> str:
	refresh = RefreshToken.for_user(user)
	access = refresh.access_token
	profile = getattr(user, "profile", None)
	access["role"] = getattr(profile, "role", None) or ("admin" if user.is_superuser else "student")
	return str(access)


def set_auth_cookie(response, token: str):
	lifetime = settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"]
	response.set_cookie(
		auth_cookie_name(),
		token,
		max_age=int(lifetime.total_seconds()),
		httponly=True,
		secure=not settings.DEBUG,
		samesite="Lax",
		path="/api",
	)
	return response


def clear_auth_cookie(response):
	response.delete_cookie(auth_cookie_name(), path="/api", samesite="Lax")
	return response


class CookieJWTAuthentication(JWTAuthentication):
	"""``Authorization: Bearer`` first, then the HttpOnly auth cookie.

	A token read from the cookie is sent by the browser on its own, so those
	requests go through the same CSRF check as DRF's ``SessionAuthentication``.
	"""

	def authenticate(self, request):
		header = self.get_header(request)
		from_cookie = header is None
		if from_cookie:
			raw_token = request.COOKIES.get(auth_cookie_name())
		else:
			raw_token = self.get_raw_token(header)
		if not raw_token:
			return None

		validated_token = self.get_validated_token(raw_token)
		user = self.get_user(validated_token)
		if from_cookie:
			self.enforce_csrf(request)
		return user, validated_token

	def enforce_csrf(self, request):
		def dummy_get_response(request):
			return None

		check = CSRFCheck(dummy_get_response)
		check.process_request(request)
		reason = check.process_view(request, None, (), {})
		if reason:
			raise exceptions.PermissionDenied(f"CSRF Failed: {reason}")
