"""Supabase REST path constants."""

AUTH_PATH = "/auth/v1"
REST_PATH = "/rest/v1"
STORAGE_PATH = "/storage/v1"

TOKEN_PATH = f"{AUTH_PATH}/token"
SIGNUP_PATH = f"{AUTH_PATH}/signup"
LOGOUT_PATH = f"{AUTH_PATH}/logout"
RECOVER_PATH = f"{AUTH_PATH}/recover"
USER_PATH = f"{AUTH_PATH}/user"

# Status codes GoTrue uses for rejected credentials or sessions.
AUTH_REJECTION_STATUSES = frozenset({400, 401, 403, 422})
