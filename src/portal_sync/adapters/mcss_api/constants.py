"""MCSS API paths and header names."""

SERVERS_PATH = "/api/v2/servers"

# Relay headers understood by the /mcss-proxy route.
TARGET_URL_HEADER = "mcss-target-url"
API_KEY_HEADER = "mcss-api-key"

# Header the MCSS endpoint itself expects.
UPSTREAM_API_KEY_HEADER = "apiKey"

DEFAULT_CONSOLE_LINES = 50


def server_path(server_id: str, suffix: str = "") -> str:
    """Path of a single server resource."""
    return f"{SERVERS_PATH}/{server_id}{suffix}"
