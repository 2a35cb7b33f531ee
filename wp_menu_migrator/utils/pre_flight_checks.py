from __future__ import annotations

import requests


class PreFlightCheckError(Exception):
    """Custom exception for pre-flight check failures."""
    pass


def run_wordpress_pre_flight_checks(config: dict, *, session=None) -> None:
    """
    Verifies that the WordPress site is reachable and exposes the menus API.

    Args:
        config: The application configuration dictionary.
        session: Optional ``requests.Session`` (or compatible) to use.

    Raises:
        PreFlightCheckError: If any check fails.
    """
    print("[INFO] Running pre-flight checks...")

    wp = config.get("wordpress", {})
    base_url = (wp.get("base_url") or "").rstrip("/")
    username = wp.get("username")
    password = wp.get("application_password")
    timeout = wp.get("timeout", 10)

    if not base_url:
        raise PreFlightCheckError("WordPress base_url not found in the configuration file.")
    if not username or not password:
        raise PreFlightCheckError("WordPress username or application_password not found in the configuration file.")

    http = session or requests
    auth = (username, password)

    # Check 1: credentials
    me_url = f"{base_url}/wp-json/wp/v2/users/me"
    try:
        response = http.get(me_url, auth=auth, timeout=timeout)
        response.raise_for_status()
    except requests.HTTPError as e:
        if e.response.status_code == 401:
            raise PreFlightCheckError("The application password is invalid or the user does not exist.")
        else:
            raise PreFlightCheckError(f"Unexpected error while checking the users API: {e}")
    except requests.RequestException as e:
        raise PreFlightCheckError(f"Network error while connecting to the WordPress REST API: {e}")

    # Check 2: menus endpoint (WordPress 5.9+)
    menus_url = f"{base_url}/wp-json/wp/v2/menus"
    try:
        response = http.get(menus_url, auth=auth, params={"per_page": 1}, timeout=timeout)
        response.raise_for_status()
    except requests.HTTPError as e:
        if e.response.status_code in (403, 404):
            raise PreFlightCheckError("The menus REST API is not available; WordPress 5.9 or later and the edit_theme_options capability are required.")
        else:
            raise PreFlightCheckError(f"Unexpected error while checking the menus API: {e}")
    except requests.RequestException as e:
        raise PreFlightCheckError(f"Network error while checking the menus API: {e}")

    print("[INFO] Pre-flight checks passed successfully.")
