"""
WordPress REST API backend for menu export and import.

This module implements :class:`~wp_menu_migrator.clients.base.MenuStore`
on top of the core REST endpoints that WordPress ships since 5.9:
``/wp/v2/menus``, ``/wp/v2/menu-items`` and ``/wp/v2/menu-locations``,
plus the post type and taxonomy collections used to resolve menu item
targets by natural key.  Requests are authenticated with an application
password over HTTP basic auth.

A simple rate limiter keeps the client well below what shared hosts
tolerate, and a generic retry wrapper handles transient network errors and
server-side throttling (429 or 5xx).  Every failure that escapes the retry
loop is re-raised as :class:`~wp_menu_migrator.clients.base.MenuStoreError`.

Usage example::

    from wp_menu_migrator.clients.wordpress_api import WordPressMenuStore

    cfg = {"base_url": "https://example.com", "username": "admin",
           "application_password": "abcd efgh ijkl mnop"}
    store = WordPressMenuStore(cfg)
    for menu in store.get_menus():
        print(menu.name, len(store.get_items(menu)))

"""

from __future__ import annotations

import html
import time
from typing import Any, Callable, Dict, List, Optional, Union

import requests

from wp_menu_migrator.clients.base import ContentObject, MenuStoreError, NavMenu, NavMenuItem, Term
from wp_menu_migrator.utils.errors import log_message

###############################################################################
# Rate limiting and retry utilities
###############################################################################

RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})


class RateLimiter:
    """
    Hands out request slots ``60 / rpm`` seconds apart.  A caller that
    arrives before its slot sleeps until the slot opens; idle time is not
    banked, so a burst after a pause is still spaced out.
    """

    def __init__(self, rpm: int = 180, *, clock: Callable[[], float] = time.monotonic,
                 sleep_fn: Callable[[float], None] = time.sleep) -> None:
        self.interval = 60.0 / float(max(1, rpm))
        self._clock = clock
        self._sleep = sleep_fn
        self._next_slot: Optional[float] = None

    def wait(self) -> None:
        now = self._clock()
        if self._next_slot is not None and now < self._next_slot:
            self._sleep(self._next_slot - now)
            now = self._next_slot
        self._next_slot = now + self.interval


def _retry_delay(resp: Optional[requests.Response], attempt: int, base_delay: float) -> float:
    """Seconds to wait before the next attempt: ``Retry-After`` when numeric, else exponential."""
    retry_after = resp.headers.get("Retry-After") if resp is not None else None
    if retry_after:
        try:
            return max(0.0, float(retry_after))
        except ValueError:
            # HTTP-date form, fall back to backoff
            pass
    return base_delay * (2 ** attempt)


def with_retries(fn: Callable[[], requests.Response], *, max_attempts: int = 5, base_delay: float = 0.7,
                 sleep_fn: Callable[[float], None] = time.sleep,
                 log: Optional[Callable[..., None]] = None) -> requests.Response:
    """
    Call ``fn`` until it returns a non-error response.

    Throttling (429), 5xx responses and connection errors are retried up to
    ``max_attempts`` times in total; any other HTTP error is raised at once.

    :param fn: A zero-argument callable that performs the HTTP request.
    :param max_attempts: Total number of attempts, the first one included.
    :param base_delay: Base delay in seconds for exponential backoff.
    :param log: Optional ``log(message, level)`` sink notified of each retry.
    :return: The successful ``requests.Response``.
    :raises requests.RequestException: the last error once attempts run out.
    """
    for attempt in range(max_attempts):
        last = attempt == max_attempts - 1
        try:
            resp = fn()
            resp.raise_for_status()
            return resp
        except requests.HTTPError as e:
            if e.response.status_code not in RETRY_STATUSES or last:
                raise
            delay = _retry_delay(e.response, attempt, base_delay)
            reason = f"HTTP {e.response.status_code}"
        except requests.RequestException as e:
            if last:
                raise
            delay = _retry_delay(None, attempt, base_delay)
            reason = type(e).__name__
        if log is not None:
            log(f"{reason}, retrying in {delay:.1f}s (attempt {attempt + 2}/{max_attempts})", "WARNING")
        sleep_fn(delay)
    raise ValueError("max_attempts must be at least 1")


def _rendered(value: Any) -> str:
    """Return the raw form of a REST text field, falling back to the rendered HTML."""
    if isinstance(value, dict):
        raw = value.get("raw")
        if raw is not None:
            return raw
        return html.unescape(value.get("rendered") or "")
    return html.unescape(value or "")


###############################################################################
# Menu store
###############################################################################

class WordPressMenuStore:
    """
    :class:`~wp_menu_migrator.clients.base.MenuStore` backed by a live
    WordPress site.

    ``cfg`` is the ``wordpress`` section of the migration configuration:
    ``base_url``, ``username``, ``application_password`` and optionally
    ``timeout`` and ``rpm``.
    """

    def __init__(self, cfg: Dict[str, Any], *, session: Optional[requests.Session] = None,
                 sleep_fn: Callable[[float], None] = time.sleep) -> None:
        self.cfg = cfg
        self.base_url = (cfg.get("base_url") or "").rstrip("/")
        self.api_url = f"{self.base_url}/wp-json"
        self.timeout = cfg.get("timeout", 30)
        self.session = session or requests.Session()
        if cfg.get("username") and cfg.get("application_password"):
            self.session.auth = (cfg["username"], cfg["application_password"])
        self._limiter = RateLimiter(cfg.get("rpm", 180), sleep_fn=sleep_fn)
        self._sleep = sleep_fn
        self._rest_bases: Dict[str, str] = {}
        self._home_url: Optional[str] = None

    # -- transport ---------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.api_url}{path}"

        def do_request() -> requests.Response:
            self._limiter.wait()
            return self.session.request(method, url, timeout=self.timeout, **kwargs)

        try:
            return with_retries(do_request, sleep_fn=self._sleep, log=log_message)
        except requests.HTTPError as e:
            raise MenuStoreError(f"{method} {path} failed with {e.response.status_code}: {e.response.text}") from e
        except requests.RequestException as e:
            raise MenuStoreError(f"{method} {path} failed: {e}") from e

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("GET", path, params=params).json()

    def _get_optional(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET that maps a 404 to ``None`` instead of raising."""
        try:
            return self._get(path, params)
        except MenuStoreError as e:
            cause = e.__cause__
            if isinstance(cause, requests.HTTPError) and cause.response.status_code == 404:
                return None
            raise

    def _get_all(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Follow ``X-WP-TotalPages`` pagination and return every record."""
        params = dict(params or {})
        params.setdefault("per_page", 100)
        page = 1
        records: List[Dict[str, Any]] = []
        while True:
            params["page"] = page
            resp = self._request("GET", path, params=dict(params))
            records.extend(resp.json())
            total_pages = int(resp.headers.get("X-WP-TotalPages", "1") or 1)
            if page >= total_pages:
                return records
            page += 1

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", path, json=body).json()

    def _rest_base(self, kind: str, key: str) -> str:
        """Resolve the collection route of a post type (``kind="types"``) or taxonomy."""
        cache_key = f"{kind}:{key}"
        if cache_key not in self._rest_bases:
            data = self._get_optional(f"/wp/v2/{kind}/{key}")
            self._rest_bases[cache_key] = (data or {}).get("rest_base") or key
        return self._rest_bases[cache_key]

    # -- menus -------------------------------------------------------------

    @staticmethod
    def _menu(data: Dict[str, Any]) -> NavMenu:
        return NavMenu(id=int(data["id"]), name=html.unescape(data.get("name") or ""), slug=data.get("slug") or "")

    def home_url(self) -> str:
        if self._home_url is None:
            index = self._get_optional("/") or {}
            self._home_url = (index.get("home") or self.base_url).rstrip("/")
        return self._home_url

    def get_location_bindings(self) -> Dict[str, int]:
        data = self._get("/wp/v2/menu-locations") or {}
        return {key: int(loc.get("menu") or 0) for key, loc in data.items()}

    def get_menus(self) -> List[NavMenu]:
        return [self._menu(m) for m in self._get_all("/wp/v2/menus", {"context": "edit"})]

    def resolve_menu(self, identifier: Union[int, str]) -> Optional[NavMenu]:
        if isinstance(identifier, int) or str(identifier).isdigit():
            data = self._get_optional(f"/wp/v2/menus/{int(identifier)}", {"context": "edit"})
            if data:
                return self._menu(data)
        text = str(identifier)
        found = self._get("/wp/v2/menus", {"slug": text, "context": "edit"})
        if found:
            return self._menu(found[0])
        for menu in self.get_menus():
            if menu.name == text:
                return menu
        return None

    def create_menu(self, name: str) -> int:
        return int(self._post("/wp/v2/menus", {"name": name})["id"])

    def delete_menu(self, identifier: Union[int, str]) -> bool:
        menu = self.resolve_menu(identifier)
        if menu is None:
            return False
        data = self._request("DELETE", f"/wp/v2/menus/{menu.id}", params={"force": "true"}).json()
        return bool(data.get("deleted"))

    def set_location_binding(self, location: str, menu_id: int) -> None:
        data = self._get(f"/wp/v2/menus/{menu_id}", {"context": "edit"})
        locations = list(data.get("locations") or [])
        if location not in locations:
            locations.append(location)
        self._post(f"/wp/v2/menus/{menu_id}", {"locations": locations})

    # -- menu items --------------------------------------------------------

    @staticmethod
    def _item(data: Dict[str, Any]) -> NavMenuItem:
        return NavMenuItem(
            id=int(data["id"]),
            title=_rendered(data.get("title")),
            type=data.get("type") or "",
            object=data.get("object") or "",
            object_id=int(data.get("object_id") or 0),
            parent=int(data.get("parent") or 0),
            url=data.get("url") or "",
            menu_order=int(data.get("menu_order") or 0),
            target=data.get("target") or "",
            attr_title=data.get("attr_title") or "",
            description=data.get("description") or "",
            classes=[c for c in (data.get("classes") or []) if c],
            xfn=" ".join(x for x in (data.get("xfn") or []) if x),
        )

    def get_items(self, menu: NavMenu) -> List[NavMenuItem]:
        records = self._get_all(
            "/wp/v2/menu-items",
            {"menus": menu.id, "context": "edit", "orderby": "menu_order", "order": "asc"},
        )
        items = [self._item(r) for r in records]
        return sorted(items, key=lambda i: i.menu_order)

    def create_or_update_item(self, menu_id: int, item_id: int, fields: Dict[str, Any]) -> int:
        body: Dict[str, Any] = {k: v for k, v in fields.items() if v is not None and v is not False}
        body["menus"] = menu_id
        if "classes" in body:
            body["classes"] = str(body["classes"]).split()
        if "xfn" in body:
            body["xfn"] = str(body["xfn"]).split()
        path = f"/wp/v2/menu-items/{item_id}" if item_id else "/wp/v2/menu-items"
        return int(self._post(path, body)["id"])

    def associate_item_with_menu(self, item_id: int, menu_id: int) -> None:
        self._post(f"/wp/v2/menu-items/{item_id}", {"menus": menu_id})

    # -- item targets ------------------------------------------------------

    @staticmethod
    def _content(data: Dict[str, Any]) -> ContentObject:
        return ContentObject(
            id=int(data["id"]),
            name=data.get("slug") or "",
            title=_rendered(data.get("title")),
            type=data.get("type") or "",
        )

    @staticmethod
    def _term(data: Dict[str, Any]) -> Term:
        return Term(id=int(data["id"]), name=html.unescape(data.get("name") or ""), taxonomy=data.get("taxonomy") or "")

    def find_content_object(self, name: str, type_key: Optional[str] = None) -> Optional[ContentObject]:
        for key in ([type_key] if type_key else ["page", "post"]):
            base = self._rest_base("types", key)
            found = self._get_optional(f"/wp/v2/{base}", {"slug": name, "status": "publish", "per_page": 1})
            if found:
                return self._content(found[0])
        return None

    def get_content_object(self, object_id: int, type_key: str) -> Optional[ContentObject]:
        base = self._rest_base("types", type_key)
        data = self._get_optional(f"/wp/v2/{base}/{object_id}", {"context": "edit"})
        return self._content(data) if data else None

    def find_term(self, taxonomy: str, value: Union[int, str], by: str = "name") -> Optional[Term]:
        base = self._rest_base("taxonomies", taxonomy)
        if by == "id":
            if not str(value).isdigit():
                return None
            return self.get_term(int(value), taxonomy)
        for data in self._get_optional(f"/wp/v2/{base}", {"search": str(value), "per_page": 100}) or []:
            term = self._term(data)
            if term.name == str(value):
                return term
        return None

    def get_term(self, term_id: int, taxonomy: str) -> Optional[Term]:
        base = self._rest_base("taxonomies", taxonomy)
        data = self._get_optional(f"/wp/v2/{base}/{term_id}")
        return self._term(data) if data else None
