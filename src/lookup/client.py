"""HTTP client for the item search service."""

import json
import logging
from typing import Any
from urllib.parse import quote

import requests

from src.config import Settings
from src.errors import MalformedInputError

logger = logging.getLogger(__name__)

USER_AGENT = "item-waypoint-mapper/0.1"


class ItemLookupClient:
    """Search the item service by name, optionally through a CORS-style proxy."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self.settings = settings
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": USER_AGENT})

    def build_url(self, name: str, use_proxy: bool | None = None) -> str:
        """URL for a search, wrapped in the proxy prefix when proxying."""
        url = self.settings.api_base + quote(name, safe="")
        if self._use_proxy(use_proxy):
            return self.settings.proxy_url + quote(url, safe="")
        return url

    def search(self, name: str, use_proxy: bool | None = None) -> Any:
        """
        Look up items by name.

        Args:
            name: Item name or fragment; surrounding whitespace is ignored
            use_proxy: Override Settings.use_proxy for this request

        Returns:
            The decoded JSON payload, in whatever shape the service sent

        Raises:
            ValueError: If name is blank
            requests.HTTPError: If the service answers with an error status
            requests.RequestException: On connection problems
            MalformedInputError: If the response (or proxied body) is not JSON
        """
        query = (name or "").strip()
        if not query:
            raise ValueError("Please enter an item name.")

        proxied = self._use_proxy(use_proxy)
        url = self.build_url(query, use_proxy=proxied)
        logger.info(f"Searching items for '{query}' (proxy: {proxied})")

        response = self._session.get(
            url,
            headers={"Cache-Control": "no-cache"},
            timeout=self.settings.request_timeout,
        )
        response.raise_for_status()

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedInputError(f"Response is not JSON: {e}") from e

        if proxied:
            data = self._unwrap_proxy_body(data)
        return data

    def close(self) -> None:
        self._session.close()

    def _use_proxy(self, use_proxy: bool | None) -> bool:
        return self.settings.use_proxy if use_proxy is None else use_proxy

    @staticmethod
    def _unwrap_proxy_body(wrapper: Any) -> Any:
        """The proxy answers {url, status, headers, body: "<json string>"}."""
        if not isinstance(wrapper, dict) or not isinstance(wrapper.get("body"), str):
            return wrapper
        try:
            return json.loads(wrapper["body"])
        except json.JSONDecodeError as e:
            raise MalformedInputError(f"Proxy body parse failed: {e}") from e
