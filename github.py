"""
GitHub repository listing used by the public profile page
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from fastapi import Request

from errors import UpstreamError

logger = logging.getLogger(__name__)


class GithubClient:
    def __init__(self, base_url: str = "https://api.github.com", client_id: Optional[str] = None,
                 client_secret: Optional[str] = None, transport: Optional[httpx.BaseTransport] = None,
                 timeout: float = 10.0):
        self.client_id = client_id
        self.client_secret = client_secret
        self._http = httpx.Client(
            base_url=base_url,
            headers={"User-Agent": "devconnector-api"},
            timeout=timeout,
            transport=transport,
        )

    def latest_repos(self, username: str, limit: int = 5) -> List[Dict[str, Any]]:
        params = {"per_page": limit, "sort": "created:asc"}
        if self.client_id and self.client_secret:
            params["client_id"] = self.client_id
            params["client_secret"] = self.client_secret
        try:
            response = self._http.get(f"/users/{quote(username, safe='')}/repos", params=params)
        except httpx.HTTPError as e:
            logger.warning(f"[GITHUB] Request for '{username}' failed: {e}")
            raise UpstreamError("No Github profile was found") from e
        if response.status_code != 200:
            logger.warning(f"[GITHUB] Lookup for '{username}' returned {response.status_code}")
            raise UpstreamError("No Github profile was found")
        return response.json()

    def close(self) -> None:
        self._http.close()


def get_github(request: Request) -> GithubClient:
    return request.app.state.github
