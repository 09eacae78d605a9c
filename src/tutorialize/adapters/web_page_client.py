"""Web page fetching, optionally through the BrightData Web Unlocker."""

from dataclasses import dataclass

import httpx

from tutorialize.services.content import WebPageClient

BRIGHTDATA_REQUEST_URL = "https://api.brightdata.com/request"


@dataclass
class HttpxWebPageClient(WebPageClient):
    """Web page client using httpx."""

    http_client: httpx.AsyncClient
    brightdata_api_key: str | None = None
    timeout: float = 30.0

    @classmethod
    def create(
        cls, brightdata_api_key: str | None = None, timeout: float = 30.0
    ) -> "HttpxWebPageClient":
        """Create a web page client with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(follow_redirects=True),
            brightdata_api_key=brightdata_api_key,
            timeout=timeout,
        )

    async def fetch_html(self, url: str) -> str:
        """Return raw HTML for ``url``."""
        if self.brightdata_api_key:
            response = await self.http_client.post(
                BRIGHTDATA_REQUEST_URL,
                headers={"Authorization": f"Bearer {self.brightdata_api_key}"},
                json={"url": url, "format": "raw"},
                timeout=self.timeout,
            )
        else:
            response = await self.http_client.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
