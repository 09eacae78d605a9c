"""GitHub raw README client."""

from dataclasses import dataclass

import httpx

from tutorialize.domain.errors import ContentExtractionError
from tutorialize.services.content import ReadmeClient

RAW_GITHUB_BASE_URL = "https://raw.githubusercontent.com"


@dataclass
class HttpxReadmeClient(ReadmeClient):
    """README client reading from raw.githubusercontent.com."""

    http_client: httpx.AsyncClient
    base_url: str = RAW_GITHUB_BASE_URL
    timeout: float = 30.0

    @classmethod
    def create(cls, timeout: float = 30.0) -> "HttpxReadmeClient":
        """Create a README client with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient(), timeout=timeout)

    async def fetch_readme(self, repo_path: str, branch: str) -> str | None:
        """Return README.md on ``branch``, or None when the file is missing."""
        url = f"{self.base_url}/{repo_path}/{branch}/README.md"
        try:
            response = await self.http_client.get(url, timeout=self.timeout)
        except httpx.HTTPError as exc:
            raise ContentExtractionError(
                f"Failed to reach GitHub for {repo_path}"
            ) from exc
        if not response.is_success:
            return None
        return response.text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
