import httpx

from herobook.infrastructure.resilient_http import post_json_with_retry


class NarrationClient:
    """Posts ``{"context", "prompt"}`` to a text generation endpoint and returns its ``text``."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        retries: int = 2,
        backoff_seconds: float = 0.2,
        http_client: httpx.AsyncClient | None = None,
        path: str = "/narrate",
    ) -> None:
        self._retries = retries
        self._backoff_seconds = backoff_seconds
        self._path = path
        self.client = http_client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def narrate(self, context: str, prompt: str) -> str:
        payload = await post_json_with_retry(
            self.client,
            self._path,
            payload={"context": context, "prompt": prompt},
            retries=self._retries,
            backoff_seconds=self._backoff_seconds,
        )
        return str(payload.get("text") or "").strip()

    async def aclose(self) -> None:
        await self.client.aclose()
