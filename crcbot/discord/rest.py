from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import logging

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


@dataclass
class DiscordResponse:
    """Результат запроса к REST API Discord"""
    status_code: Optional[int]
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300

    @property
    def message_id(self) -> Optional[str]:
        message_id = self.data.get("id") if isinstance(self.data, dict) else None
        return str(message_id) if message_id is not None else None


class DiscordRestClient:
    """
    Минимальный клиент REST API Discord для публикации и закрепления сообщений.
    Повторные попытки не выполняются: ошибка возвращается вызывающему коду.
    """

    def __init__(self, bot_token: str, api_base: str = "https://discord.com/api/v10",
                 client: httpx.AsyncClient = None, timeout: float = DEFAULT_TIMEOUT):
        self.api_base = api_base.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._headers = {"Authorization": f"Bot {bot_token}"}

    async def _request(self, method: str, path: str, payload: Dict[str, Any] = None) -> DiscordResponse:
        url = f"{self.api_base}{path}"
        try:
            response = await self._client.request(method, url, headers=self._headers, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Ошибка соединения с Discord ({method} {path}): {e}")
            return DiscordResponse(status_code=None, error=str(e))

        data: Dict[str, Any] = {}
        if response.content:
            try:
                data = response.json()
            except ValueError:
                data = {}
        if not response.is_success:
            logger.warning(f"Discord вернул HTTP {response.status_code} на {method} {path}: {response.text[:200]}")
        return DiscordResponse(status_code=response.status_code, data=data)

    async def post_message(self, channel_id: str, payload: Dict[str, Any]) -> DiscordResponse:
        """Публикует сообщение в канал"""
        return await self._request("POST", f"/channels/{channel_id}/messages", payload)

    async def pin_message(self, channel_id: str, message_id: str) -> bool:
        """Закрепляет сообщение в канале"""
        response = await self._request("PUT", f"/channels/{channel_id}/pins/{message_id}")
        return response.ok

    async def close(self):
        if self._owns_client:
            await self._client.aclose()
