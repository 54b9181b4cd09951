from typing import Callable, List, Optional
import logging

from fastapi import Request, status
from fastapi.responses import Response
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Signature-Ed25519"
TIMESTAMP_HEADER = "X-Signature-Timestamp"


class SignatureInvalid(Exception):
    """Подпись запроса отсутствует или не прошла проверку"""


def load_verify_key(public_key_hex: str) -> Optional[VerifyKey]:
    if not public_key_hex:
        return None
    try:
        return VerifyKey(bytes.fromhex(public_key_hex))
    except (ValueError, TypeError) as e:
        logger.error(f"Некорректный DISCORD_PUBLIC_KEY: {e}")
        return None


def verify_signature(verify_key: Optional[VerifyKey], signature_hex: Optional[str],
                     timestamp: Optional[str], body: bytes) -> None:
    """
    Проверяет Ed25519-подпись Discord над байтами timestamp + тело запроса.

    Raises:
        SignatureInvalid: подпись отсутствует, некорректна или не совпадает
    """
    if verify_key is None:
        raise SignatureInvalid("Публичный ключ не настроен")
    if not signature_hex or not timestamp:
        raise SignatureInvalid("Отсутствуют заголовки подписи")
    try:
        verify_key.verify(timestamp.encode("utf-8") + body, bytes.fromhex(signature_hex))
    except (BadSignatureError, ValueError, TypeError) as e:
        raise SignatureInvalid(f"Подпись не прошла проверку: {e}")


class DiscordSignatureMiddleware(BaseHTTPMiddleware):
    """
    Middleware для проверки подписи входящих взаимодействий Discord.
    Неподписанные запросы отклоняются с 401 до разбора тела.
    """

    def __init__(
        self,
        app,
        public_key: str = None,
        protected_paths: List[str] = None,
    ):
        super().__init__(app)
        self.verify_key = load_verify_key(public_key)
        self.protected_paths = protected_paths or ["/interactions"]

        if self.verify_key is None:
            logger.error("DISCORD_PUBLIC_KEY не указан, все взаимодействия будут отклонены")

    async def dispatch(self, request: Request, call_next: Callable):
        if request.url.path not in self.protected_paths:
            return await call_next(request)

        body = await request.body()
        try:
            verify_signature(
                self.verify_key,
                request.headers.get(SIGNATURE_HEADER),
                request.headers.get(TIMESTAMP_HEADER),
                body,
            )
        except SignatureInvalid as e:
            logger.warning(f"Отклонен запрос {request.url.path}: {e}")
            return Response(status_code=status.HTTP_401_UNAUTHORIZED)

        return await call_next(request)
