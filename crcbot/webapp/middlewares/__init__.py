from crcbot.webapp.middlewares.discord_auth import (
    DiscordSignatureMiddleware,
    SignatureInvalid,
    verify_signature,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
)

__all__ = ["DiscordSignatureMiddleware", "SignatureInvalid", "verify_signature", "SIGNATURE_HEADER", "TIMESTAMP_HEADER"]
