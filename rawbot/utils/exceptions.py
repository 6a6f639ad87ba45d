"""Custom exceptions for the RAWBOT backend"""

from typing import Optional


class RawbotError(Exception):
    """Base exception for RAWBOT"""
    pass


class ConfigError(RawbotError):
    """Configuration error"""
    pass


class GraphAPIError(RawbotError):
    """Error object returned by the Meta Graph API"""

    def __init__(self, message: str, error_code: Optional[int] = None, error_subcode: Optional[int] = None):
        self.error_code = error_code
        self.error_subcode = error_subcode
        super().__init__(message)


class LinkableAccountNotFoundError(RawbotError):
    """No Facebook Page with a linked Instagram Business account"""
    pass


class NoPagesFoundError(LinkableAccountNotFoundError):
    """The authenticated user administers no Pages at all"""
    pass


class NoLinkedAccountError(LinkableAccountNotFoundError):
    """Pages exist but none carries an instagram_business_account"""
    pass


class StoreError(RawbotError):
    """Bot document store read/write error"""
    pass


class BotNotFoundError(StoreError):
    """No bot document exists for the given id"""

    def __init__(self, bot_id: str):
        self.bot_id = bot_id
        super().__init__(f"Bot {bot_id} not found")


class WebhookVerificationError(RawbotError):
    """Webhook handshake token did not match"""
    pass


class PromptRelayError(RawbotError):
    """Generative-language API call failed"""
    pass


class UnsupportedFileError(RawbotError):
    """Uploaded knowledge file cannot be converted to text"""
    pass
