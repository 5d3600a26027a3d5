class CryptomusError(Exception):
    pass


class WebhookError(CryptomusError):
    pass


class MissingSignatureError(WebhookError):
    def __init__(self, message: str = "missing signature"):
        super().__init__(message)


class InvalidSignatureError(WebhookError):
    def __init__(self, message: str = "invalid signature"):
        super().__init__(message)


class UnknownWebhookTypeError(WebhookError):
    def __init__(self, webhook_type: str):
        self.webhook_type = webhook_type
        super().__init__(f"unknown webhook type: {webhook_type!r}")


class ValidationError(CryptomusError, ValueError):
    """Raised before any request is sent when the caller's input is incomplete."""
