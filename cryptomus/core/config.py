from functools import lru_cache

from pydantic_settings import BaseSettings

DEFAULT_BASE_URL = "https://api.cryptomus.com/v1"


class Settings(BaseSettings):
    merchant_id: str
    payment_api_key: str
    payout_api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0  # seconds

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Endpoints are joined as base_url + "/payment/resend"
        self.base_url = self.base_url.rstrip("/")

    model_config = {"env_file": ".env", "env_prefix": "CRYPTOMUS_", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]
