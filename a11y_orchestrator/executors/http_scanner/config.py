"""Configuration for the HTTP scanner executor."""

from pydantic import BaseModel, Field, SecretStr


class HttpScannerConfig(BaseModel):
    """Configuration for the HTTP scanner executor."""

    base_url: str = Field(..., description="Scanner service root URL")
    token: SecretStr | None = None
    timeout: float = Field(default=600, gt=0, description="Seconds to wait per scan")
    poll_interval: float = Field(default=5, gt=0, description="Seconds between polls")
