from os import environ as env
from typing import Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, HttpUrl, field_validator

from ._utils.constants import ENV_BASE_URL
from .models.errors import BaseUrlMissingError


class ClientConfig(BaseModel):
    base_url: str
    headers: Dict[str, str] = Field(default_factory=dict)

    @field_validator("base_url", mode="before")
    @classmethod
    def validate_url(cls, value: str) -> str:
        # absolute http(s) URL, e.g. https://api.example.com/v1
        HttpUrl(url=value)
        return value

    @classmethod
    def from_env(cls, headers: Optional[Dict[str, str]] = None) -> "ClientConfig":
        """Build a config from ``RESTCALL_BASE_URL``, loading ``.env`` first."""
        load_dotenv()

        base_url = env.get(ENV_BASE_URL)
        if not base_url:
            raise BaseUrlMissingError()

        return cls(base_url=base_url, headers=dict(headers or {}))
