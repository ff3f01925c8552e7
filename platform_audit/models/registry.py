"""Registry of addressable platform surfaces."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _check_endpoint(endpoint: str) -> str:
    # Endpoints are joined onto the base URL verbatim
    if not endpoint.startswith("/"):
        raise ValueError(f"API endpoint must start with '/': {endpoint!r}")
    return endpoint


class RegistryPage(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    name: str
    name_ar: str
    api_endpoints: tuple[str, ...] = ()  # backing services, in declared order
    required_role: Optional[str] = None

    @field_validator("api_endpoints")
    @classmethod
    def endpoints_are_absolute(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(_check_endpoint(e) for e in v)


class RegistryApi(BaseModel):
    model_config = ConfigDict(frozen=True)

    endpoint: str
    method: str = "GET"
    name: str
    name_ar: str

    @field_validator("endpoint")
    @classmethod
    def endpoint_is_absolute(cls, v: str) -> str:
        return _check_endpoint(v)


class PlatformRegistry(BaseModel):
    model_config = ConfigDict(frozen=True)

    pages: tuple[RegistryPage, ...] = Field(default_factory=tuple)
    apis: tuple[RegistryApi, ...] = Field(default_factory=tuple)

    def find_page(self, path: str) -> RegistryPage | None:
        for page in self.pages:
            if page.path == path:
                return page
        return None
