"""URL and identifier domain models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Scheme(str, Enum):
    HTTP = "http"
    HTTPS = "https"
    FTP = "ftp"
    MAILTO = "mailto"
    TEL = "tel"
    SMS = "sms"
    OTHER = "other"
    INVALID = "invalid"

    @property
    def is_web(self) -> bool:
        return self in (Scheme.HTTP, Scheme.HTTPS)


class IdentifierKind(str, Enum):
    DOMAIN = "domain"
    EMAIL = "email"
    PHONE = "phone"


class Identifier(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: IdentifierKind
    value: str

    @property
    def digits(self) -> str | None:
        """Normalized digit string for phone identifiers, ``None`` otherwise."""

        if self.kind is not IdentifierKind.PHONE:
            return None
        # normalize imports this module
        from phish_link_detector.domain.url.normalize import normalize_phone

        return normalize_phone(self.value)


class LinkContext(BaseModel):
    """What the user sees next to where the link actually goes."""

    model_config = ConfigDict(frozen=True)

    visible_text: str | None = None
    href_url: str | None = None


class RegistrableDomain(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    suffix: str

    @property
    def domain(self) -> str:
        return f"{self.label}.{self.suffix}"
