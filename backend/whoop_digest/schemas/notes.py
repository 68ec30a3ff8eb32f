"""Pydantic schemas for note generation and authorization API operations."""

from typing import Optional

from pydantic import BaseModel, Field


class NoteResponse(BaseModel):
    """Schema for a generated note."""

    path: str = Field(..., description="Vault-relative path of the written note")
    created: bool = Field(..., description="True if the note was new, False if overwritten")

    class Config:
        json_schema_extra = {
            "example": {
                "path": "Health/WHOOP/2026/daily-2026-02-22.md",
                "created": True,
            }
        }


class BackfillResponse(BaseModel):
    """Schema for backfill summary."""

    written: int = Field(..., ge=0, description="Number of notes written")
    skipped: int = Field(..., ge=0, description="Number of days skipped because a note existed")
    paths: list[str] = Field(default_factory=list, description="Paths of the written notes")

    class Config:
        json_schema_extra = {
            "example": {
                "written": 5,
                "skipped": 2,
                "paths": ["Health/WHOOP/2026/daily-2026-02-20.md"],
            }
        }


class AuthorizationUrlResponse(BaseModel):
    """Schema for the WHOOP authorization URL."""

    url: str = Field(..., description="URL to open in a browser")
    state: str = Field(..., description="CSRF state to compare on callback")


class TokenResponse(BaseModel):
    """Schema for stored WHOOP tokens."""

    access_token: str
    refresh_token: Optional[str] = None
    expires_in: int = Field(0, ge=0, description="Lifetime in seconds")
    token_type: str = "bearer"
    scope: str = ""
    expires_at: int = Field(0, description="Unix timestamp (ms) when the access token expires")
