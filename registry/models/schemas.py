"""
Name Registry -- Pydantic Data Models

Request and response bodies for every endpoint, plus the Record that
both storage backends return. The Field() descriptions and examples
show up in the interactive docs at /docs.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Stored submission
# ---------------------------------------------------------------------------

class Record(BaseModel):
    """One persisted name submission.

    Records are append-only: created by /api/submit, never edited or
    deleted. `id` is unique and increases with every submission, so
    sorting by id descending puts the newest entry first."""

    # Remote rows may carry extra columns (created_at etc.)
    model_config = ConfigDict(extra="ignore")

    id: int = Field(
        description="Unique, monotonically increasing identifier.",
        examples=[1770460200123],
    )
    name: str = Field(
        description="Submitted display name, trimmed.",
        examples=["Aysel"],
    )
    ip: str = Field(
        description="Client-supplied public IP, or the address the server observed.",
        examples=["203.0.113.7"],
    )
    time: str = Field(
        description="Submission time in Azerbaijan local time (UTC+4), YYYY-MM-DD HH:MM:SS.",
        examples=["2026-02-07 14:30:00"],
    )
    timestamp: str = Field(
        description="Submission instant in UTC, ISO-8601.",
        examples=["2026-02-07T10:30:00.123Z"],
    )


# ---------------------------------------------------------------------------
# POST /api/submit
# ---------------------------------------------------------------------------

class SubmitRequest(BaseModel):
    """A name submission from the public form.

    `name` is optional at the schema level so that a missing name gets
    the same 400 response as an empty one."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(
        default=None,
        description="Name to register. Leading and trailing whitespace is removed.",
        examples=["Aysel"],
    )
    public_ip: str | None = Field(
        default=None,
        alias="publicIP",
        description="Public IP the browser looked up for itself. Falls back to the observed address.",
        examples=["203.0.113.7"],
    )


class SubmitResponse(BaseModel):
    success: Literal[True] = True
    message: str = Field(examples=["Kayıt başarıyla eklendi"])
    record: Record


# ---------------------------------------------------------------------------
# POST /api/admin/login
# ---------------------------------------------------------------------------

class LoginRequest(BaseModel):
    username: str | None = Field(default=None, examples=["admin"])
    password: str | None = Field(default=None, examples=["s3cret"])


class LoginResponse(BaseModel):
    """Successful admin login. Send the token as `Authorization: Bearer <token>`."""

    success: Literal[True] = True
    token: str = Field(
        description="Opaque bearer token, valid for 24 hours.",
        examples=["YWRtaW46MTc3MDQ2MDIwMDEyMzo5ZjE..."],
    )


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------

class ErrorResponse(BaseModel):
    """Body of every 4xx/5xx response."""

    error: str = Field(examples=["Yetkisiz erişim"])


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    timestamp: str = Field(examples=["2026-02-07T10:30:00.123Z"])
    backend: Literal["file", "supabase"]
    data_file: str | None = Field(
        default=None,
        description="Path of the JSON file (file backend only).",
    )
    supabase_url_configured: bool
    supabase_key_configured: bool
    admin_configured: bool
    active_sessions: int
