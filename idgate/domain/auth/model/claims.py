"""Access token claims."""

from pydantic import BaseModel


class AccessClaims(BaseModel):
    """Decoded access token payload.

    ``whitelisted`` is None for tokens issued before the claim existed.
    """

    sub: str
    github_id: str = ""
    github_username: str = ""
    google_id: str = ""
    google_email: str = ""
    admin: bool = False
    whitelisted: bool | None = None
    iat: int
    exp: int
    jti: str = ""
