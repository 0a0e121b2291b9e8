"""OAuth state carried through the provider's ``state`` parameter."""

from pydantic import BaseModel


class OAuthState(BaseModel):
    """Where to send the browser after the callback, and whether this is a link.

    A present ``user_id`` marks a linking request from an already signed-in user.
    ``mode`` is passed back to the frontend untouched.
    """

    path: str = "/"
    report_id: str = ""
    user_id: str | None = None
    mode: str = "auth"
    origin: str | None = None

    @property
    def is_linking(self) -> bool:
        return bool(self.user_id)

    def safe_path(self) -> str:
        """The redirect path if it is same-site, otherwise "/"."""
        if self.path.startswith("/") and not self.path.startswith("//"):
            return self.path
        return "/"
