"""Webhook payload models.

Only the fields autotag reads are modelled; everything else in the GitHub
push payload is ignored.
"""

from pydantic import BaseModel, ConfigDict, Field

NULL_SHA = "0" * 40


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Owner(_Payload):
    login: str = ""
    name: str | None = None

    @property
    def display_name(self) -> str:
        # push payloads fill "name"; other events only "login"
        return self.name or self.login


class Repository(_Payload):
    name: str
    full_name: str
    default_branch: str = "main"
    owner: Owner


class Pusher(_Payload):
    name: str = ""
    email: str | None = None


class Installation(_Payload):
    id: int


class PushEvent(_Payload):
    """GitHub ``push`` webhook payload."""

    ref: str
    before: str
    after: str
    repository: Repository
    pusher: Pusher = Field(default_factory=Pusher)
    installation: Installation | None = None

    @property
    def branch(self) -> str | None:
        """Branch name for branch pushes, None for tags."""
        prefix = "refs/heads/"
        if self.ref.startswith(prefix):
            return self.ref[len(prefix) :]
        return None

    @property
    def created(self) -> bool:
        return self.before == NULL_SHA

    @property
    def deleted(self) -> bool:
        return self.after == NULL_SHA
