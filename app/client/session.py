"""
Client Session - the credential a client holds between runs

Loaded once at startup, saved after login and cleared on logout. The token
alone is the credential; nothing on the server backs this state.
"""
from pathlib import Path
from typing import Optional
import logging

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ClientSession(BaseModel):
    token: Optional[str] = None
    role: Optional[str] = None
    user_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def auth_headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    @classmethod
    def load(cls, path: Path) -> "ClientSession":
        """Restore a saved session; a missing or corrupt file gives an empty one"""
        path = Path(path)
        if not path.exists():
            return cls()
        try:
            return cls.model_validate_json(path.read_text(encoding="utf-8"))
        except ValueError as e:
            logger.warning(f"Ignoring unreadable session file {path}: {str(e)}")
            return cls()

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(), encoding="utf-8")

    def clear(self) -> None:
        self.token = None
        self.role = None
        self.user_id = None
