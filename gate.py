from __future__ import annotations

from typing import Optional

from errors import Unauthorized


ADMIN_PRINCIPAL = "admin"


class SessionGate:
    """Single shared-password login.

    ``login`` trades the password for a static token; ``verify`` checks that
    token on every protected request and returns the principal.
    """

    def __init__(self, password: str, token: str) -> None:
        self.password = password
        self.token = token

    def login(self, password: Optional[str]) -> str:
        if password is None or password != self.password:
            raise Unauthorized("Invalid password")
        return self.token

    def verify(self, credential: Optional[str]) -> str:
        if not credential or credential != self.token:
            raise Unauthorized("Invalid or missing session token")
        return ADMIN_PRINCIPAL
