from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Identity proven by a verified bearer token.

    Only the email travels in the token.  Roles are looked up from the
    user store on each request that needs them, so a promotion or demotion
    applies to the very next request instead of waiting for the token to
    expire.
    """

    email: str

    def owns(self, email: str | None) -> bool:
        return email is not None and self.email == email.strip().lower()
