from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated JWT.

    user_id is the token subject; it is what submissions are recorded
    against.
    """

    user_id: str
