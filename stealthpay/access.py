"""
Access grants.

Reading deposit data on a permissioned L2 needs an authorization obtained out
of band. Instead of a process-wide "authorized" flag the grant is an explicit
object handed to the scanner, the claim path and the ledger reads.
"""

from dataclasses import dataclass, field
from typing import FrozenSet

from .errors import AuthorizationRequired

READ_DEPOSITS = "deposits:read"
SUBMIT_CLAIMS = "claims:submit"


@dataclass(frozen=True)
class AccessGrant:
    authorized: bool = False
    scopes:     FrozenSet[str] = field(default_factory=frozenset)
    subject:    str = ""

    @classmethod
    def full(cls, subject: str = "") -> "AccessGrant":
        return cls(authorized=True, scopes=frozenset({READ_DEPOSITS, SUBMIT_CLAIMS}),
                   subject=subject)

    @classmethod
    def anonymous(cls) -> "AccessGrant":
        return cls()

    def allows(self, scope: str) -> bool:
        return self.authorized and scope in self.scopes

    def require(self, scope: str):
        if not self.authorized:
            raise AuthorizationRequired("Not authorized -- obtain an access grant first.")
        if scope not in self.scopes:
            raise AuthorizationRequired(f"Access grant lacks scope {scope!r}.")
