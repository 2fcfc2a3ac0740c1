import logging
from typing import Dict, FrozenSet, Iterable, List, Set, Tuple

from realityrift.game.models import Handle, ZERO_HANDLE, checksum

logger = logging.getLogger(__name__)


class AccessControlLedger:
    """
    Append-only record of which principals may request decryption of which
    ciphertext handles.

    Grants are never removed. Every new (handle, principal) pair advances
    the ledger version, so a snapshot can be compared against a later one.
    """

    def __init__(self):
        # handle -> principals
        self._grants: Dict[Handle, Set[str]] = {}
        # (version, handle, principal) in insertion order
        self._history: List[Tuple[int, Handle, str]] = []

    @property
    def version(self) -> int:
        return len(self._history)

    def grant(self, handle: Handle, principal: str) -> bool:
        """
        Adds `principal` to the handle's grant set. Returns False when the
        pair was already present.
        """
        if handle == ZERO_HANDLE:
            raise ValueError("Cannot grant access to the empty handle")
        principal = checksum(principal)
        principals = self._grants.setdefault(handle, set())
        if principal in principals:
            return False
        principals.add(principal)
        self._history.append((self.version + 1, handle, principal))
        logger.debug(f"Granted {principal} on {handle} (v{self.version})")
        return True

    def grant_many(self, handles: Iterable[Handle], principals: Iterable[str]) -> int:
        principals = list(principals)
        return sum(self.grant(h, p) for h in handles for p in principals)

    def is_authorized(self, handle: Handle, principal: str) -> bool:
        try:
            principal = checksum(principal)
        except ValueError:
            return False
        return principal in self._grants.get(handle, ())

    def principals(self, handle: Handle) -> FrozenSet[str]:
        return frozenset(self._grants.get(handle, ()))

    def history(self, since: int = 0) -> List[Tuple[int, Handle, str]]:
        return self._history[since:]
