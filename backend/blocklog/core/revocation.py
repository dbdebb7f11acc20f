import threading


class TokenRevocationStore:
    """Process-wide set of access tokens invalidated by logout.

    Entries are never evicted, so the set grows for the lifetime of the
    process. Expired tokens are rejected by signature checks anyway.
    """

    def __init__(self) -> None:
        self._tokens: set[str] = set()
        self._lock = threading.Lock()

    def revoke(self, token: str) -> None:
        with self._lock:
            self._tokens.add(token)

    def is_revoked(self, token: str) -> bool:
        with self._lock:
            return token in self._tokens

    def size(self) -> int:
        with self._lock:
            return len(self._tokens)


token_revocations = TokenRevocationStore()
