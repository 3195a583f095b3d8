from typing import Dict, Iterator, Optional

from models import ClientAccount


class AccountStore:
    """
    Client accounts keyed by client ID, created on first reference.
    Owned by the processing loop; callers mutate the returned accounts directly.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}

    def get_or_create(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        account = self._accounts.get(client_id)
        if account is None:
            account = ClientAccount(client_id=client_id)
            self._accounts[client_id] = account
        return account

    def get(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def snapshot(self) -> Dict[int, ClientAccount]:
        """Return all accounts ordered by client ID (for final output)."""
        return {account.client_id: account for account in self}

    def __iter__(self) -> Iterator[ClientAccount]:
        for client_id in sorted(self._accounts):
            yield self._accounts[client_id]

    def __contains__(self, client_id: int) -> bool:
        return client_id in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)
