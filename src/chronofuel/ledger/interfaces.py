"""
chronofuel/ledger/interfaces.py

Collaborator interfaces consumed by the reward engine.

The engine never keeps token balances or certificate records itself; it
calls these interfaces. Any backend works (in-memory, database, chain
client) as long as it honours the semantics below. Backends that also
implement snapshot()/restore() take part in the engine's all-or-nothing
rollback.
"""

from abc import ABC, abstractmethod


class Ledger(ABC):
    """
    Fungible token ledger.

    Amounts are integers in wei. `caller` / `spender` identify the party
    issuing the request so the ledger can enforce its own authorization.
    """

    @abstractmethod
    def transfer_in(self, holder: str, amount: int, caller: str) -> None:
        """Move amount from holder into caller's custody (spends allowance)."""
        pass

    @abstractmethod
    def transfer_out(self, to: str, amount: int, caller: str) -> None:
        """Return amount from caller's custody to `to`."""
        pass

    @abstractmethod
    def mint(self, to: str, amount: int, caller: str) -> None:
        """Create new tokens; restricted to the registered engine."""
        pass

    @abstractmethod
    def burn_from(self, holder: str, amount: int, spender: str) -> None:
        """Destroy holder's tokens on their behalf (spends allowance)."""
        pass

    @abstractmethod
    def burned_amount_of(self, identity: str) -> int:
        """Cumulative amount burned by identity."""
        pass

    @abstractmethod
    def total_minted(self) -> int:
        pass

    @abstractmethod
    def total_burned(self) -> int:
        pass

    @abstractmethod
    def total_supply(self) -> int:
        pass


class CertificateRegistry(ABC):
    """Persists burn-boost certificates."""

    @abstractmethod
    def issue(
        self,
        burner: str,
        amount_burned: int,
        mint_power_before_burn: int,
        dao_points: int,
        airdrop_rights: int,
        caller: str,
    ) -> int:
        """Persist a certificate and return its record id."""
        pass
