"""
chronofuel/ledger/

Collaborator interfaces and in-memory reference implementations.
"""

from .interfaces import Ledger, CertificateRegistry
from .token import InMemoryLedger
from .certificates import BurnBoostRecord, InMemoryCertificateRegistry

__all__ = [
    "Ledger",
    "CertificateRegistry",
    "InMemoryLedger",
    "BurnBoostRecord",
    "InMemoryCertificateRegistry",
]
