"""
chronofuel/system.py

Builds and links a complete in-memory emission system.

Linking order mirrors a production deployment:

1. Token ledger (genesis supply to the owner)
2. Certificate registry
3. Halving controller (reads the ledger)
4. Reward engine (reads the ledger)
5. Ledger, registry and halving controller learn the engine's address;
   the engine learns the registry and the halving controller.

Usage:
    from chronofuel.system import build_system
    from chronofuel.clock import ManualClock

    system = build_system(owner="owner", clock=ManualClock(1_700_000_000))
    system.ledger.transfer("owner", "alice", 1000 * SCALE)
    system.ledger.approve("alice", system.engine.address, 1000 * SCALE)
    system.engine.stake("alice", 100 * SCALE)
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from .config import INITIAL_SUPPLY, EmissionConfig
from .economics.engine import DEFAULT_ENGINE_ADDRESS, RewardEngine
from .economics.events import EventLog
from .economics.halving import HalvingController
from .economics.tiers import EntropySource
from .ledger.certificates import InMemoryCertificateRegistry
from .ledger.token import InMemoryLedger

logger = logging.getLogger("chronofuel.system")


@dataclass
class EmissionSystem:
    """Linked components of one emission system."""
    owner: str
    ledger: InMemoryLedger
    certificates: InMemoryCertificateRegistry
    halving: HalvingController
    engine: RewardEngine
    events: EventLog


def build_system(
    owner: str = "owner",
    config: Optional[EmissionConfig] = None,
    clock: Optional[Callable[[], int]] = None,
    entropy: Optional[EntropySource] = None,
    initial_supply: int = INITIAL_SUPPLY,
    engine_address: str = DEFAULT_ENGINE_ADDRESS,
) -> EmissionSystem:
    """Create all components with a shared event log and lock, and link them."""
    events = EventLog()
    lock = threading.RLock()

    ledger = InMemoryLedger(owner=owner, initial_supply=initial_supply, lock=lock)
    certificates = InMemoryCertificateRegistry(clock=clock, lock=lock)
    halving = HalvingController(ledger, owner=owner, events=events, lock=lock)
    engine = RewardEngine(
        ledger,
        address=engine_address,
        config=config,
        clock=clock,
        entropy=entropy,
        events=events,
        lock=lock,
    )

    ledger.set_engine(engine.address)
    certificates.set_engine(engine.address)
    halving.set_engine(engine)
    engine.set_certificate_registry(certificates)
    engine.set_halving_controller(halving)

    logger.info(f"Emission system linked (owner={owner}, engine={engine.address})")
    return EmissionSystem(
        owner=owner,
        ledger=ledger,
        certificates=certificates,
        halving=halving,
        engine=engine,
        events=events,
    )
