#!/usr/bin/env python3
"""
In-process ledger hosting the gateway, token and vault contracts.

Every mutating call runs inside a frame. Contract state, the event log and the
set of deployed contracts are snapshotted when the frame opens and restored if
the call raises, so a failed operation leaves no partial effects behind.
Frames nest: a caller may catch an inner failure and carry on with the inner
frame's effects discarded.
"""

from __future__ import annotations

import copy
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional

from eth_account import Account
from web3 import Web3

from utils.validation import ZERO_ADDRESS, validate_address

logger = logging.getLogger(__name__)


class Revert(Exception):
    """A hosted contract rejected the call"""
    pass


class NoContract(Revert):
    """No contract is deployed at the address"""
    pass


@dataclass(frozen=True)
class LogEntry:
    """Event emitted by a contract, in emission order"""
    index: int
    address: str
    event: Any

    @property
    def name(self) -> str:
        return type(self.event).__name__


@dataclass
class _Snapshot:
    contracts: Dict[str, Any]
    states: Dict[str, Any]
    nonces: Dict[str, int]
    log_length: int


class Chain:
    """
    Execution environment for hosted contracts

    Provides:
    1. Deterministic contract addresses and fresh account identities
    2. Atomic call frames with rollback on failure
    3. An append-only event log with post-commit subscribers

    Top-level calls from different threads are serialised by a re-entrant
    lock, so each operation runs to completion before the next one starts.
    """

    def __init__(self):
        self._contracts: Dict[str, Any] = {}
        self._nonces: Dict[str, int] = {}
        self._logs: List[LogEntry] = []
        self._subscribers: List[Callable[[LogEntry], None]] = []
        self._delivered = 0
        self._depth = 0
        self.lock = threading.RLock()

    # ===================== IDENTITIES =====================

    def new_account(self) -> str:
        """Create a fresh externally owned identity (no code)"""
        return Account.create().address

    def register(self, contract, deployer: str) -> str:
        """Assign an address to a newly constructed contract"""
        deployer = validate_address(deployer, "deployer")
        with self.lock:
            nonce = self._nonces.get(deployer, 0)
            self._nonces[deployer] = nonce + 1
            digest = Web3.solidity_keccak(["address", "uint256"], [deployer, nonce])
            address = Web3.to_checksum_address("0x" + bytes(digest[12:]).hex())
            self._contracts[address] = contract
        logger.debug(f"Deployed {type(contract).__name__} at {address} (deployer={deployer}, nonce={nonce})")
        return address

    def has_code(self, address: str) -> bool:
        address = validate_address(address)
        if address == ZERO_ADDRESS:
            return False
        with self.lock:
            return address in self._contracts

    def at(self, address: str):
        """Return the contract deployed at ``address``"""
        address = validate_address(address)
        with self.lock:
            contract = self._contracts.get(address)
        if contract is None:
            raise NoContract(f"no contract at {address}")
        return contract

    # ===================== CALL FRAMES =====================

    @property
    def depth(self) -> int:
        return self._depth

    def _snapshot(self) -> _Snapshot:
        """Copy of every hosted contract's state; cost grows with the whole ledger, not the call"""
        return _Snapshot(
            contracts=dict(self._contracts),
            states={addr: copy.deepcopy(c.state) for addr, c in self._contracts.items()},
            nonces=dict(self._nonces),
            log_length=len(self._logs),
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        self._contracts = snapshot.contracts
        for addr, contract in self._contracts.items():
            saved = snapshot.states[addr]
            # unchanged state objects stay in place
            if contract.state != saved:
                contract.state = saved
        self._nonces = snapshot.nonces
        del self._logs[snapshot.log_length:]

    @contextmanager
    def frame(self, sender: str, target: str, name: str) -> Iterator[None]:
        """Run a call atomically: all effects are undone if the body raises"""
        with self.lock:
            snapshot = self._snapshot()
            self._depth += 1
            logger.debug(f"call {name} on {target} from {sender} (depth={self._depth})")
            try:
                yield
            except BaseException as e:
                self._restore(snapshot)
                logger.debug(f"revert {name} on {target}: {type(e).__name__}: {e}")
                raise
            finally:
                self._depth -= 1
            if self._depth == 0:
                self._deliver()

    # ===================== EVENTS =====================

    def emit(self, address: str, event: Any) -> None:
        with self.lock:
            self._logs.append(LogEntry(index=len(self._logs), address=address, event=event))

    def subscribe(self, callback: Callable[[LogEntry], None]) -> None:
        """Register a callback invoked for every committed event"""
        with self.lock:
            self._subscribers.append(callback)

    def _deliver(self) -> None:
        pending = self._logs[self._delivered:]
        self._delivered = len(self._logs)
        for entry in pending:
            for callback in self._subscribers:
                try:
                    callback(entry)
                except Exception as e:
                    logger.warning(f"Event subscriber failed on {entry.name}: {e}")

    @property
    def logs(self) -> List[LogEntry]:
        with self.lock:
            return list(self._logs)

    def events(self, kind: Optional[type] = None, address: Optional[str] = None) -> List[Any]:
        """Committed events, optionally filtered by event class and emitter"""
        if address is not None:
            address = validate_address(address)
        with self.lock:
            return [
                entry.event for entry in self._logs
                if (kind is None or isinstance(entry.event, kind))
                and (address is None or entry.address == address)
            ]
