"""
Taxed Token

Public face of the ledger: initialization, owner-gated configuration,
value operations and read-only queries. Components are composed explicitly;
every public operation is serialized and runs as one atomic unit whose
notifications are published only after it commits.
"""

import threading
from dataclasses import dataclass
from typing import List, Optional

from .storage import StorageInterface, create_storage
from .ledger import BalanceLedger, ZERO_ADDRESS, require_amount
from .allowances import AllowanceStore
from .fee_policy import FeePolicy, FeeVariant, MAX_FEE_RATE
from .ownership import OwnershipGate
from .pause import PauseState, PauseSwitch
from .engine import TransferEngine
from .events import EventDispatcher, EventPayload, LedgerEvent, approval_event
from .audit import AuditTrail
from .config import LedgerConfig, get_config
from .errors import AlreadyInitialized, InvalidAddress, LedgerError, NotInitialized
from .logging_config import get_logger, log_action


@dataclass(frozen=True)
class TokenMetadata:
    name: str
    symbol: str
    decimals: int


class TaxedToken:
    """Value-transfer ledger with a treasury fee on every taxed transfer"""

    def __init__(
        self,
        storage: StorageInterface,
        variant: Optional[FeeVariant] = None,
        dispatcher: Optional[EventDispatcher] = None,
        audit_trail: Optional[AuditTrail] = None,
        decimals: int = 18,
        initial_supply_units: int = 1_000_000,
    ):
        self.storage = storage
        self.dispatcher = dispatcher or EventDispatcher()
        self.audit_trail = audit_trail
        self.decimals = decimals
        self.initial_supply_units = initial_supply_units

        self.ledger = BalanceLedger(storage)
        self.allowances = AllowanceStore(storage)
        self.policy = FeePolicy(storage, variant)
        self.gate = OwnershipGate(storage)
        self.pause_switch = PauseSwitch(storage)
        self.engine = TransferEngine(
            storage, self.ledger, self.allowances, self.policy,
            self.pause_switch, publish=self._publish
        )

        self._lock = threading.RLock()
        self.logger = get_logger("fee_ledger.token")

    @classmethod
    def from_config(cls, config: Optional[LedgerConfig] = None) -> 'TaxedToken':
        """Build an uninitialized token from configuration"""
        config = config or get_config()
        storage = create_storage(config.storage_backend, config.database_path)
        return cls(
            storage,
            variant=config.fee_variant,
            audit_trail=AuditTrail(storage) if config.enable_audit_logging else None,
            decimals=config.decimals,
            initial_supply_units=config.initial_supply_units,
        )

    # Initialization

    def initialize(self, initializer: str, name: str, symbol: str, treasury: str, fee_rate: int) -> None:
        """
        Mint the initial supply to initializer and configure the fee policy

        initializer becomes owner; initializer and treasury are exempt.
        """
        with self._lock:
            if self.gate.owner() is not None:
                raise AlreadyInitialized("Ledger is already initialized")
            if not initializer or initializer == ZERO_ADDRESS:
                raise InvalidAddress("Initializer cannot be the null address")

            with self.storage.atomic():
                self.gate.set_owner(initializer)
                self.storage.save("controls", "metadata", {
                    "name": name, "symbol": symbol, "decimals": self.decimals
                })
                self.pause_switch.set_state(PauseState.ACTIVE)
                self.policy.set_fee_rate(fee_rate)
                self.policy.set_treasury(treasury)
                self.policy.set_exemption(initializer, True)
                events = self.engine.stage_mint(initializer, self.initial_supply_units * 10 ** self.decimals)

            self._publish(events)
            log_action(
                self.logger, "info", "Ledger initialized",
                user_id=initializer, action="initialize",
                extra={"treasury": treasury, "fee_rate": fee_rate, "variant": self.policy.variant.value}
            )

    # Privileged operations

    def set_treasury(self, caller: str, new_treasury: str) -> None:
        def apply():
            old, new = self.policy.set_treasury(new_treasury)
            events = [EventPayload(LedgerEvent.TREASURY_CHANGED, {"old": old, "new": new})]
            if old is not None:
                events.append(self._exemption_event(old, False))
            events.append(self._exemption_event(new, True))
            return events
        self._privileged(caller, "set_treasury", apply)

    def set_fee_rate(self, caller: str, new_rate: int) -> None:
        def apply():
            old, new = self.policy.set_fee_rate(new_rate)
            return [EventPayload(LedgerEvent.FEE_RATE_CHANGED, {"old": old, "new": new})]
        self._privileged(caller, "set_fee_rate", apply)

    def set_exemption(self, caller: str, account: str, exempt: bool) -> None:
        def apply():
            self.policy.set_exemption(account, exempt)
            return [self._exemption_event(account, exempt)]
        self._privileged(caller, "set_exemption", apply)

    def pause(self, caller: str) -> None:
        def apply():
            self.pause_switch.set_state(PauseState.PAUSED)
            return [EventPayload(LedgerEvent.PAUSED, {"account": caller})]
        self._privileged(caller, "pause", apply)

    def unpause(self, caller: str) -> None:
        def apply():
            self.pause_switch.set_state(PauseState.ACTIVE)
            return [EventPayload(LedgerEvent.UNPAUSED, {"account": caller})]
        self._privileged(caller, "unpause", apply)

    # Value operations

    def transfer(self, caller: str, to: str, amount: int) -> bool:
        with self._lock:
            self._require_initialized()
            self.engine.transfer(caller, to, amount)
            return True

    def transfer_from(self, caller: str, owner: str, to: str, amount: int) -> bool:
        with self._lock:
            self._require_initialized()
            self.engine.transfer_from(caller, owner, to, amount)
            return True

    def approve(self, caller: str, spender: str, amount: int) -> bool:
        """Set spender's allowance over caller's balance (not affected by pause)"""
        with self._lock:
            if not caller or caller == ZERO_ADDRESS:
                raise InvalidAddress("Approver cannot be the null address")
            if not spender or spender == ZERO_ADDRESS:
                raise InvalidAddress("Spender cannot be the null address")
            require_amount(amount)
            with self.storage.atomic():
                self.allowances.approve(caller, spender, amount)
            self._publish([approval_event(caller, spender, amount)])
            return True

    # Queries
    #
    # Storage writes land before their block commits, so reads wait for any
    # operation in flight and only ever see committed state.

    def max_fee_rate(self) -> int:
        return MAX_FEE_RATE

    def current_fee_rate(self) -> int:
        with self._lock:
            return self.policy.fee_rate()

    def calculate_tax(self, amount: int) -> int:
        with self._lock:
            return self.policy.calculate_tax(amount)

    def balance_of(self, account: str) -> int:
        with self._lock:
            return self.ledger.balance_of(account)

    def total_supply(self) -> int:
        with self._lock:
            return self.ledger.total_supply()

    def allowance(self, owner: str, spender: str) -> int:
        with self._lock:
            return self.allowances.allowance(owner, spender)

    def is_exempt(self, account: str) -> bool:
        with self._lock:
            return self.policy.is_exempt(account)

    def treasury(self) -> Optional[str]:
        with self._lock:
            return self.policy.treasury()

    def owner(self) -> Optional[str]:
        with self._lock:
            return self.gate.owner()

    def paused(self) -> bool:
        with self._lock:
            return self.pause_switch.is_paused()

    def metadata(self) -> TokenMetadata:
        with self._lock:
            data = self.storage.load("controls", "metadata")
        if not data:
            raise NotInitialized("Ledger has not been initialized")
        return TokenMetadata(name=data["name"], symbol=data["symbol"], decimals=data["decimals"])

    # Internals

    def _privileged(self, caller: str, action: str, apply) -> None:
        """Owner check, then apply() inside one atomic block, then publish"""
        with self._lock:
            try:
                self.gate.require_owner(caller)
                with self.storage.atomic():
                    events = apply()
            except LedgerError as e:
                log_action(
                    self.logger, "warning", f"{action} rejected: {e.message}",
                    user_id=caller, action=action, extra={"reason": e.reason.value}
                )
                raise
            self._publish(events)
            log_action(self.logger, "info", f"{action} committed", user_id=caller, action=action)

    def _require_initialized(self) -> None:
        if self.gate.owner() is None:
            raise NotInitialized("Ledger has not been initialized")

    @staticmethod
    def _exemption_event(account: str, exempt: bool) -> EventPayload:
        return EventPayload(LedgerEvent.EXEMPTION_CHANGED, {"account": account, "exempt": exempt})

    def _publish(self, events: List[EventPayload]) -> None:
        for event in events:
            if self.audit_trail is not None:
                self.audit_trail.record(event)
            self.dispatcher.publish(event)
