"""
Transfer Engine

Runs a transfer request through a fixed pipeline:

    pause check -> allowance consume (delegated only) -> fee split -> ledger moves

The whole pipeline executes inside one storage.atomic() block, so a failure
at any step discards every write the request made. Notifications are queued
while the block runs and handed to the publisher only after it commits.
"""

from typing import Callable, List, Tuple

from .storage import StorageInterface
from .ledger import BalanceLedger, ZERO_ADDRESS, require_amount
from .allowances import AllowanceStore
from .fee_policy import FeePolicy, FeeSplit, FeeVariant
from .pause import PauseSwitch
from .events import EventPayload, fee_collected_event, transfer_event
from .errors import InvalidAddress, LedgerError
from .logging_config import get_logger, log_action


Publisher = Callable[[List[EventPayload]], None]


class TransferEngine:
    """Orchestrates direct, delegated and minting value movements"""

    def __init__(
        self,
        storage: StorageInterface,
        ledger: BalanceLedger,
        allowances: AllowanceStore,
        policy: FeePolicy,
        pause_switch: PauseSwitch,
        publish: Publisher,
    ):
        self.storage = storage
        self.ledger = ledger
        self.allowances = allowances
        self.policy = policy
        self.pause_switch = pause_switch
        self.publish = publish
        self.logger = get_logger("fee_ledger.engine")

    def transfer(self, sender: str, to: str, amount: int) -> FeeSplit:
        """Move amount from sender to to, diverting any fee to the treasury"""
        try:
            with self.storage.atomic():
                split, events = self.stage_transfer(sender, to, amount)
        except LedgerError as e:
            self._log_rejection("transfer", sender, e)
            raise
        self.publish(events)
        self._log_success("transfer", sender, to, amount, split)
        return split

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> FeeSplit:
        """Move amount from owner to to on behalf of spender, consuming allowance"""
        try:
            with self.storage.atomic():
                self.pause_switch.require_active()
                require_amount(amount)
                self.allowances.consume(owner, spender, amount)
                split, events = self.stage_transfer(owner, to, amount)
        except LedgerError as e:
            self._log_rejection("transfer_from", spender, e)
            raise
        self.publish(events)
        self._log_success("transfer_from", spender, to, amount, split)
        return split

    def mint(self, to: str, amount: int) -> None:
        with self.storage.atomic():
            events = self.stage_mint(to, amount)
        self.publish(events)

    def stage_mint(self, to: str, amount: int) -> List[EventPayload]:
        """Mint inside the caller's atomic block; returns pending notifications"""
        self.pause_switch.require_active()
        if not to or to == ZERO_ADDRESS:
            raise InvalidAddress("Cannot mint to the null address")
        self.ledger.mint(to, amount)
        return [transfer_event(ZERO_ADDRESS, to, amount)]

    def stage_transfer(self, from_account: str, to: str, amount: int) -> Tuple[FeeSplit, List[EventPayload]]:
        """
        Apply the fee split inside the caller's atomic block

        Returns:
            (FeeSplit, pending notifications)
        """
        self.pause_switch.require_active()
        if not from_account or from_account == ZERO_ADDRESS:
            raise InvalidAddress("Cannot transfer from the null address")
        if not to or to == ZERO_ADDRESS:
            raise InvalidAddress("Cannot transfer to the null address")

        split = self.policy.compute(from_account, to, amount)
        events: List[EventPayload] = []

        if not split.taxed:
            self.ledger.move(from_account, to, amount)
            events.append(transfer_event(from_account, to, amount))
            return split, events

        treasury = self.policy.treasury()
        self.ledger.move(from_account, treasury, split.fee_amount)
        events.append(transfer_event(from_account, treasury, split.fee_amount))
        self.ledger.move(from_account, to, split.net_amount)
        events.append(transfer_event(from_account, to, split.net_amount))

        if self.policy.variant == FeeVariant.EXEMPTION_CHECKED:
            events.append(fee_collected_event(from_account, to, split.fee_amount, split.net_amount))
        return split, events

    def _log_success(self, action: str, caller: str, to: str, amount: int, split: FeeSplit) -> None:
        log_action(
            self.logger, "info", f"{action} committed",
            user_id=caller, action=action, resource=to,
            extra={
                "amount": str(amount),
                "fee_amount": str(split.fee_amount),
                "net_amount": str(split.net_amount),
                "taxed": split.taxed,
            }
        )

    def _log_rejection(self, action: str, caller: str, error: LedgerError) -> None:
        log_action(
            self.logger, "warning", f"{action} rejected: {error.message}",
            user_id=caller, action=action, extra={"reason": error.reason.value}
        )
