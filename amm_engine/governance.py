"""Global governance record: admin and treasury fee recipient."""

from __future__ import annotations

import threading
from dataclasses import dataclass

import structlog

from amm_engine.errors import AlreadyExists, NotAdmin, NotFeeRecipient, NotInitialized, SameAdmin

logger = structlog.get_logger()


@dataclass(frozen=True)
class GovernanceState:
    admin: str
    fee_recipient: str


class Governance:
    """Holds the admin and fee recipient, created once at system start.

    The admin may reassign itself and the fee recipient. Only the fee
    recipient may withdraw treasury fees.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state: GovernanceState | None = None

    def initialize(self, admin: str, fee_recipient: str) -> GovernanceState:
        """Create the record.

        Raises:
            AlreadyExists: If already initialized
        """
        with self._lock:
            if self._state is not None:
                raise AlreadyExists("Governance is already initialized")
            self._state = GovernanceState(admin=admin, fee_recipient=fee_recipient)
            logger.info("governance_initialized", admin=admin, fee_recipient=fee_recipient)
            return self._state

    @property
    def state(self) -> GovernanceState:
        """Current record.

        Raises:
            NotInitialized: If initialize() has not run
        """
        with self._lock:
            return self._require()

    def require_admin(self, caller: str) -> None:
        if caller != self.state.admin:
            raise NotAdmin(f"{caller} is not the admin")

    def require_fee_recipient(self, caller: str) -> None:
        if caller != self.state.fee_recipient:
            raise NotFeeRecipient(f"{caller} is not the fee recipient")

    def set_admin(self, caller: str, new_admin: str) -> GovernanceState:
        """Reassign the admin.

        Raises:
            NotAdmin: If caller is not the admin
            SameAdmin: If new_admin is the current admin
        """
        with self._lock:
            state = self._require()
            if caller != state.admin:
                raise NotAdmin(f"{caller} is not the admin")
            if new_admin == state.admin:
                raise SameAdmin(f"{new_admin} is already the admin")
            self._state = GovernanceState(admin=new_admin, fee_recipient=state.fee_recipient)
            return self._state

    def set_fee_recipient(self, caller: str, new_fee_recipient: str) -> GovernanceState:
        """Reassign the fee recipient.

        Raises:
            NotAdmin: If caller is not the admin
            SameAdmin: If new_fee_recipient is the current fee recipient
        """
        with self._lock:
            state = self._require()
            if caller != state.admin:
                raise NotAdmin(f"{caller} is not the admin")
            if new_fee_recipient == state.fee_recipient:
                raise SameAdmin(f"{new_fee_recipient} is already the fee recipient")
            self._state = GovernanceState(admin=state.admin, fee_recipient=new_fee_recipient)
            return self._state

    def _require(self) -> GovernanceState:
        if self._state is None:
            raise NotInitialized("Governance is not initialized")
        return self._state
