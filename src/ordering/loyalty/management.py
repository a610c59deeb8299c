"""Loyalty account lookups and manual grants."""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.loyalty.account import EntryKind, LoyaltyAccount

logger = structlog.get_logger(__name__)


def find_account(customer_id) -> LoyaltyAccount | None:
    repo = current_domain.repository_for(LoyaltyAccount)
    accounts = repo._dao.query.filter(customer_id=str(customer_id)).all().items
    if not accounts:
        return None
    return repo.get(accounts[0].id)


def account_for(customer_id) -> LoyaltyAccount:
    """The customer's account, opened on first use (not yet persisted)."""
    return find_account(customer_id) or LoyaltyAccount.open(customer_id)


def balance_of(customer_id) -> int:
    account = find_account(customer_id)
    return account.balance if account else 0


@ordering.command(part_of="LoyaltyAccount")
class GrantLoyaltyPoints:
    customer_id = Identifier(required=True)
    points = Integer(required=True, min_value=1)
    reason = String(max_length=255, default="Manual grant")


@ordering.command_handler(part_of=LoyaltyAccount)
class LoyaltyAccountHandler:
    @handle(GrantLoyaltyPoints)
    def grant_points(self, command):
        account = account_for(command.customer_id)
        account.credit(command.points, reason=command.reason, kind=EntryKind.GRANTED)
        current_domain.repository_for(LoyaltyAccount).add(account)
        logger.info("loyalty_points_granted", customer_id=str(command.customer_id), points=command.points)
        return account.balance
