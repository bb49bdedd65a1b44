"""Ordering bounded context: orders and their payment and delivery lifecycle.

Orders are created by the ledger once the payment processor has issued an
intent for the exact total, and are then moved along by payment webhooks and
by fulfilment commands.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
