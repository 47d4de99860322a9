import logging
from dataclasses import asdict
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import InsufficientInventory
from schemas.orders import BulkOrderResponse, OrderCreate
from services.order_service import OrderService
from services.settlement import OrderSettlementEngine

logger = logging.getLogger(__name__)

ACCEPTED = "accepted"
REJECTED = "rejected"
REASON_INSUFFICIENT_INVENTORY = "insufficient_inventory"


class BulkSettlementCoordinator:
    """Create a batch of orders, then try to close each one.

    A shortage rejects that order only. Anything else (bad input, unknown
    product, database failure) aborts the whole call.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.orders = OrderService(db)
        self.engine = OrderSettlementEngine(db)

    async def process_bulk(self, requests: List[OrderCreate]) -> BulkOrderResponse:
        # All requests are validated before the first one is written
        prepared = [await self.orders.prepare(req) for req in requests]

        created = []
        for order in prepared:
            await self.orders.save_new(order)
            created.append((order.id, order.customer_name, float(order.total_amount)))

        processed = []
        usages = []
        accepted = rejected = 0
        revenue = 0.0
        for order_id, customer_name, total in created:
            try:
                result = await self.engine.close_order(order_id)
            except InsufficientInventory as exc:
                rejected += 1
                logger.info("bulk: order %s rejected, %s", order_id, exc)
                processed.append({
                    "order_id": order_id,
                    "customer_name": customer_name,
                    "status": REJECTED,
                    "reason": REASON_INSUFFICIENT_INVENTORY,
                })
                continue

            accepted += 1
            revenue += total
            usages.extend(asdict(u) for u in result.usages)
            processed.append({
                "order_id": order_id,
                "customer_name": customer_name,
                "status": ACCEPTED,
                "total": total,
            })

        logger.info(
            "bulk: %d order(s), %d accepted, %d rejected, revenue %.2f",
            len(created), accepted, rejected, revenue,
        )
        return BulkOrderResponse(
            processed_orders=processed,
            summary={
                "total_orders": len(created),
                "accepted": accepted,
                "rejected": rejected,
                "total_revenue": round(revenue, 2),
                "inventory_updates": usages,
            },
        )
