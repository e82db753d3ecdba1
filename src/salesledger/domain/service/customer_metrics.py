"""Domain service: Customer Metrics.

Rebuilds a customer's order aggregate from scratch by replaying the
order history.  Pure function of its input, so running it twice over the
same orders yields the same metrics.
"""

from __future__ import annotations

from salesledger.domain.model.customer import CustomerMetrics
from salesledger.domain.model.order import Order, OrderStatus
from salesledger.domain.model.value_objects import Money


class CustomerMetricsCalculator:

    def calculate(self, orders: list[Order]) -> CustomerMetrics:
        """Revenue counts skip CANCELLED orders; cancellation and return
        counters count CANCELLED and REFUNDED orders respectively."""
        if not orders:
            return CustomerMetrics()

        revenue_orders = [o for o in orders if o.status is not OrderStatus.CANCELLED]
        total_spent = Money.total(o.total_amount for o in revenue_orders)
        average = Money.zero()
        if revenue_orders:
            average = Money(
                total_spent.amount / len(revenue_orders), total_spent.currency
            ).rounded()

        created = [o.created_at for o in orders]
        return CustomerMetrics(
            total_orders=len(orders),
            total_spent=total_spent,
            average_order_value=average,
            cancelled_orders=sum(1 for o in orders if o.status is OrderStatus.CANCELLED),
            returned_orders=sum(1 for o in orders if o.status is OrderStatus.REFUNDED),
            first_order_date=min(created),
            last_order_date=max(created),
        )
