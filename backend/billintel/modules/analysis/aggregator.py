import logging
from collections.abc import Sequence

from billintel.modules.analysis.schemas import (
    AggregateStats,
    BillingRecord,
    PlanTotals,
    TopCustomer,
)

logger = logging.getLogger(__name__)

DEFAULT_TOP_CUSTOMERS = 10
MONTH_KEY_LENGTH = len("YYYY-MM")


def month_key(billing_date: str) -> str:
    # No date validation: short or malformed dates keep whatever prefix exists.
    return billing_date[:MONTH_KEY_LENGTH]


def rank_customers(customer_totals: dict[str, float], limit: int) -> list[TopCustomer]:
    # sorted() is stable with reverse=True, so equal totals keep first-seen order.
    ranked = sorted(customer_totals.items(), key=lambda item: item[1], reverse=True)
    return [
        TopCustomer(customer_id=customer_id, total=total)
        for customer_id, total in ranked[: max(limit, 0)]
    ]


def compute_billing_stats(
    records: Sequence[BillingRecord],
    top_customers_limit: int = DEFAULT_TOP_CUSTOMERS,
) -> AggregateStats:
    monthly_revenue: dict[str, float] = {}
    customer_totals: dict[str, float] = {}
    plan_totals: dict[str, dict[str, float]] = {}
    total_revenue = 0.0

    for record in records:
        amount = record.amount_billed
        total_revenue += amount

        key = month_key(record.billing_date)
        monthly_revenue[key] = monthly_revenue.get(key, 0.0) + amount

        customer_totals[record.customer_id] = customer_totals.get(record.customer_id, 0.0) + amount

        plan = plan_totals.setdefault(record.plan, {"revenue": 0.0, "usage": 0.0})
        plan["revenue"] += amount
        plan["usage"] += record.data_used

    unique_customers = max(1, len(customer_totals))
    avg_bill_per_customer = total_revenue / unique_customers

    logger.debug(
        "Aggregated %d records: %d customers, %d months, %d plans",
        len(records),
        len(customer_totals),
        len(monthly_revenue),
        len(plan_totals),
    )

    return AggregateStats(
        total_revenue=total_revenue,
        avg_bill_per_customer=avg_bill_per_customer,
        monthly_revenue=monthly_revenue,
        top_customers=rank_customers(customer_totals, top_customers_limit),
        plan_totals={name: PlanTotals(**totals) for name, totals in plan_totals.items()},
        customer_totals=customer_totals,
    )
