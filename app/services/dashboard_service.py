"""
Dashboard counters and sales analytics.

Analytics windows end at the close of the current day and start at
midnight of the period's first day: today, 7 days back, 1 month back,
6 months back or 1 year back.
"""

import calendar
import logging
from collections import OrderedDict
from datetime import datetime, time, timedelta
from typing import List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.models.invoice import InvoiceInDB
from app.models.ledger import END_OF_DAY, DateRange
from app.repositories.customer_repo import CustomerRepository
from app.repositories.invoice_repo import InvoiceRepository
from app.repositories.payment_repo import PaymentRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.user_repo import UserRepository
from app.schemas.dashboard import (
    AnalyticsPeriod,
    DashboardStats,
    LowStockProduct,
    PaymentSummary,
    RecentInvoice,
    RecentSale,
    SalesAnalytics,
    SalesAnalyticsResponse,
    TopProduct,
)

logger = logging.getLogger(__name__)

TOP_PRODUCTS = 5
RECENT_SALES = 10


def shift_months(value: datetime, months: int) -> datetime:
    """Move a datetime by whole months, clamping the day to the target month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def period_window(period: AnalyticsPeriod, now: Optional[datetime] = None) -> DateRange:
    now = now or datetime.now()
    if period == AnalyticsPeriod.WEEK:
        start = now - timedelta(days=7)
    elif period == AnalyticsPeriod.MONTH:
        start = shift_months(now, -1)
    elif period == AnalyticsPeriod.SIX_MONTHS:
        start = shift_months(now, -6)
    elif period == AnalyticsPeriod.YEAR:
        start = shift_months(now, -12)
    else:
        start = now
    return DateRange(
        start=datetime.combine(start.date(), time.min),
        end=datetime.combine(now.date(), END_OF_DAY),
    )


def top_products(invoices: List[InvoiceInDB], limit: int = TOP_PRODUCTS) -> List[TopProduct]:
    """Line items grouped by name snapshot, highest total amount first."""
    totals: "OrderedDict[str, Tuple[int, float]]" = OrderedDict()
    for invoice in invoices:
        for item in invoice.items:
            quantity, amount = totals.get(item.name_snapshot, (0, 0.0))
            totals[item.name_snapshot] = (quantity + item.quantity, amount + item.amount)

    ranked = sorted(totals.items(), key=lambda pair: pair[1][1], reverse=True)
    return [
        TopProduct(product_name=name, quantity=quantity, total_amount=round(amount, 2))
        for name, (quantity, amount) in ranked[:limit]
    ]


class DashboardService:
    def __init__(self, db: AsyncIOMotorDatabase):
        self.customers = CustomerRepository(db)
        self.products = ProductRepository(db)
        self.invoices = InvoiceRepository(db)
        self.payments = PaymentRepository(db)
        self.users = UserRepository(db)

    async def stats(self) -> DashboardStats:
        invoiced_customers = await self.invoices.customer_ids()
        totals = await self.invoices.totals()
        recent = await self.invoices.recent_invoices(limit=5)
        names = await self.customers.names_by_id(invoice.customer_id for invoice in recent)
        low_stock = await self.products.low_stock()

        return DashboardStats(
            total_customers=await self.customers.count_customers(),
            total_products=await self.products.count_products(),
            total_invoices=await self.invoices.count_invoices(),
            total_users=await self.users.count_users(),
            customers_with_invoices=await self.customers.count_customers({"_id": {"$in": invoiced_customers}}),
            total_invoice_amount=totals["total_amount"],
            total_paid_amount=totals["paid_amount"],
            total_due_amount=totals["due_amount"],
            recent_invoices=[
                RecentInvoice(
                    id=str(invoice.id),
                    invoice_number=invoice.invoice_number,
                    total_amount=invoice.total_amount,
                    invoice_date=invoice.invoice_date,
                    customer_id=str(invoice.customer_id),
                    customer_name=names.get(str(invoice.customer_id)),
                    created_by=str(invoice.created_by),
                )
                for invoice in recent
            ],
            low_stock_products=[
                LowStockProduct(
                    id=str(product.id),
                    name=product.name,
                    stock_quantity=product.stock_quantity,
                    min_stock_alert=product.min_stock_alert,
                    unit=product.unit,
                )
                for product in low_stock
            ],
        )

    async def sales_analytics(
        self,
        period: AnalyticsPeriod,
        now: Optional[datetime] = None
    ) -> SalesAnalyticsResponse:
        window = period_window(period, now)
        invoices = await self.invoices.find_in_range(window)
        payments = await self.payments.find_in_range(window)
        logger.debug(f"Sales analytics for {period.value}: {len(invoices)} invoices, {len(payments)} payments")

        # Payments may belong to invoices dated outside the window
        invoices_by_id = {str(invoice.id): invoice for invoice in invoices}
        missing = {str(p.invoice_id) for p in payments} - set(invoices_by_id)
        for invoice_id in missing:
            invoice = await self.invoices.get_invoice(invoice_id)
            if invoice:
                invoices_by_id[invoice_id] = invoice

        names = await self.customers.names_by_id(
            {invoice.customer_id for invoice in invoices_by_id.values()}
        )

        total_sales = round(sum(invoice.total_amount for invoice in invoices), 2)
        paid_amount = round(sum(invoice.paid_amount for invoice in invoices), 2)
        paid_invoices = sum(1 for invoice in invoices if invoice.due_amount == 0)

        analytics = SalesAnalytics(
            period=period,
            total_sales=total_sales,
            paid_amount=paid_amount,
            pending_amount=round(total_sales - paid_amount, 2),
            total_invoices=len(invoices),
            paid_invoices=paid_invoices,
            pending_invoices=len(invoices) - paid_invoices,
            average_invoice_value=round(total_sales / len(invoices), 2) if invoices else 0,
            top_products=top_products(invoices),
            recent_invoices=[
                RecentSale(
                    invoice_number=invoice.invoice_number,
                    customer_name=names.get(str(invoice.customer_id)),
                    amount=invoice.total_amount,
                    status="paid" if invoice.due_amount == 0 else "pending",
                    date=invoice.invoice_date.date().isoformat(),
                )
                for invoice in invoices[:RECENT_SALES]
            ],
        )

        summaries = []
        for payment in payments:
            invoice = invoices_by_id.get(str(payment.invoice_id))
            summaries.append(
                PaymentSummary(
                    id=str(payment.id),
                    amount=payment.amount,
                    date=payment.payment_date.date().isoformat(),
                    invoice_number=invoice.invoice_number if invoice else None,
                    customer_name=names.get(str(invoice.customer_id)) if invoice else None,
                    created_by=str(payment.created_by),
                )
            )

        return SalesAnalyticsResponse(analytics=analytics, payments=summaries)
