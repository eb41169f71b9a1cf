from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyticsPeriod(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    SIX_MONTHS = "6months"
    YEAR = "year"


class RecentInvoice(CamelModel):
    id: str
    invoice_number: str
    total_amount: float
    invoice_date: datetime
    customer_id: str
    customer_name: Optional[str] = None
    created_by: str


class LowStockProduct(CamelModel):
    id: str
    name: str
    stock_quantity: int
    min_stock_alert: int
    unit: str


class DashboardStats(CamelModel):
    total_customers: int
    total_products: int
    total_invoices: int
    total_users: int
    customers_with_invoices: int
    total_invoice_amount: float
    total_paid_amount: float
    total_due_amount: float
    recent_invoices: List[RecentInvoice]
    low_stock_products: List[LowStockProduct]


class TopProduct(CamelModel):
    product_name: str
    quantity: int
    total_amount: float


class RecentSale(CamelModel):
    invoice_number: str
    customer_name: Optional[str] = None
    amount: float
    status: str  # paid | pending
    date: str


class SalesAnalytics(CamelModel):
    period: AnalyticsPeriod
    total_sales: float
    paid_amount: float
    pending_amount: float
    total_invoices: int
    paid_invoices: int
    pending_invoices: int
    average_invoice_value: float
    top_products: List[TopProduct]
    recent_invoices: List[RecentSale]


class PaymentSummary(CamelModel):
    id: str
    amount: float
    date: str
    invoice_number: Optional[str] = None
    customer_name: Optional[str] = None
    created_by: str


class SalesAnalyticsResponse(CamelModel):
    analytics: SalesAnalytics
    payments: List[PaymentSummary]
