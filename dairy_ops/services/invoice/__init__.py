from .invoice_number_generator import InvoiceNumberGenerator, financial_year
from .invoice_service import InvoiceRenderer, InvoiceService, JsonInvoiceRenderer

__all__ = [
    "InvoiceNumberGenerator",
    "financial_year",
    "InvoiceRenderer",
    "InvoiceService",
    "JsonInvoiceRenderer",
]
