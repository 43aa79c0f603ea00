from app.models.customer import Customer, Vehicle
from app.models.feedback import Feedback
from app.models.invoice import Invoice, InvoiceItem, InvoiceStatus
from app.models.service import Service
from app.models.user import Role, User

__all__ = [
    "Customer",
    "Feedback",
    "Invoice",
    "InvoiceItem",
    "InvoiceStatus",
    "Role",
    "Service",
    "User",
    "Vehicle",
]
