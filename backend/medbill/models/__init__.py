from medbill.models.user import User
from medbill.models.category import Category
from medbill.models.medicine import Medicine
from medbill.models.customer import Customer
from medbill.models.doctor import Doctor
from medbill.models.invoice import Invoice, InvoiceItem
from medbill.models.prescription import Prescription

__all__ = ["User", "Category", "Medicine", "Customer", "Doctor", "Invoice", "InvoiceItem", "Prescription"]
