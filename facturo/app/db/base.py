from facturo.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from facturo.app.models.company import Company  # noqa: F401
from facturo.app.models.user import User  # noqa: F401
from facturo.app.models.tax import Tax  # noqa: F401
from facturo.app.models.group import Article, Group  # noqa: F401
from facturo.app.models.invoice import Invoice  # noqa: F401
from facturo.app.models.invoice_item import InvoiceItem  # noqa: F401
from facturo.app.models.transfer import Transfer, transfer_invoices  # noqa: F401
