# Importing this module registers every table on Base.metadata
from app.models.audit_log import AuditLog  # noqa: F401
from app.models.client import Client  # noqa: F401
from app.models.invoice import Invoice, InvoiceSequence  # noqa: F401
from app.models.mileage import Mileage  # noqa: F401
from app.models.refresh_token import RefreshToken  # noqa: F401
from app.models.shift import Shift  # noqa: F401
from app.models.user import User  # noqa: F401
