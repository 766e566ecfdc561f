from .base import (
    T5,
    ClinicBookError,
    InsufficientStockError,
    NotFoundError,
    PostingValidationError,
    ReferenceIntegrityWarning,
)
from .book import Book, EventKind
from .config import Settings
from .dates import to_sortable
from .entry import Entry
from .models import (
    Account,
    Direction,
    Employee,
    Expense,
    IncomeRecord,
    InsuranceClaim,
    InventoryItem,
    Invoice,
    InvoiceItem,
    LedgerEntry,
    PayableReceivable,
    Payment,
    Payslip,
    Transfer,
)
from .posting import Changes
from .store import Collection, MemoryStore, Store
