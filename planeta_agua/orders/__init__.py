from .service import OrderService
from .workflow import OrderWorkflow, OrderWriteOutcome, OrderWriteResult

__all__ = ["OrderService", "OrderWorkflow", "OrderWriteOutcome", "OrderWriteResult"]
