from rma_portal.models.activity_log import ActivityLog
from rma_portal.models.customer import Customer
from rma_portal.models.error_type import ErrorType
from rma_portal.models.rma_number import IssuedRmaNumber
from rma_portal.models.ticket import Ticket, TicketStatus, WorkflowStatus

__all__ = [
    "ActivityLog",
    "Customer",
    "ErrorType",
    "IssuedRmaNumber",
    "Ticket",
    "TicketStatus",
    "WorkflowStatus",
]
