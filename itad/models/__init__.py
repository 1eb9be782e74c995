from itad.models.booking import Booking, BookingAsset
from itad.models.commission import Commission
from itad.models.driver import Driver
from itad.models.invoice import Invoice, InvoiceItem
from itad.models.job import Job, JobAsset
from itad.models.number_sequence import NumberSequence
from itad.models.processing_record import GradingRecord, SanitisationRecord

__all__ = [
    "Booking",
    "BookingAsset",
    "Commission",
    "Driver",
    "GradingRecord",
    "Invoice",
    "InvoiceItem",
    "Job",
    "JobAsset",
    "NumberSequence",
    "SanitisationRecord",
]
