from pixelperfect.tools.availability import AvailabilityCalculator, compute_availability
from pixelperfect.tools.booking import BookingStore
from pixelperfect.tools.payment import MockPaymentGateway, PaymentError, PaymentGateway
from pixelperfect.tools.services import ServiceCatalog
from pixelperfect.tools.session_storage import InMemoryStorage, JsonFileStorage, KeyValueStorage

__all__ = [
    "AvailabilityCalculator", "compute_availability", "BookingStore",
    "MockPaymentGateway", "PaymentError", "PaymentGateway", "ServiceCatalog",
    "InMemoryStorage", "JsonFileStorage", "KeyValueStorage",
]
