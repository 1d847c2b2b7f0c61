"""Service catalog with pricing, durations, and categories."""

import logging
from typing import Iterable, Iterator, Optional

from pixelperfect.schemas.catalog_schema import Service

logger = logging.getLogger(__name__)

DEFAULT_SERVICES: tuple[Service, ...] = (
    Service(
        id="1",
        name="Wedding Photography",
        description="Complete wedding day coverage with professional editing",
        price=2500,
        duration=480,
        category="Wedding",
    ),
    Service(
        id="2",
        name="Portrait Session",
        description="Professional portrait photography session",
        price=300,
        duration=120,
        category="Portrait",
    ),
    Service(
        id="3",
        name="Event Photography",
        description="Corporate and private event photography",
        price=800,
        duration=240,
        category="Event",
    ),
    Service(
        id="4",
        name="Commercial Photography",
        description="Product and business photography",
        price=600,
        duration=180,
        category="Commercial",
    ),
)


class ServiceCatalog:
    """Read-only catalog of bookable services, built once per session."""

    def __init__(self, services: Optional[Iterable[Service]] = None) -> None:
        self._services: dict[str, Service] = {}
        for service in services if services is not None else DEFAULT_SERVICES:
            if service.id in self._services:
                raise ValueError(f"Duplicate service id in catalog: {service.id}")
            self._services[service.id] = service
        logger.debug("Service catalog loaded with %d services", len(self._services))

    def __contains__(self, service_id: object) -> bool:
        return service_id in self._services

    def __len__(self) -> int:
        return len(self._services)

    def __iter__(self) -> Iterator[Service]:
        return iter(self._services.values())

    def get(self, service_id: str) -> Optional[Service]:
        """Get a service by id, active or not. Returns None if unknown."""
        return self._services.get(service_id)

    def all_services(self) -> list[Service]:
        return list(self._services.values())

    def active_services(self) -> list[Service]:
        """Services offered in the booking form."""
        return [s for s in self._services.values() if s.is_active]

    def categories(self) -> list[str]:
        """Distinct categories in catalog order."""
        seen: list[str] = []
        for service in self._services.values():
            if service.category not in seen:
                seen.append(service.category)
        return seen
