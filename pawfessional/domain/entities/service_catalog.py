from __future__ import annotations

# Services offered by the clinic, in display order.
SERVICE_CATALOG: tuple[str, ...] = (
    "Consultation",
    "Vaccination",
    "Deworming",
    "Grooming",
    "Ultrasound",
    "Confinement",
    "Surgery",
)


def is_known_service(name: str) -> bool:
    return name in SERVICE_CATALOG
