"""Build the placeholder map used to print prescription templates."""
from __future__ import annotations

from datetime import date
from typing import Dict, Optional, Union

from print_templates.utils.logger import get_logger

LOGGER = get_logger(__name__)

PATIENT = "{{paciente}}"
PATIENT_ADDRESS = "{{paciente_end}}"
AGE = "{{idade}}"
PRESCRIPTION = "{{receita}}"

NOT_INFORMED = "Não informado"


def age_on(birth_date: date, today: date) -> int:
    """Completed years between ``birth_date`` and ``today``."""
    years = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years


def build_prescription_variables(
    patient_name: str,
    prescription_text: str,
    *,
    address: Optional[str] = None,
    city: Optional[str] = None,
    state: Optional[str] = None,
    birth_date: Optional[Union[date, str]] = None,
    age: Optional[int] = None,
    today: Optional[date] = None,
) -> Dict[str, str]:
    """Return the read-only variable map for one print call.

    ``age`` wins when known; otherwise it is computed from ``birth_date``
    (a ``date`` or an ISO ``YYYY-MM-DD`` string). An unreadable birth date
    leaves the age as not informed.
    """
    full_address = ", ".join(part for part in (address, city, state) if part)

    if age is None and birth_date:
        birth = _parse_birth_date(birth_date)
        if birth is not None:
            age = age_on(birth, today or date.today())

    return {
        PATIENT: (patient_name or "").upper(),
        PATIENT_ADDRESS: full_address or NOT_INFORMED,
        AGE: str(age) if age is not None else NOT_INFORMED,
        PRESCRIPTION: prescription_text or "",
    }


def _parse_birth_date(value: Union[date, str]) -> Optional[date]:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        LOGGER.warning("Ignoring unreadable birth date %r", value)
        return None
