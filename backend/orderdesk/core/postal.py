"""
Brazilian postal code (CEP) lookup against the public ViaCEP service.

Lookups are best effort: any failure returns ``{"error": True}`` and the
caller carries on with a manually typed address.
"""

import requests
from flask import current_app

from orderdesk.core.constants import POSTAL_CODE_DIGITS
from orderdesk.core.utils import only_digits

LOOKUP_FAILED = {"error": True}


def lookup_postal_code(code: str) -> dict:
    """
    Resolve a postal code to street, neighborhood, city and state.

    Args:
        code: Postal code, punctuation allowed ("01310-100")

    Returns:
        Dict with street, neighborhood, city, state and postal_code,
        or ``{"error": True}`` when the code is malformed or unknown or the
        service is unreachable.
    """
    digits = only_digits(code)
    if len(digits) != POSTAL_CODE_DIGITS:
        return dict(LOOKUP_FAILED)

    url = current_app.config["POSTAL_CODE_LOOKUP_URL"].format(code=digits)

    try:
        response = requests.get(url, timeout=current_app.config["POSTAL_CODE_LOOKUP_TIMEOUT"])
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError):
        current_app.logger.warning("Postal code lookup failed for %s", digits, exc_info=True)
        return dict(LOOKUP_FAILED)

    if not isinstance(data, dict) or data.get("erro"):
        return dict(LOOKUP_FAILED)

    return {
        "street": data.get("logradouro") or "",
        "neighborhood": data.get("bairro") or "",
        "city": data.get("localidade") or "",
        "state": data.get("uf") or "",
        "postal_code": digits,
    }
