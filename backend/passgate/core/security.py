"""
Admin override PIN verification.
"""

import hmac
from typing import Optional

from passgate.core.config import get_settings


def verify_admin_pin(pin: Optional[str]) -> bool:
    """Compare the supplied PIN against ADMIN_PIN byte-for-byte.

    An unset ADMIN_PIN rejects every override.
    """
    expected = get_settings().ADMIN_PIN
    if not expected or pin is None:
        return False
    return hmac.compare_digest(pin.encode("utf-8"), expected.encode("utf-8"))
