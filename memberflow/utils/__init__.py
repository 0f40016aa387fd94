"""
Utilitaires et constantes pour memberflow.
"""

from memberflow.utils.helpers import (
    continent_for_country,
    country_to_alpha2,
    email_domain,
    mask_email,
    normalize_email,
    normalize_url,
)

__all__ = [
    "continent_for_country",
    "country_to_alpha2",
    "email_domain",
    "mask_email",
    "normalize_email",
    "normalize_url",
]
