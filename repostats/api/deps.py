"""
API dependency helpers.
"""
from repostats.services.backend_selector import BackendSelector
from repostats.utils.settings import get_settings


def get_backend_selector() -> BackendSelector:
    """Fresh selector per request; it carries no state across requests."""
    return BackendSelector.from_settings(get_settings())
