"""Application container dependency."""

from template_market.core.container import ApplicationContainer, get_container


def get_app_container() -> ApplicationContainer:
    return get_container()


__all__ = ["get_app_container"]
