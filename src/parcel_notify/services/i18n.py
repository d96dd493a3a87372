"""Localized string lookup.

Keys are dotted paths into a nested catalog, e.g. "result.expired.title".
Lookup falls back from the requested locale to its language prefix, then to
the default locale, then to the raw key.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"

CATALOG: dict[str, dict[str, Any]] = {
    "en": {
        "email": {
            "standard_subject": "Product Delivery - {name} [{special_id}]",
            "suspended_subject": "Package On Hold - {name} [{special_id}]",
            "admin_subject": "Package authorized - {name}",
            "greeting": "Hello {name}!",
            "new_delivery": "You have received a new product delivery:",
            "tracking_id": "Tracking ID",
            "authorize_button": "AUTHORIZE THIS DELIVERY",
            "authorize_package_button": "AUTHORIZE PACKAGE",
            "authorize_prompt": "Please authorize this delivery to confirm receipt and acceptance.",
            "expires_in": "This link will expire in {minutes} minutes",
            "open_map": "Open in Google Maps",
        },
        "result": {
            "expired": {
                "title": "Link Expired",
                "message": "This authorization link has expired or is invalid.",
                "sub_message": "Please request a new notification.",
            },
            "standard": {
                "title": "Product Authorized Successfully!",
                "message": 'Product "{name}" has been authorized and accepted.',
                "sub_message": "Your product will arrive within the designated period.",
            },
            "suspended": {
                "title": "Package Authorization Successful!",
                "message": 'Package "{name}" has been authorized for delivery.',
                "sub_message": "Your package will be released for delivery shortly.",
            },
            "confirm": {
                "title": "Confirm Authorization",
                "message": 'Authorize delivery of "{name}"?',
                "button": "Authorize",
            },
        },
        "submit": {
            "standard_sent": "Product notification sent successfully!",
            "suspended_sent": "Package notification sent successfully!",
            "failed": "Failed to send notification: {error}",
        },
    },
    "es": {
        "email": {
            "standard_subject": "Entrega de producto - {name} [{special_id}]",
            "suspended_subject": "Paquete retenido - {name} [{special_id}]",
            "greeting": "¡Hola {name}!",
            "new_delivery": "Ha recibido una nueva entrega de producto:",
            "tracking_id": "Número de seguimiento",
            "authorize_button": "AUTORIZAR ESTA ENTREGA",
            "authorize_package_button": "AUTORIZAR PAQUETE",
            "authorize_prompt": "Autorice esta entrega para confirmar la recepción.",
            "expires_in": "Este enlace caducará en {minutes} minutos",
            "open_map": "Abrir en Google Maps",
        },
        "result": {
            "expired": {
                "title": "Enlace caducado",
                "message": "Este enlace de autorización ha caducado o no es válido.",
                "sub_message": "Solicite una nueva notificación.",
            },
            "standard": {
                "title": "¡Producto autorizado!",
                "message": 'El producto "{name}" ha sido autorizado y aceptado.',
                "sub_message": "Su producto llegará dentro del plazo previsto.",
            },
            "suspended": {
                "title": "¡Paquete autorizado!",
                "message": 'El paquete "{name}" ha sido autorizado para su entrega.',
                "sub_message": "Su paquete será liberado para entrega en breve.",
            },
            "confirm": {
                "title": "Confirmar autorización",
                "message": '¿Autorizar la entrega de "{name}"?',
                "button": "Autorizar",
            },
        },
    },
    "fr": {
        "email": {
            "standard_subject": "Livraison de produit - {name} [{special_id}]",
            "suspended_subject": "Colis en attente - {name} [{special_id}]",
            "greeting": "Bonjour {name} !",
            "tracking_id": "Numéro de suivi",
            "authorize_button": "AUTORISER CETTE LIVRAISON",
            "authorize_package_button": "AUTORISER LE COLIS",
            "expires_in": "Ce lien expirera dans {minutes} minutes",
        },
        "result": {
            "expired": {
                "title": "Lien expiré",
                "message": "Ce lien d'autorisation a expiré ou n'est pas valide.",
                "sub_message": "Veuillez demander une nouvelle notification.",
            },
            "standard": {
                "title": "Produit autorisé !",
                "message": 'Le produit "{name}" a été autorisé et accepté.',
            },
            "suspended": {
                "title": "Colis autorisé !",
                "message": 'Le colis "{name}" a été autorisé pour la livraison.',
            },
        },
    },
}


class _KeepMissing(dict):
    """format_map helper that leaves unknown placeholders untouched."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def _lookup(catalog: dict[str, Any], key: str) -> str | None:
    node: Any = catalog
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node if isinstance(node, str) else None


class Translator:
    """Resolves catalog keys for a locale with a fixed fallback chain."""

    def __init__(
        self,
        catalog: dict[str, dict[str, Any]] | None = None,
        default_locale: str = DEFAULT_LOCALE,
    ) -> None:
        self.catalog = catalog if catalog is not None else CATALOG
        self.default_locale = default_locale

    def candidates(self, locale: str | None) -> list[str]:
        """Locales to try, in order, for a requested locale."""
        chain: list[str] = []
        if locale:
            normalized = locale.replace("_", "-").lower()
            chain.append(normalized)
            language = normalized.split("-")[0]
            if language not in chain:
                chain.append(language)
        if self.default_locale not in chain:
            chain.append(self.default_locale)
        return chain

    def resolve_locale(self, locale: str | None) -> str:
        """First locale in the fallback chain that the catalog knows."""
        for candidate in self.candidates(locale):
            if candidate in self.catalog:
                return candidate
        return self.default_locale

    def translate(
        self,
        key: str,
        locale: str | None = None,
        params: dict[str, Any] | None = None,
    ) -> str:
        """Look up a string, falling back to the raw key if nothing matches."""
        text = None
        for candidate in self.candidates(locale):
            entries = self.catalog.get(candidate)
            if entries is None:
                continue
            text = _lookup(entries, key)
            if text is not None:
                break

        if text is None:
            logger.debug(f"Missing translation for {key!r} ({locale})")
            text = key

        if params:
            text = text.format_map(_KeepMissing(params))
        return text


_default_translator = Translator()


def translate(
    key: str,
    locale: str | None = None,
    params: dict[str, Any] | None = None,
) -> str:
    """Translate with the built-in catalog."""
    return _default_translator.translate(key, locale, params)
