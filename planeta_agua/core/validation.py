# planeta_agua/core/validation.py
"""
Declarative request-body checks.

Every route that accepts a body declares a `RouteSchema`: the fields it needs
and the single message returned when any of them is missing. Checks are
shallow on purpose: a field passes when its value is truthy (and, for
`NonEmptyList`, when it is a non-empty list). Types and numeric ranges are not
inspected, so `quantity: -1` or `total: "abc"` pass through unchanged.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from .exceptions import ClientInputError


@dataclass(frozen=True)
class Present:
    """The field must carry a truthy value."""

    name: str
    aliases: Tuple[str, ...] = ()

    def lookup(self, body: Mapping[str, Any]) -> Any:
        for key in (self.name,) + self.aliases:
            value = body.get(key)
            if value:
                return value
        return None

    def accepts(self, body: Mapping[str, Any]) -> bool:
        return bool(self.lookup(body))


@dataclass(frozen=True)
class NonEmptyList(Present):
    """The field must be a list with at least one element."""

    def accepts(self, body: Mapping[str, Any]) -> bool:
        value = self.lookup(body)
        return isinstance(value, list) and len(value) > 0


@dataclass(frozen=True)
class RouteSchema:
    message: str
    fields: Tuple[Present, ...] = field(default_factory=tuple)

    def validate(self, body: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """Return the body with aliased fields folded onto their canonical names.

        Raises ClientInputError carrying this schema's message when a field
        is rejected.
        """
        body = body if isinstance(body, Mapping) else {}
        for constraint in self.fields:
            if not constraint.accepts(body):
                raise ClientInputError(self.message)

        cleaned = dict(body)
        for constraint in self.fields:
            cleaned[constraint.name] = constraint.lookup(body)
        return cleaned


SIGNUP = RouteSchema(
    "Nome, email e senha são obrigatórios.",
    (Present("name"), Present("email"), Present("password")),
)

LOGIN = RouteSchema(
    "Email e senha são obrigatórios.",
    (Present("email"), Present("password")),
)

# Shared by address create and update; `zipCode` is the legacy update spelling.
ADDRESS = RouteSchema(
    "Todos os campos do endereço são obrigatórios.",
    (
        Present("street"),
        Present("neighborhood"),
        Present("city"),
        Present("state"),
        Present("zip_code", aliases=("zipCode",)),
    ),
)

CREDIT_CARD = RouteSchema(
    "Brand, last4 e expiry são obrigatórios.",
    (Present("brand"), Present("last4"), Present("expiry")),
)

ORDER_CREATE = RouteSchema(
    "Dados do pedido incompletos.",
    (NonEmptyList("items"), Present("total"), Present("shipping_address")),
)

ORDER_PROCESS = RouteSchema(
    "Dados do pedido incompletos.",
    (NonEmptyList("items"), Present("total"), Present("addressId")),
)

PAYMENT_PREFERENCE = RouteSchema(
    "Items são obrigatórios.",
    (NonEmptyList("items"),),
)

PAYMENT_PROCESS = RouteSchema(
    "Dados incompletos.",
    (Present("token"), NonEmptyList("items"), Present("addressId")),
)
