"""Address value object used for delivery destinations and shipping origins."""

import re
from collections.abc import Mapping

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from marketplace.domain import marketplace
from marketplace.order.errors import InvalidArgument

_POSTAL_CODE = re.compile(r"^\d{5}-\d{3}$")


@marketplace.value_object
class Address:
    """A postal address captured by value.

    Once recorded on an Order the address never changes; later edits to the
    customer's address book do not reach orders already placed.
    """

    street = String(required=True, max_length=255)
    number = String(required=True, max_length=20)
    complement = String(max_length=100)
    district = String(required=True, max_length=100)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=2)
    postal_code = String(required=True, max_length=9)

    @invariant.post
    def state_must_be_two_letter_code(self):
        if not self.state or len(self.state) != 2 or not self.state.isalpha():
            raise ValidationError({"state": ["State must be a two-letter code (e.g. SP, RJ)"]})

    @invariant.post
    def postal_code_must_be_well_formed(self):
        if not self.postal_code or not _POSTAL_CODE.match(self.postal_code):
            raise ValidationError({"postal_code": ["Postal code must use the NNNNN-NNN format"]})

    def formatted(self):
        complement = f", {self.complement}" if self.complement else ""
        return (
            f"{self.street}, {self.number}{complement} - {self.district}, "
            f"{self.city} - {self.state}, {self.postal_code}"
        )


def to_address(value, field="address"):
    """Accept an ``Address`` or a dict of its fields."""
    if isinstance(value, Address):
        return value
    if not isinstance(value, Mapping):
        raise InvalidArgument.for_field(field, "An address is required")
    try:
        return Address(**value)
    except ValidationError as exc:
        raise InvalidArgument(exc.messages) from exc
