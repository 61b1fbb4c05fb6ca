from models.party import PaymentDirection, PartyType

# both spellings have been written by different screens over time
_DIRECTION_ALIASES = {
    "in": PaymentDirection.IN,
    "payment_in": PaymentDirection.IN,
    "out": PaymentDirection.OUT,
    "payment_out": PaymentDirection.OUT,
}


def normalize_direction(value) -> PaymentDirection:
    if isinstance(value, PaymentDirection):
        return value
    key = str(value).strip().lower() if value is not None else ""
    try:
        return _DIRECTION_ALIASES[key]
    except KeyError:
        raise ValueError(f"Unknown payment direction: {value!r}") from None


def direction_for_party(party_type: PartyType) -> PaymentDirection:
    """Customers pay us, we pay suppliers."""
    return PaymentDirection.IN if party_type == PartyType.CUSTOMER else PaymentDirection.OUT
