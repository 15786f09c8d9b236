"""Currency conversion service backed by a static exchange-rate table."""

import json
import math
import re
from collections.abc import Iterator, Mapping
from types import MappingProxyType

from pydantic import ValidationError

from convert_api.logging_config import get_logger
from convert_api.models.conversion import ConversionRequest

logger = get_logger(__name__)

REFERENCE_CURRENCY = "JPY"

# Units of each currency per reference unit
DEFAULT_RATES: Mapping[str, float] = MappingProxyType(
    {
        "JPY": 100,
        "USD": 0.82,
        "EUR": 0.74,
        "BRL": 3.96,
        "AUD": 1.09,
    }
)

CODE_LENGTH = 3

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

JSON_WHITESPACE = " \t\n\r"


def _reject_constant(name: str) -> float:
    msg = f"Invalid JSON literal: {name}"
    raise ValueError(msg)


# NaN and Infinity are not JSON
_json_decoder = json.JSONDecoder(parse_constant=_reject_constant)


class ConversionError(Exception):
    """Base class for caller-input failures; str() is the client-facing message."""


class DecodeError(ConversionError):
    """Raised when the request body cannot be decoded."""

    def __init__(self) -> None:
        super().__init__("Failed to decode data")


class InvalidFormatError(ConversionError):
    """Raised when a value is too short or its amount is not an integer."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Invalid format: {value}")


class UnknownCurrencyError(ConversionError):
    """Raised when a well-formed value names a currency missing from the table."""

    def __init__(self, currency_code: str) -> None:
        self.currency_code = currency_code
        super().__init__(f"Unknown currency: {currency_code}")


class ExchangeRateTable(Mapping[str, float]):
    """Read-only mapping of currency code to rate."""

    def __init__(self, rates: Mapping[str, float], reference: str = REFERENCE_CURRENCY):
        for code, rate in rates.items():
            if len(code) != CODE_LENGTH:
                msg = f"Currency code must be {CODE_LENGTH} characters: {code!r}"
                raise ValueError(msg)
            if not rate > 0:
                msg = f"Rate for {code} must be positive: {rate!r}"
                raise ValueError(msg)
        if reference not in rates:
            msg = f"Reference currency {reference} missing from rates"
            raise ValueError(msg)

        self._rates = MappingProxyType({code: float(rate) for code, rate in rates.items()})
        self.reference = reference

    def __getitem__(self, code: str) -> float:
        return self._rates[code]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rates)

    def __len__(self) -> int:
        return len(self._rates)

    def __repr__(self) -> str:
        return f"ExchangeRateTable({dict(self._rates)!r}, reference={self.reference!r})"

    @classmethod
    def default(cls) -> "ExchangeRateTable":
        """Build the table of hardcoded rates."""
        return cls(DEFAULT_RATES)


def parse_integer(text: str) -> int | None:
    """Parse a base-10 signed 64-bit integer, returning None when it is not one."""
    if not _INTEGER_PATTERN.fullmatch(text):
        return None
    number = int(text)
    if not _INT64_MIN <= number <= _INT64_MAX:
        return None
    return number


class CurrencyService:
    """Service converting tagged amounts into the reference currency."""

    def __init__(self, rates: ExchangeRateTable | None = None):
        """Initialize the currency service.

        Args:
            rates: Exchange-rate table; the hardcoded default when omitted
        """
        self.rates = rates if rates is not None else ExchangeRateTable.default()

    def decode_request(self, body: bytes) -> ConversionRequest:
        """Decode a raw JSON request body.

        Args:
            body: Raw request body

        Returns:
            Decoded conversion request

        Raises:
            DecodeError: If the body does not start with a JSON object (or null)
                whose value, when present, is a string
        """
        text = body.decode("utf-8", errors="replace").lstrip(JSON_WHITESPACE)
        try:
            # Only the first JSON value is read; anything after it is ignored
            document, _ = _json_decoder.raw_decode(text)
            return ConversionRequest.model_validate(document)
        except ValidationError as e:
            logger.warning("Failed to decode conversion request", error_count=e.error_count())
            raise DecodeError from e
        except ValueError as e:
            logger.warning(f"Failed to decode conversion request: {e!s}")
            raise DecodeError from e

    def parse(self, value: str) -> tuple[str, int]:
        """Split a request value into currency code and amount.

        The shape check (length, integer suffix) always runs before the
        currency lookup.

        Args:
            value: Raw value such as ``USD100``

        Returns:
            Tuple of currency code and integer amount

        Raises:
            InvalidFormatError: If the value is too short or the amount is not an integer
            UnknownCurrencyError: If the currency code is not in the table
        """
        if len(value) < CODE_LENGTH + 1:
            raise InvalidFormatError(value)

        amount = parse_integer(value[CODE_LENGTH:])
        if amount is None:
            raise InvalidFormatError(value)

        currency_code = value[:CODE_LENGTH]
        if currency_code not in self.rates:
            raise UnknownCurrencyError(currency_code)

        return currency_code, amount

    def convert(self, value: str) -> int:
        """Convert a tagged amount into whole units of the reference currency.

        Args:
            value: Raw value such as ``USD100``

        Returns:
            Converted amount, floored toward negative infinity; not bounded to 64 bits

        Raises:
            InvalidFormatError: If the value is malformed
            UnknownCurrencyError: If the currency is not supported
        """
        try:
            currency_code, amount = self.parse(value)
        except ConversionError as e:
            logger.warning(f"Currency conversion rejected: {e!s}", value=value)
            raise

        answer = math.floor(self.rates[self.rates.reference] / self.rates[currency_code] * amount)

        logger.info(
            f"Currency conversion completed: {amount} {currency_code} = {answer} {self.rates.reference}",
            currency=currency_code,
            amount=amount,
            answer=answer,
        )
        return answer

    def supported_currencies(self) -> list[str]:
        """Get list of supported currency codes.

        Returns:
            Sorted list of supported currency codes
        """
        return sorted(self.rates)
