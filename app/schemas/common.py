from decimal import Decimal
from typing import Annotated

from pydantic import PlainSerializer

# Money travels as Decimal internally and as a JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(lambda v: float(v), return_type=float, when_used="json")]

# Same wire format for rates such as tax_rate (0.2100 -> 0.21)
Rate = Annotated[Decimal, PlainSerializer(lambda v: float(v), return_type=float, when_used="json")]
