"""
Shared pydantic configuration.

Field names are snake_case in Python and camelCase on the wire
(``bookId``, ``transactionDate``, ``dueDate``), matching the JSON
documents clients of the library service already exchange.  Both forms
are accepted on input.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }
