"""camelCase base schema.

Python code stays snake_case; JSON in and out of the API is camelCase.
Route handlers build response dicts with the converters in
`app.services.records`, so no schema reads ORM attributes directly.
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts camelCase or snake_case input, outputs camelCase by alias."""
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }
