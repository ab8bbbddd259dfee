"""Base schema class with camelCase alias generation.

Records and API schemas inherit from this instead of BaseModel directly.
Python code stays snake_case. Stored JSON and API payloads are camelCase,
matching what the admin client already sends.
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts both snake_case and camelCase, outputs camelCase when dumped by alias."""
    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "protected_namespaces": (),
    }
