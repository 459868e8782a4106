from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

class ORMModel(BaseModel):
    """Base for API bodies: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
