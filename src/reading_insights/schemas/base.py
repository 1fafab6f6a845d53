from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Response model serialised with camelCase keys for the dashboard UI."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
