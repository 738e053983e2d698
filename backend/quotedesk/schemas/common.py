from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for wire models; the browser forms speak camelCase."""

    model_config = {"alias_generator": to_camel, "populate_by_name": True}
