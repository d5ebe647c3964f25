from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base de todos los esquemas.
    - En Python los campos son snake_case; en JSON viajan en camelCase
      (`productId`, `expiryDate`...), igual que los consume el front-end.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
