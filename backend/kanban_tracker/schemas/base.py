"""Общая база схем API: в JSON поля camelCase (planStart), в коде snake_case."""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def camelize(data):
    """Ответы сервисов (dict/list) с ключами в camelCase, рекурсивно."""
    if isinstance(data, dict):
        return {to_camel(key): camelize(value) for key, value in data.items()}
    if isinstance(data, list):
        return [camelize(item) for item in data]
    return data
