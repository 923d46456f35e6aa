"""Shape validation for untrusted data."""

from typing import Any, Type

from pydantic import BaseModel, ValidationError


def validate(model: Type[BaseModel], value: Any) -> bool:
    """Check whether an untrusted value conforms to the given model.

    Args:
        model: Pydantic model describing the expected shape
        value: Value of unknown structure, e.g. parsed file contents

    Returns:
        True if the value validates, False otherwise
    """
    try:
        model.model_validate(value)
    except ValidationError:
        return False
    return True
