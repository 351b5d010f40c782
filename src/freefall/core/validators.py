"""
Reusable validators for the package's Pydantic models.

Exports:
    - asdict: Model-to-dict converter.
    - positive_value: Field validator (value must be positive or None).
    - unit_interval: Field validator (value must lie strictly inside (0, 1)).
"""

__all__ = [
    "asdict",
    "positive_value",
    "unit_interval",
]


def asdict(model):
    """
    Return the dictionary representation of a Pydantic model.

    Args:
        model (BaseModel): The Pydantic model instance.

    Returns:
        dict: Dictionary representation of the model.
    """
    return model.model_dump()


def positive_value(cls, v):
    """
    Ensure a field's value is positive or None.

    Args:
        cls: The model class (required by Pydantic validator signature).
        v: The value to validate.

    Returns:
        The validated value, if positive or None.

    Raises:
        ValueError: If the value is not None and less than zero.
    """
    if v is not None and v < 0:
        raise ValueError("Value must be positive")
    return v


def unit_interval(cls, v):
    """
    Ensure a field's value lies in the open interval (0, 1).

    Used for sin(theta_0), where both ends make the funnel degenerate.

    Raises:
        ValueError: If the value is outside (0, 1).
    """
    if not 0.0 < v < 1.0:
        raise ValueError("Value must lie strictly between 0 and 1")
    return v
