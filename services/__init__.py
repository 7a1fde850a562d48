from services.ingredient_lookup import (
    DataUnavailable,
    IngredientRecord,
    get_ingredient_details,
    get_ingredient_service,
    normalize_name,
)

__all__ = [
    "DataUnavailable",
    "IngredientRecord",
    "get_ingredient_details",
    "get_ingredient_service",
    "normalize_name",
]
