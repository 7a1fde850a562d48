"""
Ingredients Router
Reference data lookups for ingredients shown in a product analysis
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from typing import List, Optional
import logging

from services.ingredient_lookup import (
    IngredientLookupService,
    IngredientRecord,
    get_ingredient_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ingredients", tags=["ingredients"])

UNKNOWN_INGREDIENT_NAME = "Unknown ingredient"
NOT_AVAILABLE_DESCRIPTION = "Detailed ingredient data not available yet."


# Request/Response Models
class IngredientBatchRequest(BaseModel):
    """Batch lookup request model"""
    names: List[str] = Field(..., min_length=1, max_length=200, description="Ingredient names as printed on the label")


class IngredientDetailsResponse(BaseModel):
    """Lookup result for a single ingredient name"""
    query: str
    found: bool
    ingredient: Optional[IngredientRecord]
    display_name: str
    short_description: str


class IngredientBatchResponse(BaseModel):
    """Lookup results in request order"""
    results: List[IngredientDetailsResponse]
    count: int
    found: int


def build_details_response(query: str, record: Optional[IngredientRecord]) -> IngredientDetailsResponse:
    """Fill display fields, falling back to placeholder copy for unknown ingredients"""
    if record is None:
        return IngredientDetailsResponse(
            query=query,
            found=False,
            ingredient=None,
            display_name=query.strip() or UNKNOWN_INGREDIENT_NAME,
            short_description=NOT_AVAILABLE_DESCRIPTION,
        )

    return IngredientDetailsResponse(
        query=query,
        found=True,
        ingredient=record,
        display_name=record.name,
        short_description=record.short_description or NOT_AVAILABLE_DESCRIPTION,
    )


@router.get("/lookup", response_model=IngredientDetailsResponse)
async def lookup_ingredient(
    name: str = Query(..., description="Ingredient name, e.g. 'Niacinamide 10%'"),
    service: IngredientLookupService = Depends(get_ingredient_service),
):
    """
    Look up reference data for one ingredient.

    **Example:** `/api/ingredients/lookup?name=Niacinamide%2010%25`

    Unknown ingredients return `found: false` with placeholder copy.
    """
    try:
        record = await service.get_ingredient_details(name)
        return build_details_response(name, record)

    except Exception as e:
        logger.error(f"Ingredient lookup error for '{name}': {str(e)}")
        raise HTTPException(status_code=500, detail=f"Ingredient lookup failed: {str(e)}")


@router.post("/lookup", response_model=IngredientBatchResponse)
async def lookup_ingredients(
    request: IngredientBatchRequest,
    service: IngredientLookupService = Depends(get_ingredient_service),
):
    """
    Look up every ingredient of an analyzed product in one call.

    **Example:**
    ```json
    {"names": ["Water", "Niacinamide 10%", "Fragrance"]}
    ```
    """
    try:
        logger.info(f"Batch ingredient lookup: {len(request.names)} names")

        records = await service.get_many(request.names)
        results = [build_details_response(n, r) for n, r in zip(request.names, records)]

        return IngredientBatchResponse(
            results=results,
            count=len(results),
            found=sum(1 for r in results if r.found),
        )

    except Exception as e:
        logger.error(f"Batch ingredient lookup error: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Ingredient lookup failed: {str(e)}")


@router.get("/health")
async def ingredients_health(service: IngredientLookupService = Depends(get_ingredient_service)):
    """
    Health check for the ingredient dataset.
    Triggers the load if it has not happened yet.
    """
    try:
        await service.load_index()
        return {"status": "healthy", **service.stats()}

    except Exception as e:
        logger.error(f"Ingredient health check failed: {str(e)}")
        return {
            "status": "unhealthy",
            "error": str(e),
            **service.stats()
        }
