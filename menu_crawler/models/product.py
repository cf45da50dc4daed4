"""
Product record schemas
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Normalized category assigned by the default pipeline
DEFAULT_CATEGORY = "Drinks"
# External category label when a page carries no category name
DEFAULT_EXTERNAL_CATEGORY = "Default"


class CamelModel(BaseModel):
    """Base schema serialized with camelCase keys"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Nutritions(CamelModel):
    """Nutrition facts per serving; each value carries its own unit"""

    serving_size: Optional[float] = None
    serving_size_unit: Optional[str] = None
    calories: Optional[float] = None
    calories_unit: Optional[str] = None
    carbohydrates: Optional[float] = None
    carbohydrates_unit: Optional[str] = None
    sugar: Optional[float] = None
    sugar_unit: Optional[str] = None
    protein: Optional[float] = None
    protein_unit: Optional[str] = None
    fat: Optional[float] = None
    fat_unit: Optional[str] = None
    trans_fat: Optional[float] = None
    trans_fat_unit: Optional[str] = None
    saturated_fat: Optional[float] = None
    saturated_fat_unit: Optional[str] = None
    natrium: Optional[float] = None
    natrium_unit: Optional[str] = None
    cholesterol: Optional[float] = None
    cholesterol_unit: Optional[str] = None
    caffeine: Optional[float] = None
    caffeine_unit: Optional[str] = None

    def has_values(self) -> bool:
        """True when at least one nutrient value (not just a unit) is set"""
        return any(
            value is not None
            for name, value in self
            if not name.endswith("_unit")
        )

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ExtractedProduct(CamelModel):
    """Result returned by a site-specific product extractor"""

    name: str
    name_en: Optional[str] = None
    description: Optional[str] = None
    image_url: str = ""
    price: Optional[int] = None
    nutritions: Optional[Nutritions] = None
    external_id: Optional[str] = None
    external_url: Optional[str] = None


class CategoryInfo(BaseModel):
    """Category discovered on a menu page"""

    name: str
    url: str
    id: Optional[str] = None


class Product(CamelModel):
    """Normalized product record emitted by the crawler"""

    name: str = Field(..., min_length=1)
    name_en: Optional[str] = None
    description: Optional[str] = None
    price: Optional[int] = None
    external_image_url: str = ""
    category: Optional[str] = DEFAULT_CATEGORY
    external_category: str = DEFAULT_EXTERNAL_CATEGORY
    # Upsert key downstream; must be stable across runs
    external_id: str
    external_url: str = ""
    nutritions: Optional[Nutritions] = None

    def to_record(self) -> Dict[str, Any]:
        """JSON-serializable dict pushed to the output sink"""
        record = self.model_dump(by_alias=True, exclude={"nutritions"})
        record["nutritions"] = self.nutritions.to_record() if self.nutritions else None
        return record
