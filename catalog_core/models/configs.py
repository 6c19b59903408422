"""Models for the catalog config file"""

from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

VisibilityMode = Literal["ALL", "IN_STOCK"]


class AnalogsConfig(BaseModel):
    """Price tolerance bands used when searching for substitute products"""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "first_price_variation": 0.05,
                "second_price_variation": 0.10,
                "third_price_variation": 0.20,
            }
        },
    )

    first_price_variation: float = Field(0.05, gt=0.0, lt=1.0)
    second_price_variation: float = Field(0.10, gt=0.0, lt=1.0)
    third_price_variation: float = Field(0.20, gt=0.0, lt=1.0)

    @model_validator(mode="after")
    def check_ascending(self) -> "AnalogsConfig":
        if not (
            self.first_price_variation
            < self.second_price_variation
            < self.third_price_variation
        ):
            raise ValueError("price variations must be strictly ascending")
        return self

    @property
    def bands(self) -> Tuple[float, float, float]:
        return (
            self.first_price_variation,
            self.second_price_variation,
            self.third_price_variation,
        )


class SearchConfig(BaseModel):
    """Search orchestration settings"""

    model_config = ConfigDict(frozen=True)

    suggestion_threshold: float = Field(
        0.75, ge=0.0, le=1.0, description="Suggestion must score above this"
    )
    max_codes: Optional[int] = Field(
        None, ge=1, description="Cap on tied top hits (None = uncapped)"
    )
    default_locale: str = Field("ua", description="Locale used when none is given")
    index_score_cutoff: float = Field(
        60.0, ge=0.0, le=100.0, description="Minimum hit score of the local index"
    )


class CategoryRoots(BaseModel):
    """Codes of the root categories that gate each size family"""

    model_config = ConfigDict(frozen=True)

    apparel: str = "apparel"
    footwear: str = "footwear"
    hardware: str = "hardware"


class ResolverConfig(BaseModel):
    """Variant resolver settings"""

    model_config = ConfigDict(frozen=True)

    fuzzy_thresholds: Dict[str, int] = Field(
        default_factory=lambda: {"color": 90},
        description="Option code -> rapidfuzz score cutoff for fallback matching",
    )
    numeric_options: List[str] = Field(
        default_factory=lambda: ["footwear_size", "insole_length"],
        description="Options whose raw values use a decimal separator",
    )


class CatalogConfig(BaseModel):
    """Complete catalog engine configuration"""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "products_visibility": "IN_STOCK",
                "min_sellable_price": 1,
                "analogs": {
                    "first_price_variation": 0.05,
                    "second_price_variation": 0.1,
                    "third_price_variation": 0.2,
                },
            }
        },
    )

    products_visibility: VisibilityMode = Field(
        "IN_STOCK", description="ALL forces every product visible (staging/demo)"
    )
    min_sellable_price: float = Field(
        1.0, ge=0.0, description="Price threshold for in-stock and active flags"
    )
    locales: List[str] = Field(default_factory=lambda: ["ru", "ua"])
    analogs: AnalogsConfig = Field(default_factory=AnalogsConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    categories: CategoryRoots = Field(default_factory=CategoryRoots)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)

    @property
    def all_visible(self) -> bool:
        return self.products_visibility == "ALL"
