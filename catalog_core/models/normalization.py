"""Pydantic models for attribute normalization"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class VariantContext(BaseModel):
    """Hints used to disambiguate a raw vendor value"""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {"brand": "Nike", "gender": "W", "kind": "Bra"}
        },
    )

    brand: Optional[str] = Field(None, description="Brand name as imported")
    gender: Optional[str] = Field(None, description="Vendor gender code")
    kind: Optional[str] = Field(None, description="Vendor product kind (tpg)")

    def fallback_keys(self) -> List[tuple]:
        """
        Lookup keys from most to least specific.

        Drops kind, then gender, then brand.
        """
        return [
            (self.brand, self.gender, self.kind),
            (self.brand, self.gender, None),
            (self.brand, None, None),
            (None, None, None),
        ]


class NormalizationWarning(BaseModel):
    """Structured record for a non-fatal normalization problem"""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "Missing color variant",
                "product_code": "A-1001",
                "context": {"family": "color", "raw_value": "NAVY/WHT"},
            }
        }
    )

    message: str = Field(..., description="What went wrong")
    product_code: Optional[str] = Field(None, description="Product identity code")
    context: Dict[str, Any] = Field(default_factory=dict)


class NormalizationReport(BaseModel):
    """Outcome of a full normalization pass for one product"""

    product_code: str
    families: List[str] = Field(
        default_factory=list, description="Families that ran, in order"
    )
    warnings: List[NormalizationWarning] = Field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
