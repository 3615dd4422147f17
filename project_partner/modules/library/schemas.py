from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List, Literal
from datetime import datetime

ItemType = Literal["tools", "materials"]


class ToolCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    example_models: Optional[str] = None
    photo_url: Optional[str] = None


class ToolUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    example_models: Optional[str] = None
    photo_url: Optional[str] = None


class ToolResponse(BaseModel):
    id: str
    name: str
    item: str
    description: Optional[str] = None
    category: Optional[str] = None
    example_models: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MaterialCreate(BaseModel):
    item: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    unit_size: Optional[str] = None
    avg_cost_per_unit: Optional[float] = None
    photo_url: Optional[str] = None


class MaterialUpdate(BaseModel):
    item: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    unit_size: Optional[str] = None
    avg_cost_per_unit: Optional[float] = None
    photo_url: Optional[str] = None


class MaterialResponse(BaseModel):
    id: str
    item: str
    description: Optional[str] = None
    category: Optional[str] = None
    unit_size: Optional[str] = None
    avg_cost_per_unit: Optional[float] = None
    photo_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VariationCreate(BaseModel):
    core_item_id: str
    item_type: ItemType
    name: str
    description: Optional[str] = None
    attributes: Dict[str, Any] = {}
    sku: Optional[str] = None
    photo_url: Optional[str] = None


class VariationUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    attributes: Optional[Dict[str, Any]] = None
    sku: Optional[str] = None
    photo_url: Optional[str] = None


class VariationResponse(BaseModel):
    id: str
    core_item_id: str
    item_type: str
    name: str
    description: Optional[str] = None
    attributes: Dict[str, Any] = {}
    sku: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MatchRequest(BaseModel):
    names: List[str]
    kind: ItemType


class MatchResult(BaseModel):
    name: str
    matched: bool
    matched_id: Optional[str] = None
    matched_name: Optional[str] = None


class ToolImportResponse(BaseModel):
    tools_parsed: int
    success: int
    variations_created: int
    errors: List[str]
