"""
Pydantic schemas for navigation responses.
"""
from typing import List
from pydantic import BaseModel


class FeatureResponse(BaseModel):
    id: str
    label: str
    category: str


class FeatureGroupResponse(BaseModel):
    category: str
    features: List[FeatureResponse]


class NavigationResponse(BaseModel):
    """Visible features for the caller, flat and grouped by category."""
    role: str
    features: List[FeatureResponse]
    groups: List[FeatureGroupResponse]
