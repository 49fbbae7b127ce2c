"""
Navigation routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends

from shepherd.features.members.dependencies import get_current_member
from shepherd.features.members.models import Member
from shepherd.features.navigation.features import group_by_category, visible_features
from shepherd.features.navigation.schemas import FeatureGroupResponse, FeatureResponse, NavigationResponse


router = APIRouter()


def _to_response(descriptor) -> FeatureResponse:
    return FeatureResponse(id=descriptor.id, label=descriptor.label, category=descriptor.category)


@router.get("/features", response_model=NavigationResponse)
async def list_visible_features(
    member: Annotated[Member, Depends(get_current_member)]
):
    """Features the caller's role may see, in display order."""
    visible = visible_features(member.role)
    return NavigationResponse(
        role=member.role,
        features=[_to_response(f) for f in visible],
        groups=[
            FeatureGroupResponse(category=category, features=[_to_response(f) for f in items])
            for category, items in group_by_category(visible)
        ],
    )
