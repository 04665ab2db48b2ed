"""
Duplicate Contacts API endpoints.

Provides endpoints for reviewing and merging duplicate contact records:
- List likely duplicate pairs with scores and match reasons
- Merge an approved pair, choosing per field which value survives
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.orm import Session

from rolodex.core.database import get_db
from rolodex.core.errors import DedupError
from rolodex.core.models import ContactStatus, Ecosystem
from rolodex.services.dedup_service import DedupService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/duplicates", tags=["Duplicate Contacts"])


# =============================================================================
# Request/Response Models
# =============================================================================

class CamelModel(BaseModel):
    """Serializes with the camelCase keys the review UI expects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class CompanyRef(CamelModel):
    id: int
    name: str


class ContactCompanyRef(CamelModel):
    """Additional company of a contact."""

    company_id: int
    is_current: bool = True
    company: Optional[CompanyRef] = None


class ContactOut(CamelModel):
    """Contact as persisted, for side-by-side comparison."""

    id: int
    name: str
    title: Optional[str] = None
    email: Optional[str] = None
    additional_emails: Optional[List[str]] = None
    phone: Optional[str] = None
    linkedin_url: Optional[str] = None
    location: Optional[str] = None
    photo_url: Optional[str] = None
    photo_file: Optional[str] = None
    company_id: Optional[int] = None
    company_name: Optional[str] = None
    company: Optional[CompanyRef] = None
    company_links: List[ContactCompanyRef] = []
    ecosystem: Ecosystem
    status: ContactStatus
    flagged: bool = False
    how_connected: Optional[str] = None
    personal_details: Optional[str] = None
    role_description: Optional[str] = None
    mutual_connections: Optional[str] = None
    where_found: Optional[str] = None
    open_questions: Optional[str] = None
    notes: Optional[str] = None
    referred_by_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DuplicatePair(CamelModel):
    """A likely-duplicate pair; contact1 has the lower id."""

    contact1: ContactOut
    contact2: ContactOut
    score: float = Field(..., ge=0.0, le=1.0)
    reasons: List[str]


class MergeRequest(CamelModel):
    """Request to merge two contacts."""

    keep_id: Optional[int] = Field(None, description="Contact to keep")
    remove_id: Optional[int] = Field(None, description="Contact to merge away and delete")
    field_selections: Optional[Dict[str, Any]] = Field(
        None,
        description='Per field: 1 (lower id), 2 (higher id), "both" (email/phone), "keep" or "remove"',
    )


class MergeResponse(CamelModel):
    message: str
    keep_id: int
    remove_id: int
    updated_fields: List[str] = []
    reassigned: Dict[str, int] = {}


# =============================================================================
# Endpoints
# =============================================================================

@router.get("", response_model=List[DuplicatePair])
def find_duplicates(db: Session = Depends(get_db)):
    """
    List likely duplicate contacts.

    Compares every contact pair by name similarity, canonical name tokens,
    shared company, email and LinkedIn URL. Sorted by score, highest first.
    """
    service = DedupService(db)
    try:
        candidates = service.find_duplicates()
    except Exception:
        logger.exception("Error finding duplicates")
        raise HTTPException(status_code=500, detail="Failed to find duplicates")

    return [DuplicatePair.model_validate(c) for c in candidates]


@router.post("/merge", response_model=MergeResponse)
def merge_duplicates(
    request: MergeRequest,
    db: Session = Depends(get_db),
):
    """
    Merge two contacts.

    Applies the chosen field values to the kept contact, moves every
    conversation, action, relationship, link, prep note, employment record,
    tag, idea and company link to it, and deletes the other contact.
    All-or-nothing.
    """
    service = DedupService(db)
    try:
        return service.merge_contacts(
            keep_id=request.keep_id,
            remove_id=request.remove_id,
            field_selections=request.field_selections,
        )
    except DedupError as e:
        if e.status_code >= 500:
            logger.error(f"Merge failed: {e}")
        raise HTTPException(status_code=e.status_code, detail=e.message)
