"""
Contact Deduplication Service.

Finds likely duplicate contacts with rule-based fuzzy matching and merges
a human-approved pair in a single transaction, re-pointing every record
that referenced the removed contact.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from rolodex.core.config import Settings, get_settings
from rolodex.core.errors import MergeFailedError, NotFoundError, ValidationError
from rolodex.core.models import (
    Action,
    Contact,
    ContactCompany,
    ContactRelationship,
    ContactTag,
    Conversation,
    ConversationContact,
    EmploymentHistory,
    IdeaContact,
    Link,
    PrepNote,
)
from rolodex.matching.contact_matcher import ContactMatcher, ContactProfile

logger = logging.getLogger(__name__)


# =============================================================================
# Field selections
# =============================================================================

class MergeField(str, enum.Enum):
    """Contact fields a reviewer may pick per merge. Values are the wire keys."""
    NAME = "name"
    EMAIL = "email"
    PHONE = "phone"
    TITLE = "title"
    LINKEDIN_URL = "linkedinUrl"
    ECOSYSTEM = "ecosystem"
    STATUS = "status"
    LOCATION = "location"
    HOW_CONNECTED = "howConnected"
    PERSONAL_DETAILS = "personalDetails"
    ROLE_DESCRIPTION = "roleDescription"
    NOTES = "notes"
    PHOTO_FILE = "photoFile"
    PHOTO_URL = "photoUrl"
    MUTUAL_CONNECTIONS = "mutualConnections"
    WHERE_FOUND = "whereFound"
    OPEN_QUESTIONS = "openQuestions"
    FLAGGED = "flagged"

    @property
    def attribute(self) -> str:
        """Contact column backing this field."""
        return self.name.lower()

    @classmethod
    def lookup(cls, key: str) -> Optional["MergeField"]:
        """Resolve a wire key ("linkedinUrl") or column name ("linkedin_url")."""
        for member in cls:
            if key == member.value or key == member.attribute:
                return member
        return None


class FieldSelection(str, enum.Enum):
    """Which contact's value survives the merge."""
    KEPT = "keep"
    REMOVED = "remove"
    BOTH = "both"  # union; email and phone only


MULTI_VALUED_FIELDS = frozenset({MergeField.EMAIL, MergeField.PHONE})

PHONE_SEPARATOR = " | "


def parse_field_selections(
    raw: Optional[Dict[str, Any]],
    keep_id: int,
    remove_id: int,
) -> Dict[MergeField, FieldSelection]:
    """
    Convert a wire selection map into role-keyed selections.

    The review UI sends positional values: 1 is the contact with the lower
    id, 2 the higher. "keep"/"remove" are accepted as role-keyed spellings
    and "both" asks for a union. Falsy values mean "no selection".

    Raises:
        ValidationError: unknown field, unknown value, or "both" on a
            single-valued field
    """
    if not raw:
        return {}
    if not isinstance(raw, dict):
        raise ValidationError(
            "fieldSelections must be an object",
            invalid_params={"fieldSelections": "expected an object"},
        )

    first, second = (
        (FieldSelection.KEPT, FieldSelection.REMOVED)
        if keep_id < remove_id
        else (FieldSelection.REMOVED, FieldSelection.KEPT)
    )

    selections: Dict[MergeField, FieldSelection] = {}
    invalid: Dict[str, str] = {}

    for key, value in raw.items():
        merge_field = MergeField.lookup(key)
        if merge_field is None:
            invalid[key] = "unknown field"
            continue
        if value is None or value == "" or value == 0:
            continue
        if isinstance(value, bool):
            invalid[key] = f"invalid selection {value!r}"
            continue

        if value in (1, "1"):
            selection = first
        elif value in (2, "2"):
            selection = second
        elif value in ("keep", "remove", "both"):
            selection = FieldSelection(value)
        else:
            invalid[key] = f"invalid selection {value!r}"
            continue

        if selection is FieldSelection.BOTH and merge_field not in MULTI_VALUED_FIELDS:
            invalid[key] = "'both' is only supported for email and phone"
            continue

        selections[merge_field] = selection

    if invalid:
        raise ValidationError(
            f"Invalid fieldSelections: {', '.join(sorted(invalid))}",
            invalid_params=invalid,
        )
    return selections


def collect_emails(contact: Contact) -> List[str]:
    """Primary email followed by additional emails, empties dropped."""
    emails = []
    if contact.email:
        emails.append(contact.email)
    for extra in contact.additional_emails or []:
        if isinstance(extra, str) and extra.strip():
            emails.append(extra)
    return emails


def union_emails(*contacts: Contact) -> List[str]:
    """Order-preserving, case-insensitive union of all contacts' emails."""
    seen = set()
    merged = []
    for contact in contacts:
        for email in collect_emails(contact):
            key = email.strip().lower()
            if key not in seen:
                seen.add(key)
                merged.append(email.strip())
    return merged


# =============================================================================
# Relation table
# =============================================================================

class MergeStrategy(str, enum.Enum):
    REPOINT = "repoint"  # one-to-many: no duplicate risk
    DEDUPE = "dedupe"  # many-to-many: drop rows that would collide, re-point the rest


@dataclass(frozen=True)
class RelationMerge:
    """How one foreign key to contacts is carried over to the kept contact."""
    name: str
    model: Any
    contact_column: Any
    strategy: MergeStrategy
    other_column: Any = None


MERGE_RELATIONS: Tuple[RelationMerge, ...] = (
    RelationMerge("conversations", Conversation, Conversation.contact_id, MergeStrategy.REPOINT),
    RelationMerge("actions", Action, Action.contact_id, MergeStrategy.REPOINT),
    RelationMerge(
        "relationships_from", ContactRelationship,
        ContactRelationship.from_contact_id, MergeStrategy.REPOINT,
    ),
    RelationMerge(
        "relationships_to", ContactRelationship,
        ContactRelationship.to_contact_id, MergeStrategy.REPOINT,
    ),
    RelationMerge("links", Link, Link.contact_id, MergeStrategy.REPOINT),
    RelationMerge("prep_notes", PrepNote, PrepNote.contact_id, MergeStrategy.REPOINT),
    RelationMerge(
        "employment_history", EmploymentHistory,
        EmploymentHistory.contact_id, MergeStrategy.REPOINT,
    ),
    RelationMerge("referrals", Contact, Contact.referred_by_id, MergeStrategy.REPOINT),
    RelationMerge(
        "conversation_contacts", ConversationContact, ConversationContact.contact_id,
        MergeStrategy.DEDUPE, other_column=ConversationContact.conversation_id,
    ),
    RelationMerge(
        "tags", ContactTag, ContactTag.contact_id,
        MergeStrategy.DEDUPE, other_column=ContactTag.tag_id,
    ),
    RelationMerge(
        "ideas", IdeaContact, IdeaContact.contact_id,
        MergeStrategy.DEDUPE, other_column=IdeaContact.idea_id,
    ),
    RelationMerge(
        "companies", ContactCompany, ContactCompany.contact_id,
        MergeStrategy.DEDUPE, other_column=ContactCompany.company_id,
    ),
)


@dataclass
class DuplicateCandidate:
    """A likely-duplicate pair. Derived on every scan, never persisted."""
    contact1: Contact
    contact2: Contact
    score: float
    reasons: List[str] = field(default_factory=list)


# =============================================================================
# Service
# =============================================================================

class DedupService:
    """
    Core deduplication logic: scan for candidates, merge an approved pair.
    """

    def __init__(self, session: Session, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.matcher = ContactMatcher.from_settings(self.settings)

    def find_duplicates(self) -> List[DuplicateCandidate]:
        """
        Score every unordered contact pair and return likely duplicates.

        Reads one snapshot of all contacts and compares all pairs - O(n²),
        fine for a personal network of a few thousand contacts.

        Returns:
            Candidates with at least one reason, highest score first.
            Ties keep contact-id order.
        """
        contacts = (
            self.session.query(Contact)
            .options(selectinload(Contact.company_links))
            .order_by(Contact.id)
            .all()
        )

        if len(contacts) < 2:
            return []

        if len(contacts) > self.settings.duplicate_scan_warn_threshold:
            logger.warning(
                f"Duplicate scan over {len(contacts)} contacts exceeds "
                f"{self.settings.duplicate_scan_warn_threshold}; pairwise scoring is O(n²)"
            )

        # TODO: bucket profiles by first canonical token before pairwise scoring
        # once networks grow past the warn threshold.
        profiles = [ContactProfile.from_contact(c) for c in contacts]

        candidates: List[DuplicateCandidate] = []
        compared = 0
        for i in range(len(contacts)):
            for j in range(i + 1, len(contacts)):
                compared += 1
                result = self.matcher.compare(profiles[i], profiles[j])
                if not result.is_candidate:
                    continue
                candidates.append(DuplicateCandidate(
                    contact1=contacts[i],
                    contact2=contacts[j],
                    score=result.score,
                    reasons=result.reasons,
                ))

        candidates.sort(key=lambda c: c.score, reverse=True)

        logger.info(
            f"Duplicate scan complete: {len(candidates)} candidates from "
            f"{compared} comparisons over {len(contacts)} contacts"
        )
        return candidates

    def merge_contacts(
        self,
        keep_id: Optional[int],
        remove_id: Optional[int],
        field_selections: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Merge `remove_id` into `keep_id`.

        Applies the reviewer's field selections to the kept contact, moves
        every reference from the removed contact to the kept one, and deletes
        the removed contact. Everything happens in one transaction.

        Args:
            keep_id: Contact that survives.
            remove_id: Contact that is merged away and deleted.
            field_selections: Wire map of field -> 1 | 2 | "both" | "keep" | "remove".

        Returns:
            Dict with merge result details.

        Raises:
            ValidationError: missing/equal ids or bad selections (nothing touched)
            NotFoundError: either contact does not exist (nothing touched)
            MergeFailedError: the transaction failed and was rolled back
        """
        if keep_id is None or remove_id is None or keep_id == remove_id:
            raise ValidationError(
                "keepId and removeId are required and must be different",
                invalid_params={"keepId": str(keep_id), "removeId": str(remove_id)},
            )

        selections = parse_field_selections(field_selections, keep_id, remove_id)

        keep = self.session.get(Contact, keep_id)
        remove = self.session.get(Contact, remove_id)
        missing = [cid for cid, c in ((keep_id, keep), (remove_id, remove)) if c is None]
        if missing:
            raise NotFoundError(resource_ids=missing)

        try:
            updated_fields = self._apply_field_selections(keep, remove, selections)
            self.session.flush()

            reassigned = self._reassign_references(keep_id, remove_id)

            self.session.delete(remove)
            self.session.commit()
        except Exception as e:
            self.session.rollback()
            logger.error(
                f"Merge of contact {remove_id} into {keep_id} failed: {e}",
                exc_info=True,
            )
            raise MergeFailedError(keep_id=keep_id, remove_id=remove_id) from e

        logger.info(
            f"Merged contact {remove_id} into {keep_id}: "
            f"{len(updated_fields)} fields updated, "
            f"{sum(reassigned.values())} references moved"
        )
        return {
            "message": "Contacts merged successfully",
            "keepId": keep_id,
            "removeId": remove_id,
            "updatedFields": updated_fields,
            "reassigned": reassigned,
        }

    def _apply_field_selections(
        self,
        keep: Contact,
        remove: Contact,
        selections: Dict[MergeField, FieldSelection],
    ) -> List[str]:
        """Copy selected values onto the kept contact. Returns changed wire keys."""
        updated = []

        for merge_field, selection in selections.items():
            if selection is FieldSelection.KEPT:
                continue

            if merge_field is MergeField.EMAIL and selection is FieldSelection.BOTH:
                emails = union_emails(keep, remove)
                keep.email = emails[0] if emails else None
                keep.additional_emails = emails[1:] or None

            elif merge_field is MergeField.PHONE and selection is FieldSelection.BOTH:
                phones = []
                for phone in (keep.phone, remove.phone):
                    if phone and phone not in phones:
                        phones.append(phone)
                keep.phone = PHONE_SEPARATOR.join(phones) or None

            else:
                setattr(keep, merge_field.attribute, getattr(remove, merge_field.attribute))

            updated.append(merge_field.value)

        return updated

    def _reassign_references(self, keep_id: int, remove_id: int) -> Dict[str, int]:
        """
        Move every reference from the removed contact to the kept one.

        Runs inside the caller's transaction; never commits.
        """
        reassigned: Dict[str, int] = {}

        # A contact cannot be its own referrer
        self.session.query(Contact).filter(
            Contact.id == keep_id,
            Contact.referred_by_id == remove_id,
        ).update({Contact.referred_by_id: None}, synchronize_session=False)

        for relation in MERGE_RELATIONS:
            if relation.strategy is MergeStrategy.DEDUPE:
                reassigned[relation.name] = self._dedupe_join_rows(relation, keep_id, remove_id)
            else:
                reassigned[relation.name] = (
                    self.session.query(relation.model)
                    .filter(relation.contact_column == remove_id)
                    .update({relation.contact_column: keep_id}, synchronize_session=False)
                )

        return reassigned

    def _dedupe_join_rows(self, relation: RelationMerge, keep_id: int, remove_id: int) -> int:
        """
        Carry join rows over without violating the (contact, other) key.

        Rows whose other side is already linked to the kept contact are
        deleted; the remainder are re-pointed. Returns rows re-pointed.
        """
        already_linked = [
            row[0]
            for row in self.session.query(relation.other_column)
            .filter(relation.contact_column == keep_id)
            .all()
        ]

        if already_linked:
            self.session.query(relation.model).filter(
                relation.contact_column == remove_id,
                relation.other_column.in_(already_linked),
            ).delete(synchronize_session=False)

        return (
            self.session.query(relation.model)
            .filter(relation.contact_column == remove_id)
            .update({relation.contact_column: keep_id}, synchronize_session=False)
        )
