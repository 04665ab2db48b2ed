"""
SQLAlchemy models for the relationship-management tables.

Core Tables:
- companies: Organisations contacts work for
- contacts: Master contact records (the records being deduplicated)
- contact_companies: Additional current/former companies of a contact

Activity Tables (one contact FK each, re-pointed on merge):
- conversations, actions, links, prep_notes, employment_history
- relationships: Directed contact-to-contact edges (two contact FKs)

Join Tables (composite primary keys, deduplicated on merge):
- conversation_contacts: Contacts discussed in a conversation
- contact_tags / tags
- idea_contacts / ideas
"""
import enum

from sqlalchemy import (
    Boolean, CheckConstraint, Column, Date, DateTime, Enum, ForeignKey,
    Index, Integer, JSON, String, Text,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class Ecosystem(str, enum.Enum):
    """Which part of the network a contact belongs to."""
    RECRUITER = "RECRUITER"
    ROLODEX = "ROLODEX"
    TARGET = "TARGET"
    INFLUENCER = "INFLUENCER"
    ACADEMIA = "ACADEMIA"
    INTRO_SOURCE = "INTRO_SOURCE"


class ContactStatus(str, enum.Enum):
    """Outreach status of a contact."""
    NEW = "NEW"
    CONNECTED = "CONNECTED"
    AWAITING_RESPONSE = "AWAITING_RESPONSE"
    FOLLOW_UP_NEEDED = "FOLLOW_UP_NEEDED"
    WARM_LEAD = "WARM_LEAD"
    ON_HOLD = "ON_HOLD"
    CLOSED = "CLOSED"


class CompanyStatus(str, enum.Enum):
    RESEARCHING = "RESEARCHING"
    ACTIVE_TARGET = "ACTIVE_TARGET"
    CONNECTED = "CONNECTED"
    ON_HOLD = "ON_HOLD"
    CLOSED = "CLOSED"


# =============================================================================
# CORE TABLES
# =============================================================================

class Company(Base):
    """Organisation a contact works (or worked) for."""
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(300), nullable=False, unique=True, index=True)
    industry = Column(String(200))
    website = Column(String(500))
    hq_location = Column(String(200))
    notes = Column(Text)
    status = Column(
        Enum(CompanyStatus, native_enum=False, length=20),
        nullable=False,
        default=CompanyStatus.RESEARCHING,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<Company {self.name}>"


class Contact(Base):
    """
    Master contact records.

    Ids are autoincrement and never reused, so a merged-away id can never
    resurface as a different person.
    """
    __tablename__ = "contacts"
    __table_args__ = (
        CheckConstraint("name <> ''", name="ck_contacts_name_not_empty"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Identity
    name = Column(String(300), nullable=False, index=True)
    title = Column(String(300))

    # Contact
    email = Column(String(300), index=True)
    additional_emails = Column(JSON)  # ["alt@example.com", ...]
    phone = Column(String(100))
    linkedin_url = Column(String(500), index=True)
    location = Column(String(200))
    photo_url = Column(String(500))
    photo_file = Column(String(300))

    # Company
    company_id = Column(Integer, ForeignKey("companies.id"), index=True)
    company_name = Column(String(300))  # Free text when no Company row exists

    # Classification
    ecosystem = Column(
        Enum(Ecosystem, native_enum=False, length=20),
        nullable=False,
        default=Ecosystem.ROLODEX,
    )
    status = Column(
        Enum(ContactStatus, native_enum=False, length=20),
        nullable=False,
        default=ContactStatus.NEW,
    )
    flagged = Column(Boolean, nullable=False, default=False)

    # Free text
    how_connected = Column(Text)
    personal_details = Column(Text)
    role_description = Column(Text)
    mutual_connections = Column(Text)
    where_found = Column(Text)
    open_questions = Column(Text)
    notes = Column(Text)

    # Referral
    referred_by_id = Column(Integer, ForeignKey("contacts.id"), index=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    company = relationship("Company", lazy="joined")
    company_links = relationship(
        "ContactCompany",
        viewonly=True,
        order_by="ContactCompany.company_id",
    )

    def __repr__(self):
        return f"<Contact {self.id} {self.name}>"


class ContactCompany(Base):
    """Additional company references of a contact, tagged current/former."""
    __tablename__ = "contact_companies"

    contact_id = Column(Integer, ForeignKey("contacts.id"), primary_key=True)
    company_id = Column(Integer, ForeignKey("companies.id"), primary_key=True)
    is_current = Column(Boolean, nullable=False, default=True)

    company = relationship("Company", lazy="joined")

    __table_args__ = (
        Index("ix_contact_companies_company", "company_id"),
    )


# =============================================================================
# ACTIVITY TABLES
# =============================================================================

class Conversation(Base):
    """A logged conversation with a contact."""
    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=False, index=True)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    date_precision = Column(String(10), nullable=False, default="DAY")
    type = Column(String(30), nullable=False, default="OTHER")
    summary = Column(Text)
    notes = Column(Text)
    next_steps = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Action(Base):
    """A to-do item, optionally tied to a contact."""
    __tablename__ = "actions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False)
    description = Column(Text)
    type = Column(String(30), nullable=False, default="FOLLOW_UP")
    priority = Column(String(10), nullable=False, default="MEDIUM")
    due_date = Column(String(10))
    completed = Column(Boolean, nullable=False, default=False)
    contact_id = Column(Integer, ForeignKey("contacts.id"), index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class ContactRelationship(Base):
    """Directed edge between two contacts (e.g. 'introduced by', 'reports to')."""
    __tablename__ = "relationships"

    id = Column(Integer, primary_key=True, autoincrement=True)
    from_contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=False, index=True)
    to_contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    notes = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Link(Base):
    """A saved URL attached to a contact."""
    __tablename__ = "links"

    id = Column(Integer, primary_key=True, autoincrement=True)
    url = Column(String(1000), nullable=False)
    title = Column(String(500))
    description = Column(Text)
    contact_id = Column(Integer, ForeignKey("contacts.id"), index=True)
    company_id = Column(Integer, ForeignKey("companies.id"), index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class PrepNote(Base):
    """Meeting-preparation note for a contact."""
    __tablename__ = "prep_notes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    url = Column(String(1000))
    url_title = Column(String(500))
    date = Column(String(10))

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class EmploymentHistory(Base):
    """Past and present roles of a contact."""
    __tablename__ = "employment_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    contact_id = Column(Integer, ForeignKey("contacts.id"), nullable=False, index=True)
    company_id = Column(Integer, ForeignKey("companies.id"))
    company_name = Column(String(300))
    title = Column(String(300))
    start_date = Column(Date)
    end_date = Column(Date)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


# =============================================================================
# JOIN TABLES
# =============================================================================

class ConversationContact(Base):
    """Contacts discussed in a conversation."""
    __tablename__ = "conversation_contacts"

    conversation_id = Column(Integer, ForeignKey("conversations.id"), primary_key=True)
    contact_id = Column(Integer, ForeignKey("contacts.id"), primary_key=True)


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)


class ContactTag(Base):
    __tablename__ = "contact_tags"

    contact_id = Column(Integer, ForeignKey("contacts.id"), primary_key=True)
    tag_id = Column(Integer, ForeignKey("tags.id"), primary_key=True)


class Idea(Base):
    """A business idea, linked to the contacts it involves."""
    __tablename__ = "ideas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(500), nullable=False)
    description = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now())


class IdeaContact(Base):
    __tablename__ = "idea_contacts"

    idea_id = Column(Integer, ForeignKey("ideas.id"), primary_key=True)
    contact_id = Column(Integer, ForeignKey("contacts.id"), primary_key=True)
