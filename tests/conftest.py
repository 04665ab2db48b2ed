"""
Pytest configuration and shared fixtures.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rolodex.core.config import reset_settings
from rolodex.core.database import enable_sqlite_foreign_keys, reset_engine
from rolodex.core.models import (
    Base, Company, Contact, ContactCompany, ContactRelationship, ContactTag,
    Conversation, ConversationContact, Idea, IdeaContact, Tag,
)


@pytest.fixture(scope="function")
def clean_env(monkeypatch):
    """
    Clean environment for testing.

    Removes all app-related env vars to ensure clean state.
    """
    env_vars = [
        "DATABASE_URL",
        "LOG_LEVEL",
        "SIMILAR_NAME_THRESHOLD",
        "SAME_COMPANY_NAME_THRESHOLD",
        "NORMALIZED_NAME_SCORE",
        "DUPLICATE_SCAN_WARN_THRESHOLD",
    ]
    for var in env_vars:
        monkeypatch.delenv(var, raising=False)

    reset_settings()

    yield

    reset_settings()


@pytest.fixture(scope="function")
def test_db(monkeypatch):
    """
    Create an in-memory SQLite database for testing.

    Fresh database for each test. One shared connection (StaticPool) so the
    TestClient thread sees the same database; foreign keys are enforced.
    """
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    reset_settings()
    reset_engine()

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()
        reset_engine()
        reset_settings()


# =============================================================================
# Contact Fixtures
# =============================================================================

def make_contact(db, name, **kwargs):
    """Insert a contact and return it refreshed."""
    contact = Contact(name=name, **kwargs)
    db.add(contact)
    db.commit()
    db.refresh(contact)
    return contact


@pytest.fixture
def sample_company(test_db):
    company = Company(name="Acme Robotics", industry="Robotics")
    test_db.add(company)
    test_db.commit()
    test_db.refresh(company)
    return company


@pytest.fixture
def sample_contacts(test_db, sample_company):
    """
    A small network with one obvious duplicate of each kind.

    ids: 1 Katie M. Tucker, 2 Katie Tucker, 3 Jonathan Smith (Acme),
    4 John Smith (Acme), 5 Priya Raman, 6 Marcus Oyelaran (same email as 5),
    7 Wen Li
    """
    contacts = [
        Contact(name="Katie M. Tucker", email="katie@tucker.dev", phone="555-0100"),
        Contact(name="Katie Tucker", email="ktucker@example.com", phone="555-0199"),
        Contact(name="Jonathan Smith", company_id=sample_company.id),
        Contact(name="John Smith", company_name="acme robotics"),
        Contact(name="Priya Raman", email="shared@x.com"),
        Contact(name="Marcus Oyelaran", email="SHARED@x.com"),
        Contact(name="Wen Li", linkedin_url="https://linkedin.com/in/wenli"),
    ]
    for contact in contacts:
        test_db.add(contact)
    test_db.commit()
    for contact in contacts:
        test_db.refresh(contact)
    return contacts


@pytest.fixture
def merge_pair(test_db, sample_company):
    """
    Two records of the same person plus activity on both sides.

    keep (lower id) and remove share a tag, an idea, a conversation and a
    company link, so every join table has a row that would collide.
    """
    keep = make_contact(
        test_db, "Dana Whitfield",
        email="dana@old.com", additional_emails=["d.whitfield@gmail.com"],
        phone="555-1111", title="Engineer", location="Austin",
    )
    remove = make_contact(
        test_db, "Dana K. Whitfield",
        email="dana@new.com", additional_emails=["D.Whitfield@gmail.com"],
        phone="555-2222", title="Staff Engineer", location="Denver",
        notes="Met at PyCon", flagged=True,
    )
    other = make_contact(test_db, "Sam Ortiz", referred_by_id=remove.id)

    shared_tag = Tag(name="investor")
    own_tag = Tag(name="mentor")
    shared_idea = Idea(title="Robotics newsletter")
    test_db.add_all([shared_tag, own_tag, shared_idea])
    test_db.commit()

    conv_keep = Conversation(contact_id=keep.id, date="2024-01-10", summary="Intro call")
    conv_remove = Conversation(contact_id=remove.id, date="2024-02-02", summary="Follow-up")
    test_db.add_all([conv_keep, conv_remove])
    test_db.commit()

    test_db.add_all([
        ContactTag(contact_id=keep.id, tag_id=shared_tag.id),
        ContactTag(contact_id=remove.id, tag_id=shared_tag.id),
        ContactTag(contact_id=remove.id, tag_id=own_tag.id),
        IdeaContact(idea_id=shared_idea.id, contact_id=keep.id),
        IdeaContact(idea_id=shared_idea.id, contact_id=remove.id),
        ConversationContact(conversation_id=conv_keep.id, contact_id=keep.id),
        ConversationContact(conversation_id=conv_keep.id, contact_id=remove.id),
        ContactCompany(contact_id=keep.id, company_id=sample_company.id),
        ContactCompany(contact_id=remove.id, company_id=sample_company.id, is_current=False),
        ContactRelationship(from_contact_id=keep.id, to_contact_id=remove.id, type="same_person"),
        ContactRelationship(from_contact_id=other.id, to_contact_id=remove.id, type="colleague"),
    ])
    test_db.commit()

    return {
        "keep": keep,
        "remove": remove,
        "other": other,
        "shared_tag": shared_tag,
        "own_tag": own_tag,
        "idea": shared_idea,
        "conv_keep": conv_keep,
        "conv_remove": conv_remove,
    }
