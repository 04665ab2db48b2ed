"""initial schema

Revision ID: a1c4e2f9d7b3
Revises:
Create Date: 2026-10-18 09:12:44.301562

Creates the contact, company, activity and join tables. New local
databases may also rely on create_all() (see rolodex/main.py lifespan) and
then be stamped with:

    alembic stamp head
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'a1c4e2f9d7b3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'companies',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(300), nullable=False),
        sa.Column('industry', sa.String(200)),
        sa.Column('website', sa.String(500)),
        sa.Column('hq_location', sa.String(200)),
        sa.Column('notes', sa.Text()),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
    )
    op.create_index('ix_companies_name', 'companies', ['name'], unique=True)

    op.create_table(
        'contacts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(300), nullable=False),
        sa.Column('title', sa.String(300)),
        sa.Column('email', sa.String(300)),
        sa.Column('additional_emails', sa.JSON()),
        sa.Column('phone', sa.String(100)),
        sa.Column('linkedin_url', sa.String(500)),
        sa.Column('location', sa.String(200)),
        sa.Column('photo_url', sa.String(500)),
        sa.Column('photo_file', sa.String(300)),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id')),
        sa.Column('company_name', sa.String(300)),
        sa.Column('ecosystem', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('flagged', sa.Boolean(), nullable=False),
        sa.Column('how_connected', sa.Text()),
        sa.Column('personal_details', sa.Text()),
        sa.Column('role_description', sa.Text()),
        sa.Column('mutual_connections', sa.Text()),
        sa.Column('where_found', sa.Text()),
        sa.Column('open_questions', sa.Text()),
        sa.Column('notes', sa.Text()),
        sa.Column('referred_by_id', sa.Integer(), sa.ForeignKey('contacts.id')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
        sa.CheckConstraint("name <> ''", name='ck_contacts_name_not_empty'),
    )
    op.create_index('ix_contacts_name', 'contacts', ['name'])
    op.create_index('ix_contacts_email', 'contacts', ['email'])
    op.create_index('ix_contacts_linkedin_url', 'contacts', ['linkedin_url'])
    op.create_index('ix_contacts_company_id', 'contacts', ['company_id'])
    op.create_index('ix_contacts_referred_by_id', 'contacts', ['referred_by_id'])

    op.create_table(
        'contact_companies',
        sa.Column('contact_id', sa.Integer(), sa.ForeignKey('contacts.id'), primary_key=True),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id'), primary_key=True),
        sa.Column('is_current', sa.Boolean(), nullable=False),
    )
    op.create_index('ix_contact_companies_company', 'contact_companies', ['company_id'])

    op.create_table(
        'conversations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('contact_id', sa.Integer(), sa.ForeignKey('contacts.id'), nullable=False),
        sa.Column('date', sa.String(10), nullable=False),
        sa.Column('date_precision', sa.String(10), nullable=False),
        sa.Column('type', sa.String(30), nullable=False),
        sa.Column('summary', sa.Text()),
        sa.Column('notes', sa.Text()),
        sa.Column('next_steps', sa.Text()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_conversations_contact_id', 'conversations', ['contact_id'])

    op.create_table(
        'actions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('type', sa.String(30), nullable=False),
        sa.Column('priority', sa.String(10), nullable=False),
        sa.Column('due_date', sa.String(10)),
        sa.Column('completed', sa.Boolean(), nullable=False),
        sa.Column('contact_id', sa.Integer(), sa.ForeignKey('contacts.id')),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_actions_contact_id', 'actions', ['contact_id'])
    op.create_index('ix_actions_company_id', 'actions', ['company_id'])

    op.create_table(
        'relationships',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('from_contact_id', sa.Integer(), sa.ForeignKey('contacts.id'), nullable=False),
        sa.Column('to_contact_id', sa.Integer(), sa.ForeignKey('contacts.id'), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('notes', sa.Text()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_relationships_from_contact_id', 'relationships', ['from_contact_id'])
    op.create_index('ix_relationships_to_contact_id', 'relationships', ['to_contact_id'])

    op.create_table(
        'links',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('url', sa.String(1000), nullable=False),
        sa.Column('title', sa.String(500)),
        sa.Column('description', sa.Text()),
        sa.Column('contact_id', sa.Integer(), sa.ForeignKey('contacts.id')),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id')),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_links_contact_id', 'links', ['contact_id'])
    op.create_index('ix_links_company_id', 'links', ['company_id'])

    op.create_table(
        'prep_notes',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('contact_id', sa.Integer(), sa.ForeignKey('contacts.id'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('url', sa.String(1000)),
        sa.Column('url_title', sa.String(500)),
        sa.Column('date', sa.String(10)),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_prep_notes_contact_id', 'prep_notes', ['contact_id'])

    op.create_table(
        'employment_history',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('contact_id', sa.Integer(), sa.ForeignKey('contacts.id'), nullable=False),
        sa.Column('company_id', sa.Integer(), sa.ForeignKey('companies.id')),
        sa.Column('company_name', sa.String(300)),
        sa.Column('title', sa.String(300)),
        sa.Column('start_date', sa.Date()),
        sa.Column('end_date', sa.Date()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_employment_history_contact_id', 'employment_history', ['contact_id'])

    op.create_table(
        'conversation_contacts',
        sa.Column('conversation_id', sa.Integer(), sa.ForeignKey('conversations.id'), primary_key=True),
        sa.Column('contact_id', sa.Integer(), sa.ForeignKey('contacts.id'), primary_key=True),
    )

    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
    )

    op.create_table(
        'contact_tags',
        sa.Column('contact_id', sa.Integer(), sa.ForeignKey('contacts.id'), primary_key=True),
        sa.Column('tag_id', sa.Integer(), sa.ForeignKey('tags.id'), primary_key=True),
    )

    op.create_table(
        'ideas',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('description', sa.Text()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'idea_contacts',
        sa.Column('idea_id', sa.Integer(), sa.ForeignKey('ideas.id'), primary_key=True),
        sa.Column('contact_id', sa.Integer(), sa.ForeignKey('contacts.id'), primary_key=True),
    )


def downgrade() -> None:
    for table in (
        'idea_contacts', 'ideas', 'contact_tags', 'tags', 'conversation_contacts',
        'employment_history', 'prep_notes', 'links', 'relationships', 'actions',
        'conversations', 'contact_companies', 'contacts', 'companies',
    ):
        op.drop_table(table)
