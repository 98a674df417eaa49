"""Initial schema and seed data for orgdesk

Revision ID: 20261019_000000
Revises: None
Create Date: 2026-10-19 00:00:00.000000

This is the initial migration that creates all necessary tables and seeds default data
for the orgdesk service. This includes:
- Profiles, roles, role permissions, specializations and invites
- Documents, shares and the document activity log
- Calendar events, event types, per-event grants, work locations and coach hour logs
- Channels, messages, attachments and notifications
- Product catalog
- Web analytics sessions, page views and events
- Businesses, their four-week cleaning rota, crew members and daily cleaning instances
- The four built-in roles, their role-based permission grants and default event types

Revision format: YYYYMMDD_HHMMSS_description

"""

import json
from datetime import datetime, timezone
from typing import Sequence, Union
from uuid import uuid4

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261019_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID = sa.String(36)


def upgrade() -> None:
    """Create all tables and seed initial data."""

    # Profiles and roles
    op.create_table(
        "roles",
        sa.Column("id", sa.String(32), nullable=False),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
        sa.Index("ix_roles_role", "role"),
    )

    op.create_table(
        "profiles",
        sa.Column("id", ID, nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("display_name", sa.String(), nullable=True),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("avatar_url", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=False, server_default="user0x"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_profiles_email", "email"),
        sa.Index("ix_profiles_role", "role"),
        sa.Index("ix_profiles_created_at", "created_at"),
    )

    op.create_table(
        "role_permissions",
        sa.Column("id", ID, nullable=False),
        sa.Column("role_id", sa.String(32), nullable=True),
        sa.Column("user_id", ID, sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("permission_type", sa.String(32), nullable=False, server_default="role_based"),
        sa.Column("permission_level", sa.String(32), nullable=False, server_default="view"),
        sa.Column("specific_actions", JSONB(), nullable=True, server_default="[]"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_role_permissions_role_id", "role_id"),
        sa.Index("ix_role_permissions_user_id", "user_id"),
    )

    op.create_table(
        "specializations",
        sa.Column("id", ID, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("role", sa.String(), nullable=True),
        sa.Column("color", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_specializations_role", "role"),
    )

    op.create_table(
        "user_specializations",
        sa.Column("id", ID, nullable=False),
        sa.Column("user_id", ID, sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("specialization_id", ID, sa.ForeignKey("specializations.id"), nullable=False),
        sa.Column("assigned_by", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "specialization_id", name="uq_user_specialization"),
        sa.Index("ix_user_specializations_user_id", "user_id"),
        sa.Index("ix_user_specializations_specialization_id", "specialization_id"),
    )

    op.create_table(
        "invites",
        sa.Column("code", ID, nullable=False),
        sa.Column("role_id", sa.String(32), sa.ForeignKey("roles.id"), nullable=False),
        sa.Column("inviter_id", ID, sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("max_uses", sa.Integer(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("code"),
        sa.Index("ix_invites_role_id", "role_id"),
        sa.Index("ix_invites_created_at", "created_at"),
    )

    op.create_table(
        "invite_specializations",
        sa.Column("id", ID, nullable=False),
        sa.Column("invite_code", ID, sa.ForeignKey("invites.code"), nullable=False),
        sa.Column("specialization_id", ID, sa.ForeignKey("specializations.id"), nullable=False),
        sa.Column("created_by", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_invite_specializations_invite_code", "invite_code"),
    )

    # Documents
    op.create_table(
        "documents",
        sa.Column("id", ID, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("mime_type", sa.String(), nullable=True),
        sa.Column("size", sa.BigInteger(), nullable=True),
        sa.Column("path", sa.Text(), nullable=False, server_default="/"),
        sa.Column("parent_path", sa.Text(), nullable=True),
        sa.Column("storage_path", sa.Text(), nullable=True),
        sa.Column("uploaded_by", ID, sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tags", JSONB(), nullable=True, server_default="[]"),
        sa.Column("is_favorite", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_shared", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_documents_name", "name"),
        sa.Index("ix_documents_path", "path"),
        sa.Index("ix_documents_parent_path", "parent_path"),
        sa.Index("ix_documents_uploaded_by", "uploaded_by"),
        sa.Index("ix_documents_created_at", "created_at"),
        sa.Index("ix_documents_deleted_at", "deleted_at"),
    )

    op.create_table(
        "document_shares",
        sa.Column("id", ID, nullable=False),
        sa.Column("document_id", ID, sa.ForeignKey("documents.id"), nullable=False),
        sa.Column("shared_with_user_id", ID, sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("shared_with_role", sa.String(), nullable=True),
        sa.Column("permission_level", sa.String(16), nullable=False),
        sa.Column("shared_by", ID, sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_document_shares_document_id", "document_id"),
        sa.Index("ix_document_shares_shared_with_user_id", "shared_with_user_id"),
        sa.Index("ix_document_shares_shared_with_role", "shared_with_role"),
    )

    op.create_table(
        "document_activity",
        sa.Column("id", ID, nullable=False),
        sa.Column("document_id", ID, sa.ForeignKey("documents.id"), nullable=False),
        sa.Column("user_id", ID, sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("action", sa.String(32), nullable=False),
        sa.Column("details", JSONB(), nullable=True, server_default="{}"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_document_activity_document_id", "document_id"),
        sa.Index("ix_document_activity_user_id", "user_id"),
        sa.Index("ix_document_activity_created_at", "created_at"),
    )

    # Calendar
    op.create_table(
        "event_types",
        sa.Column("id", ID, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("color", sa.String(16), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("visible_to_admins", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("visible_to_coaches", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("visible_to_clients", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "calendar_events",
        sa.Column("id", ID, nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("event_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.String(8), nullable=False),
        sa.Column("end_time", sa.String(8), nullable=False),
        sa.Column("event_type_id", ID, sa.ForeignKey("event_types.id"), nullable=True),
        sa.Column("client_id", ID, sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("coach_id", ID, sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("created_by_id", ID, sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="scheduled"),
        sa.Column("priority", sa.String(16), nullable=False, server_default="medium"),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_calendar_events_event_date", "event_date"),
        sa.Index("ix_calendar_events_event_type_id", "event_type_id"),
        sa.Index("ix_calendar_events_client_id", "client_id"),
        sa.Index("ix_calendar_events_coach_id", "coach_id"),
    )

    op.create_table(
        "calendar_permissions",
        sa.Column("id", ID, nullable=False),
        sa.Column("event_id", ID, sa.ForeignKey("calendar_events.id"), nullable=False),
        sa.Column("user_id", ID, sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("permission_level", sa.String(16), nullable=False, server_default="view"),
        sa.Column("specific_actions", JSONB(), nullable=True, server_default="[]"),
        sa.Column("granted_by", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_calendar_permissions_event_id", "event_id"),
        sa.Index("ix_calendar_permissions_user_id", "user_id"),
    )

    op.create_table(
        "work_locations",
        sa.Column("id", ID, nullable=False),
        sa.Column("location_name", sa.String(), nullable=False),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "coach_daily_reports",
        sa.Column("id", ID, nullable=False),
        sa.Column("coach_id", ID, sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("report_date", sa.Date(), nullable=False),
        sa.Column("hours_worked", sa.Float(), nullable=False),
        sa.Column("activity_type", sa.String(), nullable=False),
        sa.Column("work_location_id", ID, sa.ForeignKey("work_locations.id"), nullable=True),
        sa.Column("custom_location", sa.String(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", ID, sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("coach_id", "report_date", name="uq_coach_daily_report"),
        sa.Index("ix_coach_daily_reports_coach_id", "coach_id"),
        sa.Index("ix_coach_daily_reports_report_date", "report_date"),
    )

    # Messaging
    op.create_table(
        "channels",
        sa.Column("id", ID, nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("type", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_by", ID, sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_channels_type", "type"),
    )

    op.create_table(
        "channel_participants",
        sa.Column("id", ID, nullable=False),
        sa.Column("channel_id", ID, sa.ForeignKey("channels.id"), nullable=False),
        sa.Column("user_id", ID, sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("channel_id", "user_id", name="uq_channel_participant"),
        sa.Index("ix_channel_participants_channel_id", "channel_id"),
        sa.Index("ix_channel_participants_user_id", "user_id"),
    )

    op.create_table(
        "messages",
        sa.Column("id", ID, nullable=False),
        sa.Column("channel_id", ID, sa.ForeignKey("channels.id"), nullable=False),
        sa.Column("sender_id", ID, sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_messages_channel_id", "channel_id"),
        sa.Index("ix_messages_sender_id", "sender_id"),
        sa.Index("ix_messages_created_at", "created_at"),
    )

    op.create_table(
        "message_attachments",
        sa.Column("id", ID, nullable=False),
        sa.Column("message_id", ID, sa.ForeignKey("messages.id"), nullable=False),
        sa.Column("file_name", sa.String(), nullable=False),
        sa.Column("storage_path", sa.Text(), nullable=False),
        sa.Column("mime_type", sa.String(), nullable=True),
        sa.Column("size", sa.BigInteger(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_message_attachments_message_id", "message_id"),
    )

    op.create_table(
        "notifications",
        sa.Column("id", ID, nullable=False),
        sa.Column("sender_id", ID, sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("receiver_id", ID, sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("subtitle", sa.Text(), nullable=True),
        sa.Column("action_url", sa.String(), nullable=True),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("role_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("role_jobcoach", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("role_client", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("role_anonymous", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_notifications_sender_id", "sender_id"),
        sa.Index("ix_notifications_receiver_id", "receiver_id"),
        sa.Index("ix_notifications_created_at", "created_at"),
    )

    # Catalog
    op.create_table(
        "catalog_sections",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_catalog_sections_name", "name"),
    )

    op.create_table(
        "catalog_subsections",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("section_id", sa.Integer(), sa.ForeignKey("catalog_sections.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_catalog_subsections_section_id", "section_id"),
    )

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("subsection_id", sa.Integer(), sa.ForeignKey("catalog_subsections.id"), nullable=False),
        sa.Column("section_id", sa.Integer(), sa.ForeignKey("catalog_sections.id"), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_products_name", "name"),
        sa.Index("ix_products_subsection_id", "subsection_id"),
        sa.Index("ix_products_section_id", "section_id"),
    )

    # Analytics
    op.create_table(
        "analytics_sessions",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("device_type", sa.String(16), nullable=False, server_default="unknown"),
        sa.Column("utm_source", sa.String(), nullable=True),
        sa.Column("utm_medium", sa.String(), nullable=True),
        sa.Column("utm_campaign", sa.String(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_seen_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_analytics_sessions_device_type", "device_type"),
        sa.Index("ix_analytics_sessions_utm_campaign", "utm_campaign"),
        sa.Index("ix_analytics_sessions_started_at", "started_at"),
    )

    op.create_table(
        "page_views",
        sa.Column("id", ID, nullable=False),
        sa.Column("session_id", sa.String(64), sa.ForeignKey("analytics_sessions.id"), nullable=False),
        sa.Column("page_url", sa.Text(), nullable=False),
        sa.Column("page_title", sa.String(), nullable=True),
        sa.Column("referrer", sa.Text(), nullable=True),
        sa.Column("load_time", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_page_views_session_id", "session_id"),
        sa.Index("ix_page_views_created_at", "created_at"),
    )

    op.create_table(
        "analytics_events",
        sa.Column("id", ID, nullable=False),
        sa.Column("session_id", sa.String(64), sa.ForeignKey("analytics_sessions.id"), nullable=False),
        sa.Column("event_name", sa.String(), nullable=False),
        sa.Column("event_category", sa.String(), nullable=True),
        sa.Column("event_action", sa.String(), nullable=True),
        sa.Column("event_label", sa.String(), nullable=True),
        sa.Column("event_value", sa.Float(), nullable=True),
        sa.Column("page_url", sa.Text(), nullable=True),
        sa.Column("metadata", JSONB(), nullable=True, server_default="{}"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_analytics_events_session_id", "session_id"),
        sa.Index("ix_analytics_events_event_name", "event_name"),
        sa.Index("ix_analytics_events_created_at", "created_at"),
    )

    # Cleaning schedule
    op.create_table(
        "businesses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("business_name", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("before_open", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("business_notes", JSONB(), nullable=True, server_default="[]"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_businesses_business_name", "business_name"),
    )

    def weekday_columns():
        return [
            sa.Column(day, sa.Boolean(), nullable=False, server_default=sa.false())
            for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
        ]

    op.create_table(
        "schedules",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("business_id", sa.Integer(), sa.ForeignKey("businesses.id"), nullable=False),
        sa.Column("week", sa.Integer(), nullable=False),
        *weekday_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("business_id", "week", name="uq_schedule_business_week"),
        sa.Index("ix_schedules_business_id", "business_id"),
        sa.Index("ix_schedules_week", "week"),
    )

    op.create_table(
        "schedule_members",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        *weekday_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_schedule_members_name", "name"),
    )

    op.create_table(
        "schedule_jobs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("schedule_id", sa.Integer(), sa.ForeignKey("schedules.id"), nullable=False),
        sa.Column("job_type", sa.String(), nullable=False),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("schedule_members.id"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_schedule_jobs_schedule_id", "schedule_id"),
    )

    op.create_table(
        "daily_clean_instances",
        sa.Column("id", ID, nullable=False),
        sa.Column("instance_date", sa.Date(), nullable=False),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("day_name", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        sa.Column("created_by", ID, sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("instance_date", "week_number", "day_name", name="uq_daily_clean_instance"),
        sa.Index("ix_daily_clean_instances_instance_date", "instance_date"),
    )

    op.create_table(
        "daily_clean_items",
        sa.Column("id", ID, nullable=False),
        sa.Column("instance_id", ID, sa.ForeignKey("daily_clean_instances.id"), nullable=False),
        sa.Column("business_id", sa.Integer(), nullable=False),
        sa.Column("business_name", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("before_open", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("cleaned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("moved_to_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("marked_by", ID, sa.ForeignKey("profiles.id"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_daily_clean_items_instance_id", "instance_id"),
        sa.Index("ix_daily_clean_items_business_id", "business_id"),
        sa.Index("ix_daily_clean_items_status", "status"),
        sa.Index("ix_daily_clean_items_moved_to_date", "moved_to_date"),
    )

    # Seed the built-in roles
    now = datetime.now(timezone.utc)

    default_roles = [
        {"id": "admin1", "role": "admin", "slug": "admin", "description": "Full administrative access"},
        {"id": "coachx7", "role": "jobcoach", "slug": "jobcoach", "description": "Job coach logging hours for clients"},
        {"id": "client7x", "role": "client", "slug": "client", "description": "Client receiving coaching"},
        {"id": "user0x", "role": "user", "slug": "user", "description": "Signed-up user without a role"},
    ]

    for role in default_roles:
        op.execute(
            "INSERT INTO roles (id, role, slug, description, created_at) "
            f"VALUES ('{role['id']}', '{role['role']}', '{role['slug']}', '{role['description']}', '{now}')"
        )

    # Role-based grants mirroring the built-in permission table
    default_grants = [
        {"role_id": "admin1", "permission_level": "admin", "specific_actions": []},
        {"role_id": "coachx7", "permission_level": "view", "specific_actions": ["log_hours", "export_data"]},
        {"role_id": "client7x", "permission_level": "view", "specific_actions": ["export_data"]},
    ]

    for grant in default_grants:
        op.execute(
            "INSERT INTO role_permissions "
            "(id, role_id, user_id, permission_type, permission_level, specific_actions, is_active, created_at) "
            f"VALUES ('{uuid4()}', '{grant['role_id']}', NULL, 'role_based', '{grant['permission_level']}', "
            f"'{json.dumps(grant['specific_actions'])}', true, '{now}')"
        )

    # Seed default event types
    default_event_types = [
        {"name": "Meeting", "color": "#3B82F6", "admins": True, "coaches": True, "clients": True},
        {"name": "Coaching Session", "color": "#8B5CF6", "admins": True, "coaches": True, "clients": True},
        {"name": "Job Interview", "color": "#F59E0B", "admins": True, "coaches": True, "clients": True},
        {"name": "Internal", "color": "#6B7280", "admins": True, "coaches": False, "clients": False},
        {"name": "SLS", "color": "#EC4899", "admins": True, "coaches": False, "clients": True},
    ]

    for event_type in default_event_types:
        flags = ", ".join(
            "true" if event_type[key] else "false" for key in ("admins", "coaches", "clients")
        )
        op.execute(
            "INSERT INTO event_types "
            "(id, name, color, is_active, visible_to_admins, visible_to_coaches, visible_to_clients) "
            f"VALUES ('{uuid4()}', '{event_type['name']}', '{event_type['color']}', true, {flags})"
        )


def downgrade() -> None:
    """Drop all tables created in upgrade."""
    op.drop_table("daily_clean_items")
    op.drop_table("daily_clean_instances")
    op.drop_table("schedule_jobs")
    op.drop_table("schedule_members")
    op.drop_table("schedules")
    op.drop_table("businesses")
    op.drop_table("analytics_events")
    op.drop_table("page_views")
    op.drop_table("analytics_sessions")
    op.drop_table("products")
    op.drop_table("catalog_subsections")
    op.drop_table("catalog_sections")
    op.drop_table("notifications")
    op.drop_table("message_attachments")
    op.drop_table("messages")
    op.drop_table("channel_participants")
    op.drop_table("channels")
    op.drop_table("coach_daily_reports")
    op.drop_table("work_locations")
    op.drop_table("calendar_permissions")
    op.drop_table("calendar_events")
    op.drop_table("event_types")
    op.drop_table("document_activity")
    op.drop_table("document_shares")
    op.drop_table("documents")
    op.drop_table("invite_specializations")
    op.drop_table("invites")
    op.drop_table("user_specializations")
    op.drop_table("specializations")
    op.drop_table("role_permissions")
    op.drop_table("profiles")
    op.drop_table("roles")
