"""
SQLAlchemy ORM Models.

Directory tables (users, gatherings, gylds, candidates) are read by the
recipient and template data sources; the workflow and delivery tables are
written by the service.
"""
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base

from gyld_sdk.utils.datetime import utc_now

Base = declarative_base()


# =============================================================================
# DIRECTORY
# =============================================================================

class UserModel(Base):
    """User account with contact data."""

    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    email = Column(String(255), nullable=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    push_enabled = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)


class UserPushTokenModel(Base):
    """Device push token registered by a user."""

    __tablename__ = "user_push_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    push_token = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "push_token", name="uq_user_push_tokens_user_token"),
    )


class GatheringModel(Base):
    """A community gathering (event)."""

    __tablename__ = "gatherings"

    id = Column(String(64), primary_key=True)
    title = Column(String(255), nullable=True)
    starts_at = Column(DateTime(timezone=True), nullable=True)
    location = Column(String(255), nullable=True)


class GatheringRsvpModel(Base):
    """A user's RSVP answer (yes / no / maybe) to a gathering."""

    __tablename__ = "gathering_rsvps"

    gathering_id = Column(String(64), ForeignKey("gatherings.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    status = Column(String(16), nullable=False, default="yes")
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    __table_args__ = (
        Index("ix_gathering_rsvps_gathering_status", "gathering_id", "status"),
    )


class GyldModel(Base):
    """A community group."""

    __tablename__ = "gylds"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=True)


class GyldMemberModel(Base):
    """Group membership."""

    __tablename__ = "gyld_members"

    gyld_id = Column(String(64), ForeignKey("gylds.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    joined_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)


class CandidateModel(Base):
    """A membership candidate."""

    __tablename__ = "candidates"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=True)
    status = Column(String(64), nullable=True)


# =============================================================================
# CONTENT
# =============================================================================

class ContentTemplateModel(Base):
    """
    Notification content template.

    ``channel`` NULL marks the channel-agnostic variant of a key.
    """

    __tablename__ = "content_templates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content_key = Column(String(128), nullable=False, index=True)
    channel = Column(String(16), nullable=True)
    primary_text = Column(Text, nullable=True)
    secondary_text = Column(Text, nullable=True)
    tertiary_text = Column(Text, nullable=True)
    default_variables = Column(JSON, nullable=True)

    __table_args__ = (
        UniqueConstraint("content_key", "channel", name="uq_content_templates_key_channel"),
    )


# =============================================================================
# WORKFLOWS
# =============================================================================

class WorkflowTypeModel(Base):
    """Workflow type label (orchestration_both, push, email, ...)."""

    __tablename__ = "workflow_types"

    id = Column(Integer, primary_key=True, autoincrement=True)
    label = Column(String(64), nullable=False, unique=True)


class PlannedWorkflowModel(Base):
    """Scheduled or executed notification."""

    __tablename__ = "planned_workflows"

    id = Column(String(36), primary_key=True)
    workflow_type_id = Column(Integer, ForeignKey("workflow_types.id"), nullable=True)
    kind = Column(String(64), nullable=False)
    status = Column(String(16), nullable=False, default="pending", index=True)
    scheduled_for = Column(DateTime(timezone=True), nullable=True)
    gathering_id = Column(String(64), nullable=True, index=True)
    candidate_id = Column(String(64), nullable=True, index=True)
    description = Column(Text, nullable=True)
    payload = Column(JSON, nullable=False)
    result = Column(JSON, nullable=True)
    error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False)

    __table_args__ = (
        Index("ix_planned_workflows_status_scheduled", "status", "scheduled_for"),
    )


class NotificationSentModel(Base):
    """Audit row: one per channel and status of a dispatch."""

    __tablename__ = "notifications_sent"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workflow_type_id = Column(Integer, ForeignKey("workflow_types.id"), nullable=True)
    execution_id = Column(String(64), nullable=True, index=True)
    channel = Column(String(16), nullable=False)
    status = Column(String(16), nullable=False)
    to_address = Column(JSON, nullable=False)
    failure_reasons = Column(JSON, nullable=True)
    subject = Column(Text, nullable=True)
    body1 = Column(Text, nullable=True)
    send_date = Column(DateTime(timezone=True), default=utc_now, nullable=False)
