"""
Database Models (SQLAlchemy ORM)
================================
Schema for the clinical report store.

Tables:
    - Report: One ingested document, its extracted text and summary state

Design Principles:
    - UUID primary keys assigned by the store
    - Enum types for constrained values
    - Timestamps on all tables
    - Version counter for optimistic concurrency on updates
"""

from sqlalchemy import (
    Column, String, Integer, Text, DateTime, Enum, Index, CheckConstraint, Uuid
)
from sqlalchemy.sql import func
import uuid
import enum

from database.connection import Base


# =============================================================================
# ENUM DEFINITIONS
# =============================================================================

class SourceType(str, enum.Enum):
    """Declared modality of a submission"""
    TEXT = "text"
    IMAGE = "image"
    PDF = "pdf"


class ReportStatus(str, enum.Enum):
    """Summary state of a report"""
    PENDING = "pending"
    COMPLETED = "completed"


# =============================================================================
# MODELS
# =============================================================================

class Report(Base):
    """
    Persisted record of one ingested document and its processing outcome.

    A row only exists once extraction succeeded, so original_text is never
    empty. Every update bumps `version`; SQLAlchemy emits
    `UPDATE ... WHERE version = :old` and raises StaleDataError when another
    writer got there first.
    """
    __tablename__ = "reports"

    # Primary Key
    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique report identifier"
    )

    # Ownership
    owner_id = Column(
        String(64),
        index=True,
        comment="Identity of the submitting principal"
    )

    # Content
    source_type = Column(
        Enum(SourceType, name="source_type_enum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        comment="Declared modality, fixed at creation"
    )
    original_text = Column(
        Text,
        nullable=False,
        comment="Normalized text produced by extraction"
    )
    summary_text = Column(
        Text,
        comment="Summary from the most recent successful attempt"
    )

    # Processing Status
    status = Column(
        Enum(ReportStatus, name="report_status_enum", values_callable=lambda e: [m.value for m in e]),
        default=ReportStatus.PENDING,
        nullable=False,
        index=True,
        comment="pending: no up-to-date summary, completed: summary is current"
    )

    version = Column(
        Integer,
        nullable=False,
        comment="Optimistic concurrency counter"
    )

    # Timestamps
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="Creation timestamp"
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        comment="Last update timestamp"
    )

    __mapper_args__ = {"version_id_col": version}

    # Indexes
    __table_args__ = (
        Index("idx_reports_created", "created_at"),
        CheckConstraint("length(original_text) > 0", name="ck_reports_original_text_not_empty"),
    )

    def __repr__(self):
        return f"<Report(id={self.id}, source_type={self.source_type}, status={self.status})>"
