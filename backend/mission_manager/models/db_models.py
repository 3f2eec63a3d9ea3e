"""
Mission Manager - SQLAlchemy ORM Models
Relational models for users and missions
"""
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, DateTime, Text, JSON, Enum as SQLEnum
from ..database import Base


# =============================================================================
# ENUMS
# =============================================================================

class Role(str, Enum):
    """User roles."""
    ADMIN = "ADMIN"
    EMPLOYEE = "EMPLOYEE"


class Department(str, Enum):
    """Organizational departments a user can belong to."""
    SALES = "SALES"
    TECHNICAL = "TECHNICAL"
    SUPPORT = "SUPPORT"
    FINANCE = "FINANCE"
    MANAGEMENT = "MANAGEMENT"


class MissionStatus(str, Enum):
    """Mission lifecycle status. COMPLETED is terminal."""
    NEW = "NEW"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class DelegationStatus(str, Enum):
    """Status of the current delegation cycle (None when no cycle is open)."""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


# =============================================================================
# TABLES
# =============================================================================

class UserDB(Base):
    """User account. Missions reference users by id only."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)  # UUID
    name = Column(String(100), unique=True, nullable=False, index=True)  # Login name
    password_hash = Column(String(255), nullable=False)
    role = Column(SQLEnum(Role), nullable=False, default=Role.EMPLOYEE)
    department = Column(SQLEnum(Department), nullable=True)
    phone = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self) -> dict:
        """Public representation - never includes the credential."""
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role.value if self.role else None,
            "department": self.department.value if self.department else None,
            "phone": self.phone,
        }


class MissionDB(Base):
    """
    Mission aggregate.

    checklist, checkliststate and reports are JSON documents. They are
    always replaced wholesale on write; JSON columns do not track in-place
    mutation.
    """
    __tablename__ = "missions"

    id = Column(String(36), primary_key=True)  # UUID
    subject = Column(String(255), nullable=False)
    location = Column(String(255), nullable=False)
    starttime = Column(String(40), nullable=False)  # ISO timestamp as sent by the client
    endtime = Column(String(40), nullable=False)
    status = Column(SQLEnum(MissionStatus), nullable=False, default=MissionStatus.NEW)

    createdby = Column(String(36), nullable=False, index=True)
    assignedto = Column(String(36), nullable=False, index=True)
    createdat = Column(DateTime, default=datetime.utcnow)

    # Format: [{"category": "...", "steps": ["...", ...]}]
    checklist = Column(JSON, nullable=False, default=list)
    # Format: {"category": {"step": bool}}
    checkliststate = Column(JSON, nullable=False, default=dict)
    # Format: [MissionReport.to_dict(), ...] in chronological order
    reports = Column(JSON, nullable=False, default=list)

    # ==========================================================================
    # DELEGATION - one cycle at a time, kept until cleared by the delegator
    # ==========================================================================
    delegated_by = Column(String(36), nullable=True)
    delegation_target = Column(String(36), nullable=True, index=True)
    delegation_reason = Column(Text, nullable=True)
    delegation_status = Column(SQLEnum(DelegationStatus), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "subject": self.subject,
            "location": self.location,
            "starttime": self.starttime,
            "endtime": self.endtime,
            "status": self.status.value if self.status else None,
            "createdby": self.createdby,
            "assignedto": self.assignedto,
            "createdat": self.createdat.isoformat() if self.createdat else None,
            "checklist": self.checklist or [],
            "checkliststate": self.checkliststate or {},
            "reports": self.reports or [],
            "delegated_by": self.delegated_by,
            "delegation_target": self.delegation_target,
            "delegation_reason": self.delegation_reason,
            "delegation_status": self.delegation_status.value if self.delegation_status else None,
        }
