"""
Collab Engine - SQLAlchemy ORM Models

Marketplace tables read by the matching and admin-intelligence services.
The schema itself is owned by the hosted database; these models only mirror
the columns the engine consumes.
"""
from datetime import datetime
from enum import Enum
from sqlalchemy import Column, String, Integer, Float, DateTime, Text, JSON, ForeignKey, Boolean
from ..database import Base


# =============================================================================
# STATUS ENUMS
# =============================================================================

class CampaignStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class BrandRole(str, Enum):
    AGENCY_ADMIN = "agency_admin"
    CAMPAIGN_MANAGER = "campaign_manager"
    FINANCE = "finance"


# =============================================================================
# BRAND SIDE
# =============================================================================

class BrandProfileDB(Base):
    """Brand (or agency) account profile."""
    __tablename__ = "brand_profiles"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    company_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    industry = Column(String(100), nullable=True)
    website = Column(String(255), nullable=True)
    company_size = Column(String(50), nullable=True)
    logo_url = Column(String(500), nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class BrandMembershipDB(Base):
    __tablename__ = "brand_memberships"

    id = Column(String(36), primary_key=True)
    brand_id = Column(String(36), ForeignKey("brand_profiles.id"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class BrandUserRoleDB(Base):
    __tablename__ = "brand_user_roles"

    id = Column(String(36), primary_key=True)
    brand_id = Column(String(36), ForeignKey("brand_profiles.id"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False)
    role = Column(String(50), nullable=False)  # BrandRole value
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class TeamInvitationDB(Base):
    __tablename__ = "team_invitations"

    id = Column(String(36), primary_key=True)
    brand_id = Column(String(36), ForeignKey("brand_profiles.id"), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class CampaignDB(Base):
    """Brand-declared campaign. Matching hints live beside the budget columns."""
    __tablename__ = "campaigns"

    id = Column(String(36), primary_key=True)
    brand_id = Column(String(36), ForeignKey("brand_profiles.id"), nullable=True, index=True)
    brand_user_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    status = Column(String(20), default=CampaignStatus.DRAFT.value, index=True)

    # Budget
    total_budget = Column(Float, default=0.0)
    allocated_budget = Column(Float, default=0.0)
    commission = Column(Float, default=0.0)
    influencer_count = Column(Integer, default=0)
    timeline_start = Column(DateTime, nullable=True)
    timeline_end = Column(DateTime, nullable=True)

    # Matching attributes
    categories = Column(JSON, default=list)
    socials = Column(JSON, default=list)
    content_type = Column(JSON, default=list)
    is_regulated = Column(Boolean, default=False)
    requires_vehicle = Column(Boolean, default=False)
    camera_requirement = Column(String(20), nullable=True)
    collaboration_length = Column(String(20), nullable=True)
    creative_control_level = Column(String(20), nullable=True)

    # Display
    image_url = Column(String(500), nullable=True)
    language = Column(String(20), nullable=True)
    country = Column(String(100), nullable=True)
    country_flag = Column(String(10), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class CampaignInvitationDB(Base):
    __tablename__ = "campaign_invitations"

    id = Column(String(36), primary_key=True)
    campaign_id = Column(String(36), ForeignKey("campaigns.id"), nullable=False, index=True)
    creator_user_id = Column(String(36), nullable=False, index=True)
    status = Column(String(20), default=InvitationStatus.PENDING.value)
    offered_payout = Column(Float, default=0.0)
    base_payout = Column(Float, default=0.0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class CampaignNegotiationDB(Base):
    __tablename__ = "campaign_negotiations"

    id = Column(String(36), primary_key=True)
    invitation_id = Column(String(36), ForeignKey("campaign_invitations.id"), nullable=False, index=True)
    status = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


# =============================================================================
# CREATOR SIDE
# =============================================================================

class CreatorProfileDB(Base):
    __tablename__ = "creator_profiles"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    username = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    website = Column(String(255), nullable=True)
    avatar_url = Column(String(500), nullable=True)
    pricing_enabled = Column(Boolean, default=False)
    pricing_min = Column(Float, nullable=True)
    pricing_max = Column(Float, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class BrandFitDataDB(Base):
    """Brand-Fit survey answers, one opaque JSON blob per creator."""
    __tablename__ = "brand_fit_data"

    user_id = Column(String(36), primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class LinkedAccountDB(Base):
    __tablename__ = "linked_accounts"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    platform = Column(String(50), nullable=False)
    username = Column(String(100), nullable=True)
    connected = Column(Boolean, default=True)
    verified = Column(Boolean, default=False)
    followers = Column(Integer, default=0)
    engagement = Column(Float, default=0.0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class CampaignHistoryDB(Base):
    __tablename__ = "campaign_history"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False, unique=True, index=True)
    total_completed = Column(Integer, default=0)
    total_started = Column(Integer, default=0)
    on_time_deliveries = Column(Integer, default=0)
    revisions_requested = Column(Integer, default=0)
    total_earnings = Column(Float, default=0.0)
    avg_response_time = Column(Float, nullable=True)  # hours
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class SurveyDB(Base):
    __tablename__ = "surveys"

    id = Column(String(64), primary_key=True)
    title = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class SurveyResponseDB(Base):
    __tablename__ = "survey_responses"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    survey_id = Column(String(64), ForeignKey("surveys.id"), nullable=False)
    answers = Column(JSON, nullable=False, default=dict)  # {question_id: answer}
    created_at = Column(DateTime, default=datetime.utcnow)


# =============================================================================
# PLATFORM AUDIT
# =============================================================================

class AuditLogDB(Base):
    __tablename__ = "audit_logs"

    id = Column(String(36), primary_key=True)
    action = Column(String(100), nullable=True)
    entity_type = Column(String(100), nullable=True)
    entity_id = Column(String(36), nullable=True)
    user_id = Column(String(36), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)


class SystemHealthLogDB(Base):
    __tablename__ = "system_health_logs"

    id = Column(String(36), primary_key=True)
    severity = Column(String(20), nullable=False)  # info, warning, error
    message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
