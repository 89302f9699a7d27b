from sqlalchemy import (
    Column,
    String,
    Boolean,
    ForeignKey,
    DateTime,
    Text,
    Integer,
    JSON,
    Uuid,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import declarative_base
import uuid
from datetime import datetime

Base = declarative_base()


class HackathonTable(Base):
    __tablename__ = "hackathon"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(Text, nullable=False, unique=True)
    host_id = Column(Uuid)
    start_date = Column(DateTime)
    end_date = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)


class TeamTable(Base):
    __tablename__ = "teams"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # no foreign key: teams may be scoped to a hackathon this service does not store
    hackathon_id = Column(Uuid, nullable=False, index=True)
    leader_id = Column(Uuid, nullable=False)
    name = Column(Text, nullable=False)
    bio = Column(Text)
    roles_required = Column(JSON, nullable=False, default=list)
    is_public = Column(Boolean, nullable=False, default=True)
    project_name = Column(Text)
    problem_statement = Column(Text)
    project_link = Column(Text)
    photo = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (Index("ix_teams_hackathon_leader", "hackathon_id", "leader_id"),)


class TeamMemberTable(Base):
    __tablename__ = "team_members"
    team_id = Column(Uuid, ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Uuid, primary_key=True)
    hackathon_id = Column(Uuid, nullable=False)
    role = Column(String)
    joined_at = Column(DateTime, default=datetime.utcnow)

    # one team per user per hackathon, leaders included
    __table_args__ = (UniqueConstraint("hackathon_id", "user_id", name="uq_member_hackathon_user"),)


class TeamJoinRequestTable(Base):
    __tablename__ = "team_join_requests"
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    team_id = Column(Uuid, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, nullable=False)
    role = Column(String)
    status = Column(String, nullable=False, default="PENDING")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("team_id", "user_id", name="uq_join_request_team_user"),
        Index("ix_join_requests_status", "status"),
    )


class TeamAttachmentTable(Base):
    __tablename__ = "team_attachments"
    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Uuid, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    label = Column(String, nullable=False)
    url = Column(Text, nullable=False)
    filename = Column(Text)
    uploaded_at = Column(DateTime, default=datetime.utcnow)
