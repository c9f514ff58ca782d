"""
Workflow Models
Database models for workflow reminders and the monthly SMS credit ledger
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base
from .enums import WorkflowMethods
from .models import generate_uid


class Workflow(Base):
    __tablename__ = "workflows"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=True)

    steps = relationship("WorkflowStep", back_populates="workflow", cascade="all, delete-orphan")


class WorkflowStep(Base):
    __tablename__ = "workflow_steps"

    id = Column(Integer, primary_key=True, index=True)
    workflow_id = Column(Integer, ForeignKey("workflows.id"), nullable=False)
    step_number = Column(Integer, default=1, nullable=False)
    action = Column(String(50), nullable=False)

    workflow = relationship("Workflow", back_populates="steps")


class WorkflowReminder(Base):
    """A scheduled notification tied to a booking workflow step"""

    __tablename__ = "workflow_reminders"

    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(String(36), unique=True, default=generate_uid)
    booking_uid = Column(String(255), ForeignKey("bookings.uid"), nullable=True, index=True)
    workflow_step_id = Column(Integer, ForeignKey("workflow_steps.id"), nullable=True)
    method = Column(String(20), default=WorkflowMethods.EMAIL.value, nullable=False)
    scheduled_date = Column(DateTime, nullable=False)  # UTC
    # Provider message id (Twilio SID) once the message was handed over
    reference_id = Column(String(255), nullable=True)
    scheduled = Column(Boolean, default=False, nullable=False)
    cancelled = Column(Boolean, default=False, nullable=False)

    workflow_step = relationship("WorkflowStep")


class SmsCreditCount(Base):
    """
    SMS credits used in a calendar month (UTC).
    One row per team (user_id NULL) plus one per user charged to that team.
    """

    __tablename__ = "sms_credit_counts"

    id = Column(Integer, primary_key=True, index=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    month = Column(DateTime, nullable=False)  # first instant of the UTC month
    credits = Column(Integer, default=0, nullable=False)
    overage_charges = Column(Integer, default=0, nullable=False)  # cents
    limit_reached = Column(Boolean, default=False, nullable=False)
    warning_sent = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    team = relationship("Team", back_populates="sms_credit_counts")
    user = relationship("User")
