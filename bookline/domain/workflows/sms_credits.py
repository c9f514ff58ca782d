"""
SMS credit ledger.
Tracks SMS credits per team (and per user charged to a team) for each UTC month,
decides who pays for a message and enforces the team's monthly limit.
"""

import asyncio
import logging
from typing import Optional

from sqlalchemy import and_, exists, or_
from sqlalchemy.orm import Session, joinedload

from ...config import IS_SELF_HOSTED, SMS_CREDITS_PER_MEMBER
from ...email_service import send_sms_limit_almost_reached_emails, send_sms_limit_reached_emails
from ...enums import MembershipRole, SmsCreditAllocationType, WorkflowMethods
from ...i18n import get_translation
from ...models import Membership, Team
from ...models_workflows import SmsCreditCount, Workflow, WorkflowReminder, WorkflowStep
from ...shared.dates import end_of_month, start_of_month
from . import twilio_provider as twilio
from .actions import is_attendee_action
from .country_credits import DEFAULT_CREDITS_PER_SMS, SMS_COUNTRY_CREDITS

logger = logging.getLogger(__name__)

WARNING_THRESHOLD = 0.8


async def get_credits_for_number(phone_number: str) -> int:
    """Credits one SMS to this number costs"""
    if IS_SELF_HOSTED:
        return 0

    country_code = await twilio.get_country_code(phone_number)

    return SMS_COUNTRY_CREDITS.get(country_code.upper(), DEFAULT_CREDITS_PER_SMS)


def _find_credit_count(
    db: Session, team_id: int, user_id: Optional[int]
) -> Optional[SmsCreditCount]:
    return (
        db.query(SmsCreditCount)
        .filter(
            SmsCreditCount.team_id == team_id,
            SmsCreditCount.user_id == user_id if user_id else SmsCreditCount.user_id.is_(None),
            SmsCreditCount.month == start_of_month(),
        )
        .first()
    )


def _increment_credit_count(
    db: Session, team_id: int, user_id: Optional[int], credits: int
) -> SmsCreditCount:
    """Add credits to this month's row, creating it on first use"""
    credit_count = _find_credit_count(db, team_id, user_id)
    if credit_count:
        credit_count.credits = SmsCreditCount.credits + credits
    else:
        credit_count = SmsCreditCount(
            team_id=team_id,
            user_id=user_id,
            credits=credits,
            month=start_of_month(),
        )
        db.add(credit_count)
    db.commit()
    db.refresh(credit_count)
    return credit_count


def _owners_and_admins(members: list[Membership], default_locale: str) -> list[dict]:
    return [
        {
            "email": member.user.email,
            "name": member.user.name,
            "t": get_translation(member.user.locale or default_locale, "common"),
        }
        for member in members
        if member.role in (MembershipRole.OWNER.value, MembershipRole.ADMIN.value)
    ]


async def _notify_owners_and_admins(send_emails, team: Team, accepted_members: list[Membership]) -> None:
    try:
        await send_emails({"id": team.id, "name": team.name}, _owners_and_admins(accepted_members, "en"))
    except Exception as e:
        logger.error(f"❌ Failed to send SMS credit emails for team {team.id}: {e}")


def get_team_id_to_be_charged(
    db: Session, user_id: Optional[int] = None, team_id: Optional[int] = None
) -> Optional[int]:
    """
    Team that pays for the next SMS.

    A team workflow charges its own team unless the team hit its limit this month.
    A personal workflow charges one of the user's teams (see get_paying_team_id).
    """
    if team_id:
        team_credit_count = _find_credit_count(db, team_id, None)
        if not team_credit_count or not team_credit_count.limit_reached:
            return team_id
    elif user_id:
        return get_paying_team_id(db, user_id)
    return None


async def add_credits(
    db: Session, phone_number: str, team_id: int, user_id: Optional[int] = None
) -> dict:
    """
    Book the credits of one SMS against the team (and the user, for personal workflows).

    Returns {"isFree": bool}; isFree is False once the team is past its free credits
    and pays overage.
    """
    # TODO: managed event types should pass the parent team id here as well
    credits = await get_credits_for_number(phone_number)

    if user_id:
        _increment_credit_count(db, team_id, user_id, credits)

    team_credit_count = _increment_credit_count(db, team_id, None, credits)

    team: Team = team_credit_count.team
    accepted_members = [member for member in team.members if member.accepted]
    free_credits = len(accepted_members) * SMS_CREDITS_PER_MEMBER

    if team_credit_count.credits > free_credits:
        if team.sms_overage_limit == 0:
            logger.warning(
                f"⚠️ Team {team.id} reached its SMS limit ({team_credit_count.credits}/{free_credits})"
            )
            team_credit_count.limit_reached = True
            db.commit()

            # No credits left: attendee SMS reminders become emails
            await cancel_scheduled_sms_and_schedule_emails(db, team_id=team_id)

            await _notify_owners_and_admins(
                send_sms_limit_reached_emails, team, accepted_members
            )

            # The SMS that crossed the limit is still sent
            return {"isFree": True}
        return {"isFree": False}

    if team.sms_overage_limit == 0:
        warning_limit_reached = team_credit_count.credits > free_credits * WARNING_THRESHOLD
    else:
        warning_limit_reached = (
            team_credit_count.overage_charges > team.sms_overage_limit * WARNING_THRESHOLD
        )

    if warning_limit_reached and not team_credit_count.warning_sent:
        logger.info(f"📉 Team {team.id} passed the SMS credit warning threshold")
        team_credit_count.warning_sent = True
        db.commit()

        await _notify_owners_and_admins(
            send_sms_limit_almost_reached_emails, team, accepted_members
        )

    return {"isFree": True}


def get_paying_team_id(db: Session, user_id: int) -> Optional[int]:
    """
    Pick the team that pays for a personal workflow SMS.

    Only teams that share credits with members and are not limit-reached this month
    qualify; among those with credits left for the user, the team the user has spent
    the fewest credits with pays.
    """
    month = start_of_month()
    team_limit_reached = exists().where(
        and_(
            SmsCreditCount.team_id == Team.id,
            SmsCreditCount.user_id.is_(None),
            SmsCreditCount.month == month,
            SmsCreditCount.limit_reached.is_(True),
        )
    )

    memberships = (
        db.query(Membership)
        .join(Team, Membership.team_id == Team.id)
        .options(joinedload(Membership.team))
        .filter(
            Membership.user_id == user_id,
            Team.sms_credit_allocation_type != SmsCreditAllocationType.NONE.value,
            ~team_limit_reached,
        )
        .order_by(Membership.id)
        .all()
    )

    candidates: list[tuple[Team, Optional[int]]] = []
    for membership in memberships:
        team = membership.team
        user_credit_count = _find_credit_count(db, team.id, user_id)
        used = user_credit_count.credits if user_credit_count else None
        if team.sms_credit_allocation_type == SmsCreditAllocationType.ALL.value or (
            (team.sms_credit_allocation_value or 0) > (used or 0)
        ):
            candidates.append((team, used))

    if not candidates:
        return None

    lowest_credits = min(used or 0 for _, used in candidates)

    for team, used in candidates:
        if used is None or used == lowest_credits:
            return team.id
    return None


async def cancel_scheduled_sms_and_schedule_emails(
    db: Session, team_id: Optional[int] = None, user_id: Optional[int] = None
) -> int:
    """
    Cancel this month's scheduled SMS/WhatsApp reminders of a team's (or user's) workflows.
    Reminders for attendees are turned into unscheduled email reminders.
    Returns the number of reminders processed.
    """
    query = (
        db.query(WorkflowReminder)
        .join(WorkflowStep, WorkflowReminder.workflow_step_id == WorkflowStep.id)
        .join(Workflow, WorkflowStep.workflow_id == Workflow.id)
        .options(joinedload(WorkflowReminder.workflow_step))
        .filter(
            or_(
                WorkflowReminder.method == WorkflowMethods.SMS.value,
                WorkflowReminder.method == WorkflowMethods.WHATSAPP.value,
            ),
            WorkflowReminder.scheduled_date >= start_of_month(),
            WorkflowReminder.scheduled_date <= end_of_month(),
        )
    )
    if user_id:
        query = query.filter(Workflow.user_id == user_id)
    if team_id:
        query = query.filter(Workflow.team_id == team_id)

    reminders = query.all()

    async def _cancel(reminder: WorkflowReminder) -> None:
        if reminder.reference_id:
            try:
                await twilio.cancel_sms(reminder.reference_id)
            except twilio.TwilioError as e:
                logger.error(f"❌ Could not cancel SMS {reminder.reference_id}: {e}")
        if reminder.workflow_step and is_attendee_action(reminder.workflow_step.action):
            reminder.method = WorkflowMethods.EMAIL.value
            reminder.reference_id = None
            reminder.scheduled = False

    await asyncio.gather(*(_cancel(reminder) for reminder in reminders))
    db.commit()

    logger.info(
        f"🔁 Cancelled {len(reminders)} SMS reminders (team={team_id}, user={user_id})"
    )
    return len(reminders)
