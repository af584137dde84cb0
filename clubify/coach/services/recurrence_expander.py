import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, time
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from clubify.core.dates import iter_dates, js_weekday, local_today
from clubify.core.exceptions import ValidationError
from clubify.core.logging_utils import log_business_event
from clubify.coach.crud.training import (
    delete_recurrences,
    delete_session,
    delete_sessions,
    find_pattern_recurrence_ids,
    get_recurrence,
    insert_recurrences,
    insert_sessions,
)
from clubify.coach.models import TrainingSession
from clubify.coach.schemas.training import SessionDraft

logger = logging.getLogger(__name__)


@dataclass
class ExpansionResult:
    recurrence_ids: List[int]
    sessions: List[SessionDraft]
    pattern_id: str


@dataclass
class DeletionResult:
    sessions_deleted: int = 0
    recurrences_deleted: int = 0
    recurrence_ids: List[int] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.recurrence_ids:
            return "Recurring pattern and all future sessions deleted successfully"
        return "Training session deleted successfully"


class RecurringSessionExpander:
    """Turns a weekly pattern into recurrence rows and dated sessions"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def expand(
        self,
        team_id: int,
        days_of_week: Sequence[int],
        start_time: time,
        duration_minutes: int,
        generate_until: date,
        location: Optional[str] = None,
        notes: Optional[str] = None,
        today: Optional[date] = None,
    ) -> ExpansionResult:
        """
        Create one recurrence row per entry of days_of_week (0=Sunday) and a
        session for every matching date from today through generate_until.

        Each session links to the recurrence created for the first
        occurrence of its weekday in days_of_week.
        """
        days_of_week = list(days_of_week)
        self._validate(days_of_week, duration_minutes)

        location = location or None
        notes = notes or None
        pattern_id = uuid.uuid4().hex
        today = today or local_today()

        recurrences = await insert_recurrences(
            self.session,
            [
                {
                    "team_id": team_id,
                    "day_of_week": day,
                    "start_time": start_time,
                    "duration_minutes": duration_minutes,
                    "location": location,
                    "notes": notes,
                    "pattern_id": pattern_id,
                }
                for day in days_of_week
            ],
        )
        recurrence_ids = [r.id for r in recurrences]

        drafts = []
        for session_date in iter_dates(today, generate_until):
            weekday = js_weekday(session_date)
            if weekday not in days_of_week:
                continue
            drafts.append(
                SessionDraft(
                    team_id=team_id,
                    session_date=session_date,
                    start_time=start_time,
                    duration_minutes=duration_minutes,
                    location=location,
                    notes=notes,
                    recurrence_id=recurrence_ids[days_of_week.index(weekday)],
                )
            )

        await insert_sessions(self.session, [d.model_dump() for d in drafts])
        await self.session.commit()

        log_business_event(
            "training_pattern_created",
            "team",
            team_id,
            {
                "pattern_id": pattern_id,
                "days_of_week": days_of_week,
                "recurrences": len(recurrence_ids),
                "sessions": len(drafts),
                "generate_until": generate_until.isoformat(),
            },
        )

        return ExpansionResult(
            recurrence_ids=recurrence_ids, sessions=drafts, pattern_id=pattern_id
        )

    async def delete_training_session(
        self, training: TrainingSession, mode: str = "single"
    ) -> DeletionResult:
        """
        Delete a session.

        mode="all_future" on a session created from a pattern deletes every
        session of the whole pattern dated on or after this one, then the
        pattern's recurrence rows. Otherwise only this session goes.
        """
        if mode not in ("single", "all_future"):
            raise ValidationError("delete_mode must be 'single' or 'all_future'")

        session_id = training.id
        from_date = training.session_date

        if mode == "all_future" and training.recurrence_id:
            recurrence = await get_recurrence(self.session, training.recurrence_id)
            result = DeletionResult()

            if recurrence is not None:
                group_ids = await find_pattern_recurrence_ids(self.session, recurrence)
                result.recurrence_ids = group_ids
                result.sessions_deleted = await delete_sessions(
                    self.session, group_ids, from_date
                )
                result.recurrences_deleted = await delete_recurrences(
                    self.session, group_ids
                )
            else:
                logger.warning(
                    f"Recurrence {training.recurrence_id} of session {session_id} is gone, deleting session only"
                )
                result.sessions_deleted = await delete_session(self.session, session_id)

            await self.session.commit()

            log_business_event(
                "training_pattern_deleted",
                "training_session",
                session_id,
                {
                    "recurrence_ids": result.recurrence_ids,
                    "sessions_deleted": result.sessions_deleted,
                    "from_date": from_date.isoformat(),
                },
            )
            return result

        deleted = await delete_session(self.session, session_id)
        await self.session.commit()
        return DeletionResult(sessions_deleted=deleted)

    def _validate(self, days_of_week: List[int], duration_minutes: int):
        if not days_of_week:
            raise ValidationError("At least one day of week is required")
        if any(day < 0 or day > 6 for day in days_of_week):
            raise ValidationError(
                "Days of week must be between 0 (Sunday) and 6 (Saturday)"
            )
        if duration_minutes <= 0:
            raise ValidationError("Duration must be greater than 0")
