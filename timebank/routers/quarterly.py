from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from timebank.database import get_db
from timebank.core.auth import get_current_user
from timebank.models.profile import Profile
from timebank.models.quarterly import QuarterlyAction, QuarterlyReflection
from timebank.schemas.quarterly import QuarterlyActionResponse, QuarterlyReflectionCreate, QuarterlySummary
from timebank.services.dashboard import QUARTERLY_ACTION_LIMIT, get_latest_quarterly_summary

router = APIRouter(prefix="/quarterly", tags=["quarterly"])


@router.post("", response_model=QuarterlySummary)
async def create_reflection(
    reflection_in: QuarterlyReflectionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    reflection = QuarterlyReflection(
        user_id=current_user.id,
        quarter_start=reflection_in.quarter_start,
        quarter_end=reflection_in.quarter_end,
        achievement_rate=reflection_in.achievement_rate,
        avg_peer_rating=reflection_in.avg_peer_rating,
        avg_goal_rating=reflection_in.avg_goal_rating,
    )
    db.add(reflection)
    await db.commit()
    await db.refresh(reflection)

    actions = [
        QuarterlyAction(
            quarterly_reflection_id=reflection.id,
            action_text=action.action_text,
            deadline=action.deadline,
        )
        for action in reflection_in.actions
    ]
    if actions:
        db.add_all(actions)
        await db.commit()

    summary = QuarterlySummary.model_validate(reflection)
    ordered = sorted(actions, key=lambda a: (a.deadline is None, a.deadline or reflection.quarter_end))
    summary.actions = [QuarterlyActionResponse.model_validate(a) for a in ordered[:QUARTERLY_ACTION_LIMIT]]
    return summary


@router.get("/latest", response_model=QuarterlySummary)
async def get_latest_reflection(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    summary = await get_latest_quarterly_summary(db, current_user.id)
    if not summary:
        raise HTTPException(404, "No quarterly reflection yet")
    return summary
