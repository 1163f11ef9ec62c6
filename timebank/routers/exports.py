from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timebank.database import get_db
from timebank.core.auth import get_current_user
from timebank.models.entry import Entry
from timebank.models.profile import Profile
from timebank.services.export import entries_to_csv
from timebank.services.normalize import current_month, month_bounds, parse_month

router = APIRouter(prefix="/exports", tags=["exports"])


@router.get("/entries.csv")
async def export_entries_csv(
    month: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    try:
        month_start = parse_month(month) if month else current_month()
    except ValueError as e:
        raise HTTPException(422, str(e))
    start, end = month_bounds(month_start)

    result = await db.execute(
        select(Entry, Profile.display_name, Profile.email)
        .join(Profile, Profile.id == Entry.contributor_id, isouter=True)
        .where(Entry.week_start >= start)
        .where(Entry.week_start < end)
        .order_by(Entry.week_start.desc(), Entry.created_at.desc())
    )
    content = entries_to_csv(result.all())

    label = month_start.strftime("%Y-%m")
    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="entries_{label}.csv"'},
    )
