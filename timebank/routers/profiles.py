from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from timebank.database import get_db
from timebank.core.auth import get_current_admin, get_current_user
from timebank.models.profile import Guild, Profile
from timebank.schemas.entry import RecipientOption
from timebank.schemas.user import GuildCreate, GuildResponse, ProfileResponse, ProfileUpdate

router = APIRouter(tags=["profiles"])


@router.get("/profiles", response_model=List[ProfileResponse])
async def list_profiles(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    result = await db.execute(select(Profile).order_by(Profile.display_name))
    return result.scalars().all()


@router.patch("/profiles/{profile_id}", response_model=ProfileResponse)
async def update_profile(
    profile_id: str,
    profile_in: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    result = await db.execute(select(Profile).where(Profile.id == profile_id))
    profile = result.scalar_one_or_none()
    if not profile:
        raise HTTPException(404, "Profile not found")
    if profile.id == admin.id and (profile_in.active is False or profile_in.role == "member"):
        raise HTTPException(400, "Admins cannot revoke their own access")

    if profile_in.active is not None:
        profile.active = profile_in.active
    if profile_in.role is not None:
        profile.role = profile_in.role
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    return profile


@router.get("/guilds", response_model=List[GuildResponse])
async def list_guilds(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    result = await db.execute(select(Guild).order_by(Guild.name))
    return result.scalars().all()


@router.post("/guilds", response_model=GuildResponse)
async def create_guild(
    guild_in: GuildCreate,
    db: AsyncSession = Depends(get_db),
    admin: Profile = Depends(get_current_admin)
):
    guild = Guild(name=guild_in.name, description=guild_in.description)
    try:
        db.add(guild)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(409, "Guild name already exists")
    await db.refresh(guild)
    return guild


@router.get("/recipients/options", response_model=List[RecipientOption])
async def get_recipient_options(
    db: AsyncSession = Depends(get_db),
    current_user: Profile = Depends(get_current_user)
):
    users = await db.execute(
        select(Profile.id, Profile.display_name)
        .where(Profile.active.is_(True))
        .order_by(Profile.display_name)
    )
    guilds = await db.execute(select(Guild.id, Guild.name).order_by(Guild.name))
    return (
        [RecipientOption(id=row.id, name=row.display_name, type="user") for row in users.all()]
        + [RecipientOption(id=row.id, name=row.name, type="guild") for row in guilds.all()]
    )
