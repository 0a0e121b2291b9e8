"""Whitelist administration routes (admin only)."""

from datetime import datetime

from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter
from pydantic import BaseModel, Field

from idgate.domain.auth.command.whitelist import (
    AddWhitelistEmails,
    AddWhitelistEmailsHandler,
    RemoveWhitelistEmails,
    RemoveWhitelistEmailsHandler,
)
from idgate.domain.auth.query.whitelist import ListWhitelist, ListWhitelistHandler

router = APIRouter(prefix="/whitelist", tags=["Whitelist"], route_class=DishkaRoute)


class EmailsRequest(BaseModel):
    """Comma separated string or list of addresses."""

    emails: str | list[str]


class WhitelistEntryResponse(BaseModel):
    email: str
    createdAt: datetime


class WhitelistResponse(BaseModel):
    emails: list[WhitelistEntryResponse]


class AddResponse(BaseModel):
    added: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)


class RemoveResponse(BaseModel):
    removed: list[str] = Field(default_factory=list)
    notFound: list[str] = Field(default_factory=list)


@router.get("", response_model=WhitelistResponse)
async def list_whitelist(handler: FromDishka[ListWhitelistHandler]) -> WhitelistResponse:
    """List whitelisted addresses sorted by email."""
    result = await handler.run(ListWhitelist())
    return WhitelistResponse(
        emails=[
            WhitelistEntryResponse(email=e.email, createdAt=e.created_at) for e in result.entries
        ]
    )


@router.post("", response_model=AddResponse)
async def add_whitelist(
    body: EmailsRequest, handler: FromDishka[AddWhitelistEmailsHandler]
) -> AddResponse:
    """Add addresses; invalid or already present ones are skipped."""
    result = await handler.run(AddWhitelistEmails(emails=body.emails))
    return AddResponse(added=result.added, skipped=result.skipped)


@router.delete("", response_model=RemoveResponse)
async def remove_whitelist(
    body: EmailsRequest, handler: FromDishka[RemoveWhitelistEmailsHandler]
) -> RemoveResponse:
    """Remove addresses, reporting those that were not present."""
    result = await handler.run(RemoveWhitelistEmails(emails=body.emails))
    return RemoveResponse(removed=result.removed, notFound=result.not_found)
