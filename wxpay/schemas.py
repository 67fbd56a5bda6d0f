from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class OAuthAccessTokenResponse(BaseModel):
    """Body of ``sns/oauth2/access_token``; errors come back with errcode/errmsg instead."""

    model_config = ConfigDict(extra="allow")

    openid: str | None = None
    access_token: str | None = None
    expires_in: int | None = None
    refresh_token: str | None = None
    scope: str | None = None
    unionid: str | None = None
    errcode: int | None = None
    errmsg: str | None = None
