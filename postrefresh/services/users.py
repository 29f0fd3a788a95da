from __future__ import annotations

import asyncpg  # type: ignore[import-untyped]
from asyncpg import exceptions as pg_exc

INSERT_USER_QUERY = """
insert into public.users (id, nombre, chilean)
values ($1, $2, $3)
on conflict (id) do update
set nombre = $2
"""


class UserUpsertError(Exception):
    """Raised when a user row cannot be written."""


async def upsert_user(conn: asyncpg.Connection, user_id: int | str, user_name: str | None) -> None:
    # users.chilean is deprecated and always written as null
    is_chilean = None
    try:
        await conn.execute(INSERT_USER_QUERY, user_id, user_name, is_chilean)
    except (pg_exc.IntegrityConstraintViolationError, pg_exc.InvalidTextRepresentationError, asyncpg.DataError) as exc:
        raise UserUpsertError(str(exc)) from exc
