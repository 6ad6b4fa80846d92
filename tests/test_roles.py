import pytest

from feedback360.config import parse_id_list, settings
from feedback360.core.errors import BadRequestError, NotFoundError
from feedback360.services.roles import get_role_user_ids, get_user_role, set_user_role


def test_parse_id_list_strips_blanks():
    assert parse_id_list(" a, ,b ,,c") == {"a", "b", "c"}
    assert parse_id_list(None) == set()


async def test_roles_from_table(db_session, make_user):
    admin = await make_user(role="admin")
    supervisor = await make_user(role="supervisor")
    user = await make_user()

    roles = await get_role_user_ids(db_session)

    assert roles.admin_ids == {admin.id}
    assert roles.supervisor_ids == {supervisor.id}
    assert user.id not in roles.restricted_ids


async def test_env_overrides_are_merged(db_session, make_user, monkeypatch):
    user = await make_user()
    monkeypatch.setattr(settings, "SUPERVISOR_IDS", f"{user.id}, extra-id")

    roles = await get_role_user_ids(db_session)

    assert roles.supervisor_ids == {user.id, "extra-id"}
    assert await get_user_role(db_session, user.id) == "supervisor"


async def test_admin_wins_over_supervisor(db_session, make_user, monkeypatch):
    user = await make_user(role="supervisor")
    monkeypatch.setattr(settings, "ADMIN_IDS", user.id)

    assert await get_user_role(db_session, user.id) == "admin"


async def test_user_without_role_row_is_user(db_session, make_user):
    user = await make_user()
    assert await get_user_role(db_session, user.id) == "user"


async def test_set_user_role_upserts(db_session, make_user):
    user = await make_user(role="user")

    await set_user_role(db_session, user.id, "supervisor")
    assert await get_user_role(db_session, user.id) == "supervisor"

    with pytest.raises(BadRequestError):
        await set_user_role(db_session, user.id, "owner")
    with pytest.raises(NotFoundError):
        await set_user_role(db_session, "missing", "admin")
