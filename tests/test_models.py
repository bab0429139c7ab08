from sqlmodel import Session

from app.db.models import PluginStoreRow, User, UserField
from app.infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository


def test_model_timestamps_are_timezone_aware():
    field = UserField(name="hbp_birth_day", description="Birth day")
    assert field.created_at.tzinfo is not None
    assert field.updated_at.tzinfo is not None
    assert PluginStoreRow(plugin_name="hbp_birthdate", key="user_field_ids").updated_at.tzinfo is not None
    assert User(username="alice").created_at.tzinfo is not None


def test_user_repository_writes(engine):
    with Session(engine) as session:
        repo = SqlUserRepository(session)
        user = repo.create("alice", {"attribute:1": "15"})
        repo.set_attributes(user.id, {"attribute:1": "16", "attribute:2": "06"})
        stored = repo.get_by_id(user.id)
    assert stored.username == "alice"
    assert stored.attributes == {"attribute:1": "16", "attribute:2": "06"}
    assert stored.created_at is not None
