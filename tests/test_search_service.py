import pytest
from fastapi import HTTPException

from official.models import utcnow
from official.schemas.relationships import RelationshipStatus
from official.services.relationship_service import form_relationship
from official.services.search_service import search_user_by_phone
from tests.conftest import make_user

ALICE = "+15553330001"
BOB = "+15553330002"


async def test_unknown_number(db):
    result = await search_user_by_phone("1 555 333 0009", db)

    assert result.phone == "+15553330009"
    assert result.exists is False
    assert result.relationship_status == "Unknown"
    assert result.name is None


async def test_unverified_user_is_unknown(db):
    await make_user(db, ALICE, verified=False, name="Alice")

    result = await search_user_by_phone(ALICE, db)
    assert result.exists is False
    assert result.relationship_status == "Unknown"


async def test_verified_user_without_relationship_is_single(db):
    await make_user(db, ALICE, name="Alice")

    result = await search_user_by_phone(ALICE, db)
    assert result.exists is True
    assert result.relationship_status == "Single"
    assert result.name == "Alice"


@pytest.mark.parametrize("status, label", [
    (RelationshipStatus.DATING, "Dating"),
    (RelationshipStatus.FRIENDS_WITH_BENEFITS, "Friends with Benefits"),
    (RelationshipStatus.ON_A_BREAK, "On a Break"),
    (RelationshipStatus.OPEN_RELATIONSHIP, "Open Relationship"),
])
async def test_active_relationship_label(db, status, label):
    await make_user(db, ALICE)
    relationship, _ = await form_relationship(db, ALICE, BOB)
    relationship.status = status
    await db.commit()

    result = await search_user_by_phone(ALICE, db)
    assert result.relationship_status == label


async def test_ended_relationship_means_single(db):
    await make_user(db, ALICE)
    relationship, _ = await form_relationship(db, ALICE, BOB)
    relationship.end_date = utcnow()
    await db.commit()

    result = await search_user_by_phone(ALICE, db)
    assert result.relationship_status == "Single"


@pytest.mark.parametrize("phone, detail", [
    ("", "Phone number is required"),
    ("   ", "Phone number is required"),
    ("12-34", "Invalid phone number format"),
])
async def test_rejects_bad_input(db, phone, detail):
    with pytest.raises(HTTPException) as exc:
        await search_user_by_phone(phone, db)
    assert exc.value.status_code == 400
    assert exc.value.detail == detail
