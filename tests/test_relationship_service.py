from datetime import datetime, timedelta, timezone

import pytest
from fastapi import HTTPException

from official.models import utcnow
from official.schemas.relationships import EditRelationshipRequest, RelationshipStatus
from official.services.relationship_service import (
    edit_relationship,
    find_active_relationship,
    form_relationship,
    get_user_relationships,
)
from official.services.user_service import get_user_by_phone
from tests.conftest import as_current_user, make_user

ALICE = "+15551110001"
BOB = "+15551110002"
CAROL = "+15551110003"


async def test_form_creates_dating_relationship(db):
    alice = await make_user(db, ALICE)
    before = utcnow()

    relationship, created = await form_relationship(db, ALICE, BOB)
    await db.commit()

    assert created
    assert relationship.status == RelationshipStatus.DATING
    assert relationship.end_date is None
    assert relationship.start_date >= before
    assert {u.phone for u in relationship.users} == {ALICE, BOB}

    bob = await get_user_by_phone(db, BOB)
    assert bob is not None
    assert bob.verified is False
    assert alice.verified is True


async def test_form_is_idempotent_in_either_order(db):
    first, created = await form_relationship(db, ALICE, BOB)
    await db.commit()
    second, created_again = await form_relationship(db, BOB, ALICE)

    assert created
    assert not created_again
    assert second.id == first.id


async def test_ended_relationship_is_not_reused(db):
    first, _ = await form_relationship(db, ALICE, BOB)
    first.end_date = utcnow()
    await db.commit()

    second, created = await form_relationship(db, ALICE, BOB)
    assert created
    assert second.id != first.id


async def test_form_rejects_same_person(db):
    with pytest.raises(HTTPException) as exc:
        await form_relationship(db, ALICE, "1 555 111 0001")
    assert exc.value.status_code == 400


async def test_active_relationship_lookup_is_pairwise(db):
    await form_relationship(db, ALICE, BOB)
    await db.commit()

    assert await find_active_relationship(db, ALICE, BOB) is not None
    assert await find_active_relationship(db, ALICE, CAROL) is None


async def test_list_relationships_for_participant(db):
    alice = await make_user(db, ALICE)
    await form_relationship(db, ALICE, BOB)
    await form_relationship(db, ALICE, CAROL)
    await db.commit()

    relationships = await get_user_relationships(db, as_current_user(alice))
    assert len(relationships) == 2


async def test_edit_by_participant(db):
    alice = await make_user(db, ALICE)
    relationship, _ = await form_relationship(db, ALICE, BOB)
    await db.commit()

    request = EditRelationshipRequest(relationship_id=relationship.id, status=RelationshipStatus.ENGAGED)
    updated = await edit_relationship(request, db, as_current_user(alice))

    assert updated.status == RelationshipStatus.ENGAGED


async def test_edit_by_outsider_forbidden(db):
    carol = await make_user(db, CAROL)
    relationship, _ = await form_relationship(db, ALICE, BOB)
    await db.commit()

    request = EditRelationshipRequest(relationship_id=relationship.id, status=RelationshipStatus.MARRIED)
    with pytest.raises(HTTPException) as exc:
        await edit_relationship(request, db, as_current_user(carol))
    assert exc.value.status_code == 403


async def test_edit_unknown_relationship(db):
    alice = await make_user(db, ALICE)

    request = EditRelationshipRequest(relationship_id="missing", status=RelationshipStatus.MARRIED)
    with pytest.raises(HTTPException) as exc:
        await edit_relationship(request, db, as_current_user(alice))
    assert exc.value.status_code == 404


async def test_edit_rejects_end_before_start(db):
    alice = await make_user(db, ALICE)
    relationship, _ = await form_relationship(db, ALICE, BOB)
    await db.commit()

    request = EditRelationshipRequest(
        relationship_id=relationship.id,
        end_date=datetime.now(timezone.utc) - timedelta(days=30),
    )
    with pytest.raises(HTTPException) as exc:
        await edit_relationship(request, db, as_current_user(alice))
    assert exc.value.status_code == 400


async def test_edit_can_end_relationship(db):
    alice = await make_user(db, ALICE)
    relationship, _ = await form_relationship(db, ALICE, BOB)
    await db.commit()

    request = EditRelationshipRequest(
        relationship_id=relationship.id,
        status=RelationshipStatus.SEPARATED,
        end_date=datetime.now(timezone.utc) + timedelta(minutes=1),
    )
    await edit_relationship(request, db, as_current_user(alice))

    assert await find_active_relationship(db, ALICE, BOB) is None


async def test_edit_without_fields(db):
    alice = await make_user(db, ALICE)
    relationship, _ = await form_relationship(db, ALICE, BOB)
    await db.commit()

    with pytest.raises(HTTPException) as exc:
        await edit_relationship(EditRelationshipRequest(relationship_id=relationship.id), db, as_current_user(alice))
    assert exc.value.detail == "No fields to update"


async def test_cannot_reopen_when_pair_has_newer_active_relationship(db):
    alice = await make_user(db, ALICE)
    old, _ = await form_relationship(db, ALICE, BOB)
    old.end_date = utcnow()
    await db.commit()
    current, _ = await form_relationship(db, ALICE, BOB)
    await db.commit()

    request = EditRelationshipRequest(relationship_id=old.id, end_date=None)
    with pytest.raises(HTTPException) as exc:
        await edit_relationship(request, db, as_current_user(alice))
    assert exc.value.status_code == 400
    assert exc.value.detail == "An active relationship already exists between these users"

    active = await find_active_relationship(db, ALICE, BOB)
    assert active.id == current.id


async def test_reopen_ended_relationship(db):
    alice = await make_user(db, ALICE)
    relationship, _ = await form_relationship(db, ALICE, BOB)
    relationship.end_date = utcnow()
    await db.commit()

    request = EditRelationshipRequest(relationship_id=relationship.id, end_date=None)
    await edit_relationship(request, db, as_current_user(alice))

    active = await find_active_relationship(db, ALICE, BOB)
    assert active.id == relationship.id
