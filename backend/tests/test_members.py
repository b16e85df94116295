import pytest

from onboarding.core.errors import NotFoundError, ValidationError
from onboarding.models.codes import VerificationStatus


def test_create_requires_fields(services, merchant, actor_id):
    with pytest.raises(ValidationError) as exc:
        services.members.create({"merchant_id": merchant.id, "first_name": "Jane", "ssn": "  "}, actor_id)
    assert "ssn" in exc.value.fields
    assert "first_name" not in exc.value.fields
    assert services.members.find_all_for_merchant(merchant.id) == []


@pytest.mark.parametrize("pct", [-1, 10001, "5000", 50.5, True])
def test_create_rejects_bad_ownership(services, merchant, member_payload, actor_id, pct):
    with pytest.raises(ValidationError) as exc:
        services.members.create(member_payload(merchant.id, ownership_percentage=pct), actor_id)
    assert exc.value.fields == ["ownership_percentage"]


def test_ownership_bounds_are_inclusive(services, merchant, member_payload, actor_id):
    services.members.create(member_payload(merchant.id, ownership_percentage=0), actor_id)
    services.members.create(
        member_payload(merchant.id, ownership_percentage=10000, email="sole@acme.example"), actor_id
    )
    assert len(services.members.find_all_for_merchant(merchant.id)) == 2


def test_first_member_is_primary_and_completes_owner_info(services, merchant, member_payload, actor_id):
    member = services.members.create(member_payload(merchant.id), actor_id)

    assert member.is_primary is True
    assert services.members.find_primary_for_merchant(merchant.id).id == member.id
    assert services.onboarding.find_by_merchant_id(merchant.id).owner_info_completed is True


def test_primary_flag_moves_between_members(services, merchant, member_payload, actor_id):
    first = services.members.create(member_payload(merchant.id), actor_id)
    second = services.members.create(
        member_payload(merchant.id, email="john@acme.example", is_primary=True), actor_id
    )
    assert services.members.find_primary_for_merchant(merchant.id).id == second.id
    assert services.members.find_by_id(first.id).is_primary is False

    services.members.update(first.id, {"is_primary": True}, actor_id)
    primaries = [m.id for m in services.members.find_all_for_merchant(merchant.id) if m.is_primary]
    assert primaries == [first.id]


def test_audit_never_contains_plain_ssn(services, merchant, member_payload, actor_id):
    member = services.members.create(member_payload(merchant.id), actor_id)
    services.members.update(member.id, {"ssn": "987654321", "title": "CEO"}, actor_id)
    services.members.delete(member.id, actor_id)

    entries = services.audit.find_by_record_id(member.id)
    assert [e.action for e in entries] == ["DELETE", "UPDATE", "INSERT"]
    for entry in entries:
        assert "123456789" not in str(entry.changes)
        assert "987654321" not in str(entry.changes)
    update = entries[1]
    assert update.changes["old"]["ssn"] == "*****6789"
    assert update.changes["new"]["ssn"] == "*****4321"
    assert update.changes["new"]["title"] == "CEO"


def test_update_verification_status_logs_only_changes(services, merchant, member_payload, actor_id):
    member = services.members.create(member_payload(merchant.id), actor_id)

    services.members.update_verification_status(
        member.id,
        id_verification_status=VerificationStatus.passed,
        background_check_status=VerificationStatus.pending,
        actor_id=actor_id,
    )

    updated = services.members.find_by_id(member.id)
    assert updated.id_verification_status == VerificationStatus.passed
    entry = services.audit.find_by_record_id(member.id)[0]
    assert entry.changes == {
        "old": {"id_verification_status": 0},
        "new": {"id_verification_status": 2},
    }


def test_update_verification_status_leaves_unsupplied_values(services, merchant, member_payload, actor_id):
    member = services.members.create(member_payload(merchant.id), actor_id)
    services.members.update_verification_status(
        member.id, background_check_status=VerificationStatus.failed, actor_id=actor_id
    )
    updated = services.members.find_by_id(member.id)
    assert updated.id_verification_status == VerificationStatus.pending
    assert updated.background_check_status == VerificationStatus.failed


def test_delete_primary_promotes_remaining(services, merchant, member_payload, actor_id):
    first = services.members.create(member_payload(merchant.id), actor_id)
    second = services.members.create(member_payload(merchant.id, email="john@acme.example"), actor_id)

    services.members.delete(first.id, actor_id)

    assert services.members.find_by_id(first.id) is None
    assert services.members.find_primary_for_merchant(merchant.id).id == second.id


def test_delete_keeps_member_documents(services, merchant, member_payload, document_payload, actor_id):
    member = services.members.create(member_payload(merchant.id), actor_id)
    document = services.documents.create(document_payload(merchant.id, member_id=member.id), actor_id)

    services.members.delete(member.id, actor_id)

    kept = services.documents.find_by_id(document.id)
    assert kept is not None
    assert kept.member_id is None


def test_set_primary_rejects_other_merchant(services, merchant, merchant_payload, member_payload, actor_id):
    other = services.merchants.create(merchant_payload(email="other@acme.example"), actor_id)
    member = services.members.create(member_payload(other.id), actor_id)

    with pytest.raises(NotFoundError):
        services.members.set_primary(member.id, merchant.id, actor_id)


def test_finders(services, merchant, member_payload, actor_id):
    services.members.create(member_payload(merchant.id, ownership_percentage=6000), actor_id)
    services.members.create(
        member_payload(merchant.id, ownership_percentage=2500, email="john@acme.example"), actor_id
    )
    services.members.create(
        member_payload(merchant.id, ownership_percentage=1000, email="minor@acme.example"), actor_id
    )

    assert services.members.find_by_email(merchant.id, "john@acme.example").ownership_percentage == 2500
    assert services.members.find_by_email(merchant.id, "nobody@acme.example") is None
    owners = services.members.find_significant_owners(merchant.id)
    assert [m.ownership_percentage for m in owners] == [6000, 2500]
    assert len(services.members.find_significant_owners(merchant.id, min_percentage=500)) == 3


def test_update_rejects_blank_required_values(services, merchant, member_payload, actor_id):
    member = services.members.create(member_payload(merchant.id), actor_id)

    with pytest.raises(ValidationError) as exc:
        services.members.update(member.id, {"last_name": "", "title": "CFO"}, actor_id)

    assert exc.value.fields == ["last_name"]
    assert services.members.find_by_id(member.id).title is None


def test_calls_scoped_to_another_merchant_are_not_found(
    services, merchant, merchant_payload, member_payload, actor_id
):
    other = services.merchants.create(merchant_payload(email="other@acme.example"), actor_id)
    member = services.members.create(member_payload(other.id), actor_id)

    with pytest.raises(NotFoundError):
        services.members.update(member.id, {"title": "CEO"}, actor_id, merchant_id=merchant.id)
    with pytest.raises(NotFoundError):
        services.members.update_verification_status(
            member.id, id_verification_status=VerificationStatus.failed, actor_id=actor_id, merchant_id=merchant.id
        )
    with pytest.raises(NotFoundError):
        services.members.delete(member.id, actor_id, merchant_id=merchant.id)

    assert services.members.find_by_id(member.id).id_verification_status == VerificationStatus.pending


def test_unchanged_verification_status_is_described(services, merchant, member_payload, actor_id):
    member = services.members.create(member_payload(merchant.id), actor_id)

    services.members.update_verification_status(
        member.id, id_verification_status=VerificationStatus.pending, actor_id=actor_id
    )

    entry = services.audit.find_by_record_id(member.id)[0]
    assert entry.action == "UPDATE"
    assert entry.changes == {"change": "Verification statuses unchanged"}
