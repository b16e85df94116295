import pytest

from onboarding.core.errors import NotFoundError, ValidationError


def test_create_note_is_audited(services, merchant, actor_id):
    note = services.notes.create_note(merchant.id, actor_id, "Requested a voided cheque", note_type=2)

    assert note.is_internal is True
    entry = services.audit.find_by_record_id(note.id)[0]
    assert entry.action == "INSERT"
    assert entry.table_name == "merchant_notes"
    assert entry.changed_by == actor_id
    assert entry.changes["new"]["note_text"] == "Requested a voided cheque"


def test_create_note_requires_text_and_merchant(services, merchant, actor_id):
    with pytest.raises(ValidationError):
        services.notes.create_note(merchant.id, actor_id, "   ")
    with pytest.raises(NotFoundError):
        services.notes.create_note("missing", actor_id, "Hello")


def test_internal_notes_can_be_hidden(services, merchant, actor_id):
    services.notes.create_note(merchant.id, actor_id, "Risk flagged the MCC")
    visible = services.notes.create_note(merchant.id, actor_id, "Welcome aboard", is_internal=False)

    assert len(services.notes.find_by_merchant(merchant.id)) == 2
    assert [n.id for n in services.notes.find_by_merchant(merchant.id, include_internal=False)] == [visible.id]


def test_find_by_type(services, merchant, actor_id):
    call = services.notes.create_note(merchant.id, actor_id, "Left a voicemail", note_type=1)
    services.notes.create_note(merchant.id, actor_id, "General remark")

    assert [n.id for n in services.notes.find_by_type(merchant.id, 1)] == [call.id]


def test_update_and_delete(services, merchant, actor_id):
    note = services.notes.create_note(merchant.id, actor_id, "Draft")
    services.notes.update_note_text(note.id, "Final", actor_id)

    assert services.notes.find_by_id(note.id).note_text == "Final"
    update = services.audit.find_by_record_id(note.id)[0]
    assert update.changes == {"old": {"note_text": "Draft"}, "new": {"note_text": "Final"}}

    services.notes.delete(note.id, actor_id)
    assert services.notes.find_by_id(note.id) is None
    with pytest.raises(NotFoundError):
        services.notes.update_note_text(note.id, "Again", actor_id)


def test_calls_scoped_to_another_merchant_are_not_found(services, merchant, merchant_payload, actor_id):
    other = services.merchants.create(merchant_payload(email="other@acme.example"), actor_id)
    note = services.notes.create_note(other.id, actor_id, "Owner prefers email")

    with pytest.raises(NotFoundError):
        services.notes.update_note_text(note.id, "Changed", actor_id, merchant_id=merchant.id)
    with pytest.raises(NotFoundError):
        services.notes.delete(note.id, actor_id, merchant_id=merchant.id)

    assert services.notes.find_by_id(note.id).note_text == "Owner prefers email"


def test_update_note_text_rejects_blank(services, merchant, actor_id):
    note = services.notes.create_note(merchant.id, actor_id, "Draft")
    with pytest.raises(ValidationError):
        services.notes.update_note_text(note.id, " ", actor_id)
    assert services.notes.find_by_id(note.id).note_text == "Draft"
