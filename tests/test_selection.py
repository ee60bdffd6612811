import uuid

from realitylog.services.selection import Selection


def test_toggle_participant_adds_then_removes():
    selection = Selection()
    participant = uuid.uuid4()

    assert selection.toggle_participant(participant) is True
    assert participant in selection.participants
    assert selection.toggle_participant(participant) is False
    assert participant not in selection.participants


def test_toggle_tag_keeps_set_semantics():
    selection = Selection()
    first, second = uuid.uuid4(), uuid.uuid4()

    selection.toggle_tag(first)
    selection.toggle_tag(second)
    selection.toggle_tag(first)

    assert selection.tags == {second}


def test_single_choice_fields_replace_and_clear():
    selection = Selection()
    location, other = uuid.uuid4(), uuid.uuid4()

    selection.set_location(location)
    selection.set_location(other)
    assert selection.location == other

    selection.set_location(None)
    assert selection.location is None


def test_snapshot_is_isolated_from_later_changes():
    selection = Selection()
    participant = uuid.uuid4()
    selection.toggle_participant(participant)
    selection.set_action_category(uuid.uuid4())

    snapshot = selection.snapshot()
    selection.toggle_participant(participant)
    selection.toggle_participant(uuid.uuid4())
    selection.set_action_category(None)

    assert snapshot.participants == frozenset({participant})
    assert snapshot.action_category is not None


def test_clear_resets_everything():
    selection = Selection()
    selection.toggle_participant(uuid.uuid4())
    selection.toggle_tag(uuid.uuid4())
    selection.set_location(uuid.uuid4())
    selection.set_action_category(uuid.uuid4())

    selection.clear()

    snapshot = selection.snapshot()
    assert snapshot.participants == frozenset()
    assert snapshot.tags == frozenset()
    assert snapshot.location is None
    assert snapshot.action_category is None
