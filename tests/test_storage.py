"""Tests for the profile and sequence store."""

import pytest

from adamctl.models import DelayAction, SetHighAction, SetLowAction, TriggerSequence
from adamctl.storage import Database


def test_profile_crud(tmp_path):
    """Test profile add, get, update, remove."""
    db = Database(tmp_path)
    assert db.load_profiles() == []

    created = db.add_profile("Line 1", "192.168.1.50", 1025, description="Press trigger")
    assert db.profiles_path.exists()

    loaded = db.get_profile("Line 1")
    assert loaded is not None
    assert loaded.target.host == "192.168.1.50"
    assert loaded.description == "Press trigger"
    assert loaded.created_at == created.created_at

    updated = db.add_profile("Line 1", "192.168.1.51", 1026)
    assert updated.created_at == created.created_at
    assert [p.host for p in db.load_profiles()] == ["192.168.1.51"]

    assert db.remove_profile("Line 1") is True
    assert db.remove_profile("Line 1") is False
    assert db.get_profile("Line 1") is None


def test_profiles_file_is_sorted_toml(tmp_path):
    db = Database(tmp_path)
    db.add_profile("zeta", "10.0.0.2", 1025)
    db.add_profile("alpha", "10.0.0.1", 1025)

    text = db.profiles_path.read_text()
    assert text.index('[profiles."alpha"]') < text.index('[profiles."zeta"]')
    assert [p.name for p in db.load_profiles()] == ["alpha", "zeta"]


def test_missing_sequences_file_yields_example(tmp_path):
    db = Database(tmp_path)

    sequences = db.load_sequences()

    assert len(sequences) == 1
    assert sequences[0].name == "Example: Door Cycle"
    assert [a.description for a in sequences[0].actions] == [
        "DI0 → HIGH",
        "Delay 2s",
        "DI0 → LOW",
        "Delay 1s",
    ]
    assert not db.sequences_path.exists()


def test_sequence_roundtrip(tmp_path):
    db = Database(tmp_path)
    sequence = TriggerSequence(
        name="Strobe",
        actions=[SetHighAction(channel=3), DelayAction(duration_ms=250), SetLowAction(channel=3)],
        loop_count=0,
    )
    db.save_sequences([sequence])

    loaded = db.load_sequences()
    assert loaded == [sequence]
    assert db.get_sequence("Strobe") == sequence
    assert db.get_sequence(str(sequence.id)) == sequence
    assert db.get_sequence("nope") is None


def test_init_creates_files(tmp_path):
    db = Database(tmp_path / "data")
    db.init()

    assert db.profiles_path.exists()
    assert db.sequences_path.exists()
    assert db.load_sequences()[0].name == "Example: Door Cycle"


def test_invalid_files_raise(tmp_path):
    db = Database(tmp_path)
    db.sequences_path.write_text('[{"name": "x", "actions": [{"type": "fly"}]}]')
    db.profiles_path.write_text('[profiles."a"]\nport = "nope"\n')

    with pytest.raises(ValueError):
        db.load_sequences()
    with pytest.raises(ValueError):
        db.load_profiles()
