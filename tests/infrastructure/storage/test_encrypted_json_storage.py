"""Tests for the EncryptedJsonActivityRepository class."""

from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from cryptography.fernet import Fernet

from activity_timer.core.entities.activity import Activity, TimeSegment
from activity_timer.infrastructure.storage.encrypted_json_storage import (
    EncryptedJsonActivityRepository,
)

START = datetime(2017, 3, 1, 10, 0, 0)


@pytest.fixture
def temp_dir(tmp_path):
    """Create a temporary directory for testing."""
    test_dir = tmp_path / "test_storage"
    test_dir.mkdir()
    return test_dir


@pytest.fixture
def storage_path(temp_dir):
    return str(temp_dir / "activities.json")


@pytest.fixture
def storage(storage_path):
    """Create a storage instance for testing."""
    return EncryptedJsonActivityRepository(storage_path)


@pytest.fixture
def sample_activity():
    """Create an activity with one closed segment."""
    return Activity(
        name="Coding",
        time_segments=[TimeSegment(start_time=START, end_time=START + timedelta(minutes=45))],
    )


def test_storage_initialization(temp_dir, storage_path):
    """Test storage initialization creates necessary files."""
    storage = EncryptedJsonActivityRepository(storage_path)

    assert (temp_dir / "activities.json").exists()
    assert storage.key_path.exists()
    assert len(storage.key_path.read_bytes()) == 44
    assert storage.load_activities() == []


def test_encryption_key_persistence(storage_path):
    """Test encryption key remains consistent across instances."""
    key1 = EncryptedJsonActivityRepository(storage_path).encryption_key
    key2 = EncryptedJsonActivityRepository(storage_path).encryption_key

    assert key1 == key2


def test_custom_key_file(temp_dir, storage_path):
    """Test the key can live in a separate file."""
    key_file = temp_dir / "keys" / "key.key"

    storage = EncryptedJsonActivityRepository(storage_path, encryption_key_file=str(key_file))

    assert storage.key_path == key_file
    assert key_file.exists()


def test_save_activity_assigns_id(storage, sample_activity):
    """Test a new activity gets an id when saved."""
    storage.save_activity(sample_activity)

    assert sample_activity.id
    assert len(sample_activity.id) == 36


def test_save_changes_persists(storage, storage_path, sample_activity):
    """Test saved activities load in a fresh instance."""
    storage.save_activity(sample_activity)
    storage.save_changes()

    loaded = EncryptedJsonActivityRepository(storage_path).load_activities()

    assert len(loaded) == 1
    activity = loaded[0]
    assert activity.id == sample_activity.id
    assert activity.name == "Coding"
    segment = activity.time_segments[0]
    assert segment.start_time == START
    assert segment.end_time == START + timedelta(minutes=45)
    assert segment.activity_id == activity.id
    assert segment.id


def test_save_activity_without_save_changes_not_written(storage, storage_path, sample_activity):
    """Test nothing reaches disk before save_changes."""
    storage.save_activity(sample_activity)

    assert EncryptedJsonActivityRepository(storage_path).load_activities() == []


def test_loaded_activities_are_tracked(storage, storage_path, sample_activity):
    """Test changes to loaded activities are written by save_changes."""
    storage.save_activity(sample_activity)
    storage.save_changes()

    repository = EncryptedJsonActivityRepository(storage_path)
    activity = repository.load_activities()[0]
    activity.time_segments[0].end_time = START + timedelta(hours=2)
    activity.add_time_segment(TimeSegment(start_time=START, end_time=START, is_open=True))
    repository.save_changes()

    reloaded = EncryptedJsonActivityRepository(storage_path).load_activities()[0]
    assert reloaded.time_segments[0].end_time == START + timedelta(hours=2)
    assert reloaded.time_segments[1].is_open


def test_delete_activity(storage, storage_path, sample_activity):
    """Test deleting an activity removes it on save_changes."""
    other = Activity(name="Email")
    storage.save_activity(sample_activity)
    storage.save_activity(other)
    storage.save_changes()

    storage.delete_activity(sample_activity)
    storage.save_changes()

    loaded = EncryptedJsonActivityRepository(storage_path).load_activities()
    assert [a.name for a in loaded] == ["Email"]


def test_delete_unsaved_activity_is_ignored(storage):
    """Test deleting an activity without id does nothing."""
    storage.delete_activity(Activity(name="Draft"))
    storage.save_changes()

    assert storage.load_activities() == []


def test_data_is_encrypted(storage, sample_activity):
    """Test the data file does not contain plain text."""
    storage.save_activity(sample_activity)
    storage.save_changes()

    raw = storage.storage_path.read_bytes()
    assert b"Coding" not in raw
    assert b"Coding" in storage.fernet.decrypt(raw)


def test_save_failure_propagates(storage, sample_activity):
    """Test write errors reach the caller."""
    storage.save_activity(sample_activity)

    with patch.object(storage, "_save_data", side_effect=OSError("disk full")):
        with pytest.raises(OSError):
            storage.save_changes()


def test_wrong_key_backs_up_and_regenerates(temp_dir, storage_path, sample_activity):
    """Test unreadable data is backed up and a new key generated."""
    key_file = temp_dir / "key.key"
    storage = EncryptedJsonActivityRepository(storage_path, encryption_key_file=str(key_file))
    storage.save_activity(sample_activity)
    storage.save_changes()

    key_file.write_bytes(Fernet.generate_key())
    replaced = EncryptedJsonActivityRepository(storage_path, encryption_key_file=str(key_file))

    assert replaced.load_activities() == []
    assert (temp_dir / "activities.json.bak").exists()
    assert (temp_dir / "key.key.bak").exists()
