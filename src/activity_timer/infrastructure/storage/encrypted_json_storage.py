"""Encrypted JSON storage implementation."""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Set
from uuid import uuid4

from cryptography.fernet import Fernet, InvalidToken

from ...core.entities.activity import Activity
from ...core.interfaces.activity_repository import ActivityRepository

logger = logging.getLogger(__name__)


class EncryptedJsonActivityRepository(ActivityRepository):
    """Activity repository persisted as a Fernet-encrypted JSON document.

    The document has the shape ``{"activities": {id: activity_dict}}``.
    Activities handed out by ``load_activities`` or passed to
    ``save_activity`` are tracked and written on ``save_changes``.
    """

    def __init__(self, storage_path: str, encryption_key_file: Optional[str] = None):
        """Initialize the storage.

        Args:
            storage_path: Path to store the data file
            encryption_key_file: Optional path to the encryption key file.
                               If not provided, will use '.encryption_key' in the same directory as storage_path.
        """
        self.storage_path = Path(storage_path)
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Initializing encrypted storage at {storage_path}")

        # Set up encryption key path
        if encryption_key_file:
            self.key_path = Path(encryption_key_file)
            self.key_path.parent.mkdir(parents=True, exist_ok=True)
        else:
            self.key_path = self.storage_path.parent / ".encryption_key"

        self._tracked: Dict[str, Activity] = {}
        self._deleted: Set[str] = set()

        self._initialize_storage()

    def _initialize_storage(self) -> None:
        """Initialize storage and encryption."""
        try:
            # Try to load existing key
            if self.key_path.exists():
                logger.debug("Using existing encryption key")
                key = self.key_path.read_bytes()
                if key and len(key) == 44:  # Base64 encoded Fernet key is always 44 bytes
                    self.encryption_key = key
                    self.fernet = Fernet(key)

                    if not self.storage_path.exists():
                        self._save_data({"activities": {}})
                        return

                    try:
                        data = self._load_data()
                        activity_count = len(data.get("activities", {}))
                        logger.info(f"Found {activity_count} existing activities")
                        return
                    except (InvalidToken, ValueError) as e:
                        logger.warning(f"Could not read storage with existing key: {e}")
                else:
                    logger.warning("Invalid key format")
            else:
                logger.info("No existing key found")

            # If we get here, we need to create a new key and storage
            logger.info("Generating new encryption key")
            self.encryption_key = Fernet.generate_key()
            self.fernet = Fernet(self.encryption_key)

            # Backup existing files if they exist
            if self.key_path.exists():
                backup_key = self.key_path.with_suffix(".key.bak")
                if backup_key.exists():
                    backup_key.unlink()
                self.key_path.rename(backup_key)
                logger.info(f"Backed up existing key to {backup_key}")

            if self.storage_path.exists():
                backup_storage = self.storage_path.with_suffix(".json.bak")
                if backup_storage.exists():
                    backup_storage.unlink()
                self.storage_path.rename(backup_storage)
                logger.info(f"Backed up existing storage to {backup_storage}")

            self.key_path.write_bytes(self.encryption_key)
            logger.info("Saved new encryption key")

            self._save_data({"activities": {}})
            logger.info("Created new storage file")

        except Exception as e:
            logger.error(f"Error initializing storage: {e}", exc_info=True)
            raise

    def _encrypt_data(self, data: str) -> bytes:
        return self.fernet.encrypt(data.encode())

    def _decrypt_data(self, data: bytes) -> str:
        return self.fernet.decrypt(data).decode()

    def _load_data(self) -> Dict:
        """Load and decrypt data from storage.

        Returns:
            dict: Decrypted data

        Raises:
            InvalidToken: If the file was not encrypted with the current key
            ValueError: If the decrypted content is not valid JSON
        """
        if not self.storage_path.exists():
            logger.info("Storage file not found, starting empty")
            return {"activities": {}}

        encrypted_data = self.storage_path.read_bytes()
        if not encrypted_data:
            logger.warning("Storage file is empty")
            return {"activities": {}}

        data = json.loads(self._decrypt_data(encrypted_data))
        data.setdefault("activities", {})

        logger.debug(f"Loaded {len(data['activities'])} activities from storage")
        return data

    def _save_data(self, data: Dict) -> None:
        """Encrypt and save data to storage.

        Args:
            data: Data to encrypt and save
        """
        try:
            json_data = json.dumps(data, indent=2)
            encrypted_data = self._encrypt_data(json_data)

            # Write to temporary file first
            temp_path = self.storage_path.with_suffix(".tmp")
            temp_path.write_bytes(encrypted_data)

            if temp_path.read_bytes() != encrypted_data:
                temp_path.unlink()
                raise ValueError("Verification failed: data mismatch")

            temp_path.replace(self.storage_path)

            logger.debug(f"Saved {len(data['activities'])} activities to storage")

        except Exception as e:
            logger.error(f"Error saving data: {e}", exc_info=True)
            raise

    def load_activities(self) -> List[Activity]:
        """Load all stored activities and start tracking them.

        Returns:
            List of activities in stored order
        """
        data = self._load_data()
        activities = [
            Activity.from_dict(activity_data)
            for activity_data in data["activities"].values()
        ]

        self._tracked = {activity.id: activity for activity in activities}
        self._deleted.clear()
        logger.info(f"Loaded {len(activities)} activities")
        return activities

    def save_activity(self, activity: Activity) -> None:
        """Track an activity, assigning IDs where missing.

        Args:
            activity: Activity to store
        """
        if not activity.id:
            activity.id = str(uuid4())
            logger.debug(f"Generated new activity ID: {activity.id}")

        self._tracked[activity.id] = activity
        self._deleted.discard(activity.id)

    def delete_activity(self, activity: Activity) -> None:
        """Stop tracking an activity and mark it for deletion.

        Args:
            activity: Activity to delete
        """
        if not activity.id:
            logger.warning("Attempted to delete activity without ID")
            return

        self._tracked.pop(activity.id, None)
        self._deleted.add(activity.id)

    def save_changes(self) -> None:
        """Write tracked activities and pending deletions to disk."""
        try:
            data = self._load_data()

            for activity_id in self._deleted:
                data["activities"].pop(activity_id, None)

            for activity_id, activity in self._tracked.items():
                for segment in activity.time_segments:
                    segment.activity_id = activity_id
                    if not segment.id:
                        segment.id = str(uuid4())
                data["activities"][activity_id] = activity.to_dict()

            self._save_data(data)
            self._deleted.clear()
            logger.debug(f"Saved changes for {len(self._tracked)} activities")

        except Exception as e:
            logger.error(f"Error saving changes: {e}", exc_info=True)
            raise
