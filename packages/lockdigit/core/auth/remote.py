"""
Remote identity store adapters.
SupabaseIdentityStore keeps the server-side copy of each identity's PIN hash,
salt and device binding, plus per-account payment PINs.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional

from supabase import create_client, Client

from ..config import AuthConfig
from ..exceptions import DuplicateIdentityError, RemoteStoreError
from .hashing import pin_matches
from .models import IdentityCreate, IdentityRecord

logger = logging.getLogger(__name__)


class RemoteIdentityStore(ABC):
    """Operations the core needs from the remote structured store."""

    @abstractmethod
    async def create_identity(self, identity: IdentityCreate) -> str:
        """Create an identity and return its id; DuplicateIdentityError if the phone exists."""

    @abstractmethod
    async def get_identity_by_phone(self, phone: str) -> Optional[IdentityRecord]:
        ...

    @abstractmethod
    async def verify_device_binding(self, identity_id: str, device_id: str) -> bool:
        ...

    @abstractmethod
    async def update_pin(self, identity_id: str, pin_hash: str, pin_salt: str, pin_length: int) -> None:
        ...

    @abstractmethod
    async def update_device_binding(self, identity_id: str, device_id: str) -> None:
        ...

    @abstractmethod
    async def set_account_pin(self, account_id: str, pin_hash: str, pin_salt: str) -> None:
        ...

    @abstractmethod
    async def verify_account_pin(self, account_id: str, pin: str) -> bool:
        """Hash and compare on the store side; the account hash never reaches the caller."""


def _to_identity(row: Dict[str, Any]) -> IdentityRecord:
    return IdentityRecord(
        id=str(row["id"]),
        phone=row["phone"],
        name=row.get("name"),
        email=row.get("email"),
        pin_hash=row.get("pin_hash"),
        pin_salt=row.get("pin_salt"),
        pin_length=row.get("pin_length") or 4,
        device_id=row.get("device_id"),
        created_at=row.get("created_at"),
    )


class SupabaseIdentityStore(RemoteIdentityStore):
    """Identity store backed by the Supabase `users` and `bank_accounts` tables."""

    def __init__(self, client: Optional[Client] = None):
        """Initialize with an explicit client or from AuthConfig.SUPABASE_URL / SUPABASE_ANON_KEY."""
        if client is None:
            supabase_url = AuthConfig.SUPABASE_URL
            supabase_key = AuthConfig.SUPABASE_ANON_KEY

            if not supabase_url or not supabase_key:
                raise ValueError("Supabase configuration missing")

            client = create_client(supabase_url, supabase_key)

        self.supabase: Client = client
        logger.info("SupabaseIdentityStore initialized")

    async def create_identity(self, identity: IdentityCreate) -> str:
        try:
            existing = self.supabase.table("users").select("id").eq("phone", identity.phone).execute()
            if existing.data:
                logger.warning("Identity creation rejected: phone already registered")
                raise DuplicateIdentityError(identity.phone)

            result = self.supabase.table("users").insert({
                "id": str(uuid.uuid4()),
                "name": identity.name,
                "email": identity.email,
                "phone": identity.phone,
                "phone_verified": True,
                "pin_hash": identity.pin_hash,
                "pin_salt": identity.pin_salt,
                "pin_length": identity.pin_length,
                "device_id": identity.device_id,
                "created_at": datetime.utcnow().isoformat()
            }).execute()

            if not result.data:
                raise RemoteStoreError("Failed to create identity")

            identity_id = str(result.data[0]["id"])
            logger.info(f"Remote identity created: {identity_id}")
            return identity_id

        except (DuplicateIdentityError, RemoteStoreError):
            raise
        except Exception as e:
            logger.error(f"Identity creation failed: {e}")
            raise RemoteStoreError("Identity creation failed") from e

    async def get_identity_by_phone(self, phone: str) -> Optional[IdentityRecord]:
        try:
            result = self.supabase.table("users").select("*").eq("phone", phone).execute()
        except Exception as e:
            logger.error(f"Identity lookup failed: {e}")
            raise RemoteStoreError("Identity lookup failed") from e

        if not result.data:
            return None
        return _to_identity(result.data[0])

    async def verify_device_binding(self, identity_id: str, device_id: str) -> bool:
        try:
            result = self.supabase.table("users").select("device_id").eq("id", identity_id).execute()
        except Exception as e:
            logger.error(f"Device binding lookup failed: {e}")
            raise RemoteStoreError("Device binding lookup failed") from e

        if not result.data:
            return False
        return result.data[0].get("device_id") == device_id

    async def update_pin(self, identity_id: str, pin_hash: str, pin_salt: str, pin_length: int) -> None:
        try:
            self.supabase.table("users").update({
                "pin_hash": pin_hash,
                "pin_salt": pin_salt,
                "pin_length": pin_length
            }).eq("id", identity_id).execute()
            logger.info(f"Remote PIN updated for identity {identity_id}")
        except Exception as e:
            logger.error(f"Remote PIN update failed: {e}")
            raise RemoteStoreError("Remote PIN update failed") from e

    async def update_device_binding(self, identity_id: str, device_id: str) -> None:
        try:
            self.supabase.table("users").update({
                "device_id": device_id
            }).eq("id", identity_id).execute()
            logger.info(f"Device binding updated for identity {identity_id}")
        except Exception as e:
            logger.error(f"Device binding update failed: {e}")
            raise RemoteStoreError("Device binding update failed") from e

    async def set_account_pin(self, account_id: str, pin_hash: str, pin_salt: str) -> None:
        try:
            self.supabase.table("bank_accounts").update({
                "payment_pin_hash": pin_hash,
                "payment_pin_salt": pin_salt
            }).eq("id", account_id).execute()
            logger.info(f"Payment PIN set for account {account_id}")
        except Exception as e:
            logger.error(f"Payment PIN update failed: {e}")
            raise RemoteStoreError("Payment PIN update failed") from e

    async def verify_account_pin(self, account_id: str, pin: str) -> bool:
        try:
            result = self.supabase.table("bank_accounts").select(
                "payment_pin_hash,payment_pin_salt"
            ).eq("id", account_id).execute()
        except Exception as e:
            logger.error(f"Payment PIN lookup failed: {e}")
            raise RemoteStoreError("Payment PIN lookup failed") from e

        if not result.data:
            return False
        account = result.data[0]
        return pin_matches(pin, account.get("payment_pin_salt"), account.get("payment_pin_hash"))


class InMemoryIdentityStore(RemoteIdentityStore):
    """Process-local identity store for tests and offline previews."""

    def __init__(self):
        self.identities: Dict[str, IdentityRecord] = {}
        self.accounts: Dict[str, Dict[str, str]] = {}

    async def create_identity(self, identity: IdentityCreate) -> str:
        if any(record.phone == identity.phone for record in self.identities.values()):
            raise DuplicateIdentityError(identity.phone)

        identity_id = str(uuid.uuid4())
        self.identities[identity_id] = IdentityRecord(
            id=identity_id,
            created_at=datetime.utcnow(),
            **identity.model_dump()
        )
        return identity_id

    async def get_identity_by_phone(self, phone: str) -> Optional[IdentityRecord]:
        for record in self.identities.values():
            if record.phone == phone:
                return record
        return None

    async def verify_device_binding(self, identity_id: str, device_id: str) -> bool:
        record = self.identities.get(identity_id)
        if not record:
            return False
        return record.device_id == device_id

    async def update_pin(self, identity_id: str, pin_hash: str, pin_salt: str, pin_length: int) -> None:
        record = self.identities.get(identity_id)
        if not record:
            raise RemoteStoreError(f"Unknown identity {identity_id}")
        self.identities[identity_id] = record.model_copy(
            update={"pin_hash": pin_hash, "pin_salt": pin_salt, "pin_length": pin_length}
        )

    async def update_device_binding(self, identity_id: str, device_id: str) -> None:
        record = self.identities.get(identity_id)
        if not record:
            raise RemoteStoreError(f"Unknown identity {identity_id}")
        self.identities[identity_id] = record.model_copy(update={"device_id": device_id})

    async def set_account_pin(self, account_id: str, pin_hash: str, pin_salt: str) -> None:
        self.accounts[account_id] = {
            "payment_pin_hash": pin_hash,
            "payment_pin_salt": pin_salt,
        }

    async def verify_account_pin(self, account_id: str, pin: str) -> bool:
        account = self.accounts.get(account_id)
        if not account:
            return False
        return pin_matches(pin, account.get("payment_pin_salt"), account.get("payment_pin_hash"))
