"""
Appraisal Store module for persistent appraisal records.

This module provides HMAC-protected storage for completed appraisals. Each
record is keyed by an integer id and carries the domain and options
fingerprint it was computed for, so a recent identical evaluation can be
served without scoring again. When no file path is configured the store
keeps records in memory only.
"""

import hashlib
import hmac
import json
import time
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from .exceptions import PersistenceError, TamperingError
from .models import Appraisal, StoredAppraisal, WhoisSnapshot


class AppraisalStore:
    """
    Persistent appraisal storage with HMAC protection.

    Records are written to disk as JSON together with an HMAC over their
    canonical serialization; a mismatch on load is reported as tampering.
    """

    VERSION = 1

    def __init__(
        self,
        file_path: Optional[Path],
        hmac_secret: str,
        clock: Callable[[], float] = time.time,
        retention_seconds: Optional[float] = None,
        max_records: Optional[int] = None,
    ) -> None:
        """
        Initialize the appraisal store.

        Args:
            file_path: Path to the store file (JSON format), or None for memory only
            hmac_secret: Secret key for HMAC computation
            clock: Time source in epoch seconds
            retention_seconds: Records older than this are pruned on insert
            max_records: Upper bound on kept records; the oldest are pruned first
        """
        self._file_path = file_path
        self._hmac_secret = hmac_secret.encode("utf-8")
        self._clock = clock
        self._retention_seconds = retention_seconds
        self._max_records = max_records
        self._records: dict[int, StoredAppraisal] = {}
        self._next_id = 1
        self._loaded = file_path is None

    @property
    def file_path(self) -> Optional[Path]:
        return self._file_path

    @property
    def records(self) -> list[StoredAppraisal]:
        self._ensure_loaded()
        return list(self._records.values())

    def load(self) -> int:
        """
        Load records from file and validate HMAC.

        Returns:
            Number of records loaded (0 when the file does not exist)

        Raises:
            TamperingError: If HMAC validation fails
            PersistenceError: If file cannot be read or parsed
        """
        if self._file_path is None or not self._file_path.exists():
            self._loaded = True
            return 0

        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                raw_data = json.load(f)
        except json.JSONDecodeError as e:
            raise PersistenceError(
                code="parse_error",
                message=f"Failed to parse appraisal store: {e}",
                details={"file_path": str(self._file_path)},
            )
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to read appraisal store: {e}",
                details={"file_path": str(self._file_path)},
            )

        stored_hmac = raw_data.get("hmac", "")
        data_for_hmac = {
            "version": raw_data.get("version"),
            "next_id": raw_data.get("next_id"),
            "records": raw_data.get("records", []),
            "last_updated": raw_data.get("last_updated"),
        }
        computed_hmac = self.compute_hmac(data_for_hmac)

        if not self.validate_hmac(stored_hmac, computed_hmac):
            raise TamperingError(
                code="hmac_mismatch",
                message="HMAC validation failed - appraisal store may have been tampered with",
                details={
                    "file_path": str(self._file_path),
                    "expected_hmac": computed_hmac,
                    "stored_hmac": stored_hmac,
                },
            )

        try:
            records = [StoredAppraisal.from_dict(item) for item in raw_data.get("records", [])]
        except (KeyError, TypeError, ValueError) as e:
            raise PersistenceError(
                code="parse_error",
                message=f"Malformed appraisal record: {e}",
                details={"file_path": str(self._file_path)},
            )

        self._records = {record.record_id: record for record in records}
        highest = max(self._records, default=0)
        self._next_id = max(int(raw_data.get("next_id") or 1), highest + 1)
        self._loaded = True
        return len(self._records)

    def save(self) -> None:
        """
        Write all records to file with HMAC protection.

        Raises:
            PersistenceError: If file cannot be written
        """
        self._write(self._records, self._next_id)

    def _write(self, records: dict[int, StoredAppraisal], next_id: int) -> None:
        if self._file_path is None:
            return

        now = datetime.now(timezone.utc).isoformat()
        serialized = [records[record_id].to_dict() for record_id in sorted(records)]

        data_for_hmac = {
            "version": self.VERSION,
            "next_id": next_id,
            "records": serialized,
            "last_updated": now,
        }
        output_data = dict(data_for_hmac, hmac=self.compute_hmac(data_for_hmac))

        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._file_path, "w", encoding="utf-8") as f:
                json.dump(output_data, f, indent=2, sort_keys=True)
        except OSError as e:
            raise PersistenceError(
                code="io_error",
                message=f"Failed to write appraisal store: {e}",
                details={"file_path": str(self._file_path)},
            )

    def _commit(self, records: dict[int, StoredAppraisal], next_id: int) -> None:
        """Write the new state and only then make it the in-memory state."""
        self._write(records, next_id)
        self._records = records
        self._next_id = next_id

    def _prune(self, records: dict[int, StoredAppraisal], now: float) -> dict[int, StoredAppraisal]:
        if self._retention_seconds is not None:
            cutoff = now - self._retention_seconds
            records = {rid: r for rid, r in records.items() if r.created_at > cutoff}
        if self._max_records is not None and len(records) > self._max_records:
            keep = sorted(records, key=lambda rid: (records[rid].created_at, rid))[-self._max_records:]
            records = {rid: records[rid] for rid in sorted(keep)}
        return records

    def insert(self, appraisal: Appraisal, created_at: Optional[float] = None) -> int:
        """
        Persist a new appraisal, pruning expired and surplus records.

        Returns:
            The id assigned to the record

        Raises:
            PersistenceError: If the store cannot be written; nothing is kept
        """
        self._ensure_loaded()
        now = self._clock()
        record_id = self._next_id
        records = dict(self._records)
        records[record_id] = StoredAppraisal(
            record_id=record_id,
            domain=appraisal.domain,
            options_hash=appraisal.options_hash,
            created_at=now if created_at is None else created_at,
            appraisal=appraisal,
        )
        self._commit(self._prune(records, now), record_id + 1)
        return record_id

    def get(self, record_id: int) -> Optional[StoredAppraisal]:
        self._ensure_loaded()
        return self._records.get(record_id)

    def find_recent(
        self,
        domain: str,
        options_hash: Optional[str],
        max_age_seconds: float,
    ) -> Optional[StoredAppraisal]:
        """
        Most recent record for a domain younger than max_age_seconds.

        A record matches when its fingerprint equals options_hash or when it
        was stored without a fingerprint.
        """
        self._ensure_loaded()
        cutoff = self._clock() - max_age_seconds
        best: Optional[StoredAppraisal] = None
        for record in self._records.values():
            if record.domain != domain or record.created_at <= cutoff:
                continue
            if record.options_hash is not None and record.options_hash != options_hash:
                continue
            if best is None or record.created_at > best.created_at:
                best = record
        return best

    def patch_whois(self, record_id: int, snapshot: WhoisSnapshot) -> bool:
        """
        Attach WHOIS data to a stored appraisal.

        Returns:
            True when the record changed; False when it is missing or
            already carries this snapshot
        """
        self._ensure_loaded()
        record = self._records.get(record_id)
        if record is None or record.appraisal.whois == snapshot:
            return False
        records = dict(self._records)
        records[record_id] = replace(record, appraisal=record.appraisal.with_whois(snapshot))
        self._commit(records, self._next_id)
        return True

    def delete(self, record_id: int) -> bool:
        self._ensure_loaded()
        if record_id not in self._records:
            return False
        records = {rid: r for rid, r in self._records.items() if rid != record_id}
        self._commit(records, self._next_id)
        return True

    def compute_hmac(self, data: dict) -> str:
        """
        Compute HMAC-SHA256 over serialized data.

        Args:
            data: Dictionary to compute HMAC over

        Returns:
            Hexadecimal HMAC string
        """
        serialized = json.dumps(data, sort_keys=True, separators=(",", ":"))
        return hmac.new(
            self._hmac_secret,
            serialized.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def validate_hmac(self, stored_hmac: str, computed_hmac: str) -> bool:
        """Validate HMAC using constant-time comparison."""
        return hmac.compare_digest(stored_hmac, computed_hmac)

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()
