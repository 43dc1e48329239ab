"""Typed codecs between domain dataclasses and StoredRecord documents.

Payloads are produced with pydantic in JSON mode: Decimals become strings,
datetimes ISO strings, enums their values. Decoding validates back into
the dataclass, so a stored document always reloads as a valid record.
"""

from collections.abc import Callable
from typing import Generic, TypeVar

from pydantic import TypeAdapter

from src.bk_ledger.domain.models import StoredRecord

T = TypeVar("T")


class RecordCodec(Generic[T]):
    def __init__(
        self,
        record_type: str,
        model: type[T],
        key: Callable[[T], str],
        owner: Callable[[T], str | None] | None = None,
    ) -> None:
        self.record_type = record_type
        self._adapter: TypeAdapter[T] = TypeAdapter(model)
        self._key = key
        self._owner = owner

    def record_id(self, obj: T) -> str:
        return self._key(obj)

    def encode(self, obj: T) -> StoredRecord:
        return StoredRecord(
            record_type=self.record_type,
            record_id=self._key(obj),
            account_id=self._owner(obj) if self._owner else None,
            payload=self._adapter.dump_python(obj, mode="json"),
        )

    def decode(self, record: StoredRecord) -> T:
        return self._adapter.validate_python(record.payload)
