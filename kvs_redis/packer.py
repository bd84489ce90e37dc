"""Value serialization for string-mode buckets."""

import json
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Packer(Protocol):
    def pack(self, value: Any) -> str: ...

    def unpack(self, raw: str | bytes | None) -> Any: ...


class JsonPacker:
    """
    Default packer: values are stored as JSON text.

    A missing key (``None``) unpacks to ``None``.
    """

    def pack(self, value: Any) -> str:
        return json.dumps(value)

    def unpack(self, raw: str | bytes | None) -> Any:
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()
        return json.loads(raw)


DEFAULT_PACKER = JsonPacker()
