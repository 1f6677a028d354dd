"""Inbound broker payload."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

_FIELDS = ("channel", "message")


class BrokerEnvelope(BaseModel):
    """``{"channel": ..., "message": ...}`` delivered on a subscribe topic.

    Keys match case-insensitively (``Channel``, ``MESSAGE``); when several
    spellings of one key are present the last one wins. Unknown keys are
    ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    channel: str = ""
    message: str = ""

    @model_validator(mode="before")
    @classmethod
    def _fold_key_case(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        folded: dict[Any, Any] = {}
        for key, value in data.items():
            if isinstance(key, str) and key.lower() in _FIELDS:
                folded[key.lower()] = value
            else:
                folded[key] = value
        return folded

    @classmethod
    def from_payload(cls, payload: bytes | str) -> BrokerEnvelope:
        """Decode a JSON payload.

        Raises:
            pydantic.ValidationError: Not JSON, not an object, or non-string fields.
        """
        return cls.model_validate_json(payload)
