"""Typed response shapes decoded from Reddit JSON bodies."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .exceptions import DecodeError
from .ids import post_id_from_context


def load_object(body: bytes) -> Mapping[str, Any]:
    """Parse ``body`` as a JSON object or raise `DecodeError`."""

    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise DecodeError("Response did not contain valid JSON", details=body[:200]) from exc
    if not isinstance(payload, Mapping):
        raise DecodeError(
            f"Expected a JSON object, got {type(payload).__name__}", details=body[:200]
        )
    return payload


def _str(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    return "" if value is None else str(value)


def _int(payload: Mapping[str, Any], key: str) -> int:
    value = payload.get(key)
    if value is None:
        return 0
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"Field {key!r} is not an integer: {value!r}") from exc


def _float(payload: Mapping[str, Any], key: str) -> float:
    value = payload.get(key)
    if value is None:
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise DecodeError(f"Field {key!r} is not a number: {value!r}") from exc


def _bool(payload: Mapping[str, Any], key: str) -> bool:
    return bool(payload.get(key))


@dataclass(frozen=True, slots=True)
class RefreshTokenResponse:
    access_token: str
    refresh_token: str
    token_type: str
    expires_in: int
    scope: str

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> RefreshTokenResponse:
        return cls(
            access_token=_str(payload, "access_token"),
            refresh_token=_str(payload, "refresh_token"),
            token_type=_str(payload, "token_type"),
            expires_in=_int(payload, "expires_in"),
            scope=_str(payload, "scope"),
        )


@dataclass(frozen=True, slots=True)
class Message:
    """A private message or comment reply from the inbox listing."""

    id: str
    name: str
    kind: str
    author: str
    subject: str
    body: str
    context: str
    subreddit: str
    parent_id: str
    dest: str
    created_utc: float
    new: bool
    was_comment: bool

    @property
    def post_id(self) -> str:
        """Id of the post a comment reply belongs to, or ``""`` for messages."""
        return post_id_from_context(self.context)

    @classmethod
    def from_thing(cls, thing: Mapping[str, Any]) -> Message:
        data = thing.get("data")
        if not isinstance(data, Mapping):
            raise DecodeError("Listing child is missing its data object")
        return cls(
            id=_str(data, "id"),
            name=_str(data, "name"),
            kind=_str(thing, "kind"),
            author=_str(data, "author"),
            subject=_str(data, "subject"),
            body=_str(data, "body"),
            context=_str(data, "context"),
            subreddit=_str(data, "subreddit"),
            parent_id=_str(data, "parent_id"),
            dest=_str(data, "dest"),
            created_utc=_float(data, "created_utc"),
            new=_bool(data, "new"),
            was_comment=_bool(data, "was_comment"),
        )


@dataclass(frozen=True, slots=True)
class MessageListingResponse:
    messages: tuple[Message, ...]
    after: str
    before: str

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> MessageListingResponse:
        data = payload.get("data")
        if not isinstance(data, Mapping):
            raise DecodeError("Listing is missing its data object")
        children = data.get("children")
        if children is None:
            children = []
        if not isinstance(children, list):
            raise DecodeError("Listing children is not a list")
        messages = []
        for child in children:
            if not isinstance(child, Mapping):
                raise DecodeError("Listing child is not an object")
            messages.append(Message.from_thing(child))
        return cls(
            messages=tuple(messages),
            after=_str(data, "after"),
            before=_str(data, "before"),
        )


@dataclass(frozen=True, slots=True)
class MeResponse:
    id: str
    name: str
    created_utc: float
    link_karma: int
    comment_karma: int
    has_mail: bool
    inbox_count: int
    is_gold: bool
    is_mod: bool
    verified: bool

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> MeResponse:
        return cls(
            id=_str(payload, "id"),
            name=_str(payload, "name"),
            created_utc=_float(payload, "created_utc"),
            link_karma=_int(payload, "link_karma"),
            comment_karma=_int(payload, "comment_karma"),
            has_mail=_bool(payload, "has_mail"),
            inbox_count=_int(payload, "inbox_count"),
            is_gold=_bool(payload, "is_gold"),
            is_mod=_bool(payload, "is_mod"),
            verified=_bool(payload, "verified"),
        )


@dataclass(frozen=True, slots=True)
class ErrorResponse:
    """Machine-readable error body.

    Reddit answers OAuth failures with ``{"error": "invalid_grant"}`` and
    API failures with ``{"message": "Unauthorized", "error": 401}``; both
    are normalised to string fields.
    """

    error: str
    message: str

    @classmethod
    def parse(cls, body: bytes) -> ErrorResponse | None:
        """Return the structured error in ``body`` or ``None`` if there is none."""
        try:
            payload = load_object(body)
        except DecodeError:
            return None
        # An object without either key is not an error body Reddit produces.
        if "error" not in payload and "message" not in payload:
            return None
        return cls(error=_str(payload, "error"), message=_str(payload, "message"))
