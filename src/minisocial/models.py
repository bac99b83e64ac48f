# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Document shapes for the two collections (users, posts)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from bson import ObjectId


class Privacy(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"

    @classmethod
    def parse(cls, value: str) -> "Privacy":
        v = str(value or "").strip().lower()
        try:
            return cls(v)
        except ValueError:
            raise ValueError(f"Unknown privacy setting '{value}'") from None


@dataclass(frozen=True)
class User:
    id: ObjectId
    username: str
    name: str
    email: str
    password: str
    age: Optional[int] = None
    privacy: Privacy = Privacy.PUBLIC
    posts: List[ObjectId] = field(default_factory=list)

    @property
    def is_public(self) -> bool:
        return self.privacy is Privacy.PUBLIC

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "User":
        return cls(
            id=doc["_id"],
            username=str(doc.get("username") or ""),
            name=str(doc.get("name") or ""),
            email=str(doc.get("email") or ""),
            password=str(doc.get("password") or ""),
            age=doc.get("age"),
            privacy=Privacy.parse(doc.get("privacy") or Privacy.PUBLIC.value),
            posts=list(doc.get("posts") or []),
        )


@dataclass(frozen=True)
class Post:
    id: ObjectId
    user: ObjectId
    content: str
    likes: List[ObjectId] = field(default_factory=list)
    created_at: Optional[datetime] = None

    def is_liked_by(self, user_id: str) -> bool:
        return any(str(uid) == str(user_id) for uid in self.likes)

    @property
    def like_count(self) -> int:
        return len(self.likes)

    @classmethod
    def from_doc(cls, doc: Dict[str, Any]) -> "Post":
        return cls(
            id=doc["_id"],
            user=doc["user"],
            content=str(doc.get("content") or ""),
            likes=list(doc.get("likes") or []),
            created_at=doc.get("created_at"),
        )
