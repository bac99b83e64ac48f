# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""MongoDB access: client construction, collection accessors and indexes."""

from __future__ import annotations

import logging

from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import PyMongoError

from minisocial.config import Settings

logger = logging.getLogger(__name__)

USERS = "users"
POSTS = "posts"


def connect(settings: Settings) -> Database:
    """Open the client and return the configured database.

    pymongo connects lazily; the ping only reports reachability, a failure is
    logged and the app keeps starting.
    """
    client: MongoClient = MongoClient(
        settings.mongodb_uri,
        serverSelectionTimeoutMS=settings.mongo_timeout_ms,
    )
    db = client[settings.db_name]
    try:
        client.admin.command("ping")
        logger.info("Connected to MongoDB (database=%s)", settings.db_name)
    except PyMongoError as exc:
        logger.error("MongoDB connection error: %s", exc)
    return db


def ensure_indexes(db: Database) -> None:
    try:
        users(db).create_index([("email", ASCENDING)], unique=True)
        users(db).create_index([("username", ASCENDING)], unique=True)
        posts(db).create_index([("user", ASCENDING)])
    except PyMongoError as exc:
        logger.error("Could not create indexes: %s", exc)


def users(db: Database) -> Collection:
    return db[USERS]


def posts(db: Database) -> Collection:
    return db[POSTS]
