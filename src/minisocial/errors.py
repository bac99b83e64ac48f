# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations


class SocialError(ValueError):
    """Base class for user-facing failures; the message is shown as a notice."""


class DuplicateRegistration(SocialError):
    pass


class UserNotFound(SocialError):
    pass


class InvalidCredentials(SocialError):
    pass


class PostNotFound(SocialError):
    pass


class NotPostOwner(SocialError):
    pass


class PostNotVisible(SocialError):
    pass
