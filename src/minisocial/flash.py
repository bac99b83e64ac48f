# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""One-shot notices kept in the signed session cookie between a redirect and the next render."""

from __future__ import annotations

from typing import Dict, List

from fastapi import Request

_KEY = "_flash"


def flash(request: Request, category: str, message: str) -> None:
    pending = list(request.session.get(_KEY) or [])
    pending.append([category, message])
    request.session[_KEY] = pending


def pop_flashes(request: Request) -> Dict[str, List[str]]:
    out: Dict[str, List[str]] = {"success": [], "error": []}
    for category, message in request.session.pop(_KEY, None) or []:
        out.setdefault(category, []).append(message)
    return out
