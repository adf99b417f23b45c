# cocopik/routers/landing.py
# HTML-страница по ссылке-приглашению /g/{code}.

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from starlette import status
from sqlalchemy.orm import Session

from cocopik.db import get_db
from cocopik.services import groups as group_service
from cocopik.utils.groups import build_invite_url, group_projection

log = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

router = APIRouter()

# код причины → (статус, заголовок, текст) для страницы ошибки
_ERROR_PAGES = {
    "group_not_found": (
        status.HTTP_404_NOT_FOUND,
        "Group Not Found",
        "The invite link you followed is invalid or has expired.",
    ),
    "group_expired": (
        status.HTTP_410_GONE,
        "Invitation Expired",
        "This group invitation has expired.",
    ),
}


def _error_page(request: Request, status_code: int, title: str, message: str) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "error.html",
        {"title": title, "message": message},
        status_code=status_code,
    )


@router.get("/g/{code}", response_class=HTMLResponse, include_in_schema=False)
def group_landing_page(code: str, request: Request, db: Session = Depends(get_db)):
    """
    Лендинг приглашения: название, описание, модель, участники.
    Ошибки отдаём тоже HTML-страницей (404/410/500), а не JSON.
    """
    try:
        group = group_service.get_group_by_code(db, code)
    except ValueError as e:
        page = _ERROR_PAGES.get(str(e))
        if page is None:
            log.exception("landing: unexpected error for code %s", code)
            return _error_page(request, 500, "Error", "An error occurred while loading the group.")
        return _error_page(request, *page)
    except Exception:
        log.exception("landing: failed to load group %s", code)
        return _error_page(request, 500, "Error", "An error occurred while loading the group.")

    return templates.TemplateResponse(
        request,
        "group_landing.html",
        {
            "group": group_projection(group, request=request),
            "invite_url": build_invite_url(request, code),
        },
    )
