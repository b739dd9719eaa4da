"""Wiki pages — GET/POST /wiki/{title}, with the site notice area."""

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from cookie_warning.config import WEB_TEMPLATES_DIR
from cookie_warning.context import build_context
from cookie_warning.lifecycle import MODULE_FILES

router = APIRouter()
templates = Jinja2Templates(directory=str(WEB_TEMPLATES_DIR))

MAIN_PAGE = "Main_Page"


def _asset_urls(request: Request, modules: list[str]) -> list[str]:
    return [str(request.url_for("static", path=MODULE_FILES[m])) for m in modules]


@router.get("/")
def index():
    return RedirectResponse(f"/wiki/{MAIN_PAGE}")


# Plain def: the notice decision may block on a geolocation lookup
@router.api_route("/wiki/{title}", methods=["GET", "POST"])
def page(request: Request, title: str):
    config = request.app.state.config
    ctx = build_context(request, detect_ua=config.mobile_detect_ua)
    additions = request.app.state.lifecycle.on_render(ctx)

    return templates.TemplateResponse(request, "page.html", {
        "title": title.replace("_", " "),
        "user": ctx.user,
        "is_mobile": ctx.is_mobile,
        "site_notice": additions.site_notice,
        "scripts": _asset_urls(request, additions.scripts),
        "styles": _asset_urls(request, additions.styles),
        "config_vars": additions.config_vars,
    })
