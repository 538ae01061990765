import html
import logging
from typing import List

from fastapi import Depends, FastAPI, Request
from starlette.responses import HTMLResponse

from oauth2_server.config import get_settings
from oauth2_server.oauth.authorize import AuthorizationResult, Denied, Granted, InProgress
from oauth2_server.oauth.codes import OOB_REDIRECT_URI
from oauth2_server.oauth.models import AccessToken, Client
from oauth2_server.oauth.scope import EnumScope, StandardScope
from oauth2_server.oauth.server import OAuth
from oauth2_server.storage.memory import get_backend

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def consent_page(request: Request, client: Client, scopes: List[StandardScope]) -> HTMLResponse:
    scope_list = ", ".join(html.escape(scope.value) for scope in scopes)
    html_content = f"""
    <!DOCTYPE html>
    <html>
    <head><title>Authorize Application</title></head>
    <body>
        <p>{html.escape(client.client_id)} requests: {scope_list}</p>
        <form method="POST" action="/auth?{html.escape(request.url.query)}">
            <button type="submit" name="decision" value="allow">Allow</button>
            <button type="submit" name="decision" value="deny">Deny</button>
        </form>
    </body>
    </html>
    """
    return HTMLResponse(content=html_content)


async def consent_handler(request: Request, client: Client,
                          scopes: List[StandardScope]) -> AuthorizationResult:
    """Resource owner decision: show a consent page, then read the button pressed."""
    if request.method != "POST":
        return InProgress(consent_page(request, client, scopes))

    form = await request.form()
    if form.get("decision") == "allow":
        return Granted()
    return Denied()


oauth = OAuth(
    get_backend(),
    EnumScope(StandardScope, default=[StandardScope.READ]),
    authorize_handler=consent_handler,
    settings=settings,
)
oauth.register_client("demo-web", f"{settings.SERVER_URI}/callback")
oauth.register_client("demo-cli", OOB_REDIRECT_URI)

app = FastAPI(title="OAuth 2 Authorization Server")
app.include_router(oauth.router)


@app.get("/callback")
async def callback(request: Request):
    """Landing page for the demo web client."""
    return dict(request.query_params)


@app.get("/me")
async def me(token: AccessToken = Depends(oauth.protect(StandardScope.PROFILE))):
    """Protected resource: who the token was issued to"""
    return {
        "client_id": token.client.client_id,
        "scope": sorted(scope.value for scope in token.scope),
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


def main() -> None:
    """Entry point to start the authorization server."""
    import uvicorn

    logger.info(f"Starting OAuth server on {settings.SERVER_URI}")
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
