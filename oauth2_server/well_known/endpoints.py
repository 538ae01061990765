from fastapi import APIRouter

from oauth2_server.oauth.schemas import AuthorizationServerMetadata


def build_metadata_router(oauth) -> APIRouter:
    router = APIRouter()
    base = oauth.settings.SERVER_URI.rstrip("/")

    @router.get("/.well-known/oauth-authorization-server",
                response_model=AuthorizationServerMetadata,
                response_model_exclude_none=True)
    async def authorization_server_metadata():
        """RFC 8414 - Authorization Server Metadata"""
        return AuthorizationServerMetadata(
            issuer=base,
            authorization_endpoint=f"{base}/auth",
            token_endpoint=f"{base}/token",
            scopes_supported=oauth.scopes.scopes_supported(),
        )

    return router
