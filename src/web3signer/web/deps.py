from typing import Annotated, cast

from fastapi import Depends, Request

from web3signer.app import App
from web3signer.core.modules.session.models import SessionId, generate_session_id

# Key under which the signed session cookie stores the server-side session id
SESSION_ID_KEY = "sid"


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_session_id(request: Request) -> SessionId:
    """Get the session id from the signed session cookie, issuing one if missing."""
    session_id = request.session.get(SESSION_ID_KEY)
    if not isinstance(session_id, str) or not session_id:
        session_id = generate_session_id()
        request.session[SESSION_ID_KEY] = session_id
    return SessionId(session_id)


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
SessionIdDep = Annotated[SessionId, Depends(get_session_id)]
