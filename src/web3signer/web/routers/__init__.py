from web3signer.web.routers.auth import router as auth_router
from web3signer.web.routers.messages import router as messages_router
from web3signer.web.routers.signature import router as signature_router

__all__ = [
    "auth_router",
    "messages_router",
    "signature_router",
]
