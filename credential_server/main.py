"""
Credential Server: verify -> issue temporary credential -> prove possession -> session.
State is in memory only; restarting the process forgets every token.
Port 8080 by default.
"""
import asyncio
import contextlib
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from credential_server.cleanup import sweep_forever
from credential_server.config import CORS_ALLOW_ORIGINS, HOST, PORT, SWEEP_INTERVAL_SECONDS
from credential_server.issuance import router as issuance_router
from credential_server.preferences import router as preferences_router
from credential_server.proof import router as proof_router
from credential_server.state import AppState, create_state
from credential_server.verification import router as verification_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the expiry sweeper; cancel it on shutdown."""
    task = asyncio.create_task(sweep_forever(app.state.credential_state, SWEEP_INTERVAL_SECONDS))
    try:
        yield
    finally:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


def create_app(state: AppState | None = None) -> FastAPI:
    """Build the app around the given state (fresh stores if None)."""
    app = FastAPI(title="Credential Server", version="0.1.0", lifespan=lifespan)
    app.state.credential_state = state or create_state()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ALLOW_ORIGINS,
        allow_methods=["POST"],
        allow_headers=["*"],
    )
    app.include_router(verification_router, tags=["step1"])
    app.include_router(issuance_router, tags=["step2"])
    app.include_router(proof_router, tags=["step3"])
    app.include_router(preferences_router, tags=["preferences"])

    @app.get("/health")
    def health():
        """Health check endpoint."""
        return {"status": "ok", "service": "credential_server"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "credential_server.main:app",
        host=HOST,
        port=PORT,
    )
