from fastapi import HTTPException, Request

from survey_builder.services.drafts import BackendClient, BuilderSession, HandoffSlot, SessionRegistry


def get_backend_client(request: Request) -> BackendClient:
    return request.app.state.backend_client


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.session_registry


def get_handoff_slot() -> HandoffSlot:
    return HandoffSlot()


def get_session_or_404(session_id: str, registry: SessionRegistry) -> BuilderSession:
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Builder session not found")
    return session
