"""
Editor API routes: sidebar chat, toolbar edits and provider status.

AI routes never fail because of a provider: the orchestrator falls back to
the offline simulation. Only malformed requests are rejected (422).
"""

from fastapi import HTTPException

from models import ChatRequest, EditIntent, EditRequest, EditResponse
from text_transform import apply_replacement

from .app_state import app, get_document_store, get_orchestrator, logger


@app.post("/api/chat")
async def chat(request: ChatRequest):
    """
    Answer a chat message about the current document.

    Returns:
        {"action": "chat"|"modify", "message": str, "newContent"?: str}
    """
    turn = await get_orchestrator().chat_respond(request.message, request.document)
    return turn.model_dump(by_alias=True, exclude_none=True, mode="json")


@app.post("/api/edit")
async def edit(request: EditRequest):
    """
    Edit a selection for a toolbar intent.

    When both ``range`` and ``document`` are given, the response also carries
    ``updatedDocument`` with the edited selection spliced in.
    """
    if request.range is not None and request.document is not None:
        start, end = request.range.as_tuple()
        if end > len(request.document):
            raise HTTPException(status_code=422, detail="range extends past the end of the document")

    result = await get_orchestrator().edit_selection(
        request.intent,
        request.text,
        request.custom_instruction if request.intent == EditIntent.CUSTOM else None,
    )

    updated_document = None
    if request.range is not None and request.document is not None:
        start, end = request.range.as_tuple()
        updated_document = apply_replacement(request.document, start, end, result.edited_text)

    response = EditResponse(**result.model_dump(), updated_document=updated_document)
    logger.debug("Edit %s handled by %s", result.intent.value, result.provider)
    return response.model_dump(by_alias=True, exclude_none=True, mode="json")


@app.get("/api/providers")
async def providers():
    orchestrator = get_orchestrator()
    return {
        "active": orchestrator.selector.select().name,
        "providers": orchestrator.provider_status(),
    }


@app.get("/api/document")
async def current_document():
    """Current snapshot held by the document store."""
    store = get_document_store()
    return {"document": store.document, "revision": store.revision, "clients": store.client_count}


@app.get("/health")
async def health():
    return {
        "status": "ok",
        "active_provider": get_orchestrator().selector.select().name,
        "sync_clients": get_document_store().client_count,
    }
