"""FastAPI server backing the BillBeam mobile front end."""

from collections import OrderedDict
from typing import Annotated, Any, Literal

from fastapi import FastAPI, File, Header, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from billbeam.application.capture import CaptureRequest, Extractor, run_capture
from billbeam.application.groups import (
    create_group_from_session,
    load_group_into_session,
    start_session,
    toggle_default_group,
)
from billbeam.application.history import list_saved_receipts, load_saved_receipt, save_session_receipt
from billbeam.domain import assignment
from billbeam.domain.bill import Bill
from billbeam.domain.phase import PhaseTransitionError
from billbeam.domain.session import SplitSession
from billbeam.domain.settlement import SettlementLine, calculate_settlement, settlement_summary
from billbeam.receipt.share import format_share_text, format_whatsapp_message, whatsapp_share_url
from billbeam.runtime.logging import configure_logging, get_logger
from billbeam.runtime.paths import ProjectPaths, get_paths
from billbeam.runtime.settings import load_settings
from billbeam.runtime.storage import DocumentNotFound, InvalidUserId, JsonDocumentStore, StorageError

logger = get_logger(__name__)

UserId = Annotated[str, Header(alias="X-User-Id")]
OptionalUserId = Annotated[str | None, Header(alias="X-User-Id")]


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PersonIn(_Body):
    name: str


class ToggleIn(_Body):
    person_id: str = Field(alias="personId")


class ItemUpdateIn(_Body):
    description: str | None = None
    price: float | None = None
    original_price: float | None = Field(default=None, alias="originalPrice")
    discount: float | None = None


class TotalsIn(_Body):
    tax: float | None = None
    tip: float | None = None
    miscellaneous: float | None = None


class SplitModeIn(_Body):
    mode: Literal["equal", "manual"]


class PhaseIn(_Body):
    phase: Literal["capture", "assignment", "settlement"]


class GroupIn(_Body):
    name: str
    session_id: str = Field(alias="sessionId")


class GroupUpdateIn(_Body):
    name: str | None = None
    session_id: str | None = Field(default=None, alias="sessionId")


class PreferencesIn(_Body):
    default_group_id: str | None = Field(default=None, alias="defaultGroupId")


class DefaultGroupToggleIn(_Body):
    group_id: str = Field(alias="groupId")


def _line_payload(line: SettlementLine) -> dict[str, Any]:
    return {
        "person": line.person.to_dict(),
        "items": [
            {"itemId": share.item.id, "description": share.item.description, "sharePrice": share.share_price}
            for share in line.item_shares
        ],
        "subtotal": line.subtotal,
        "extraCost": line.extra_cost,
        "total": line.total,
    }


def _settlement_payload(lines: list[SettlementLine], bill: Bill) -> dict[str, Any]:
    summary = settlement_summary(lines, bill)
    return {
        "lines": [_line_payload(line) for line in lines],
        "settledTotal": summary.settled_total,
        "billTotal": summary.bill_total,
        "drift": summary.drift,
    }


def create_app(
    extractor: Extractor | None = None,
    paths: ProjectPaths | None = None,
    max_sessions: int | None = None,
) -> FastAPI:
    """Build the API. ``extractor``, ``paths`` and ``max_sessions`` are overridable for tests."""
    app = FastAPI(title="BillBeam")
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    session_limit = max_sessions if max_sessions is not None else load_settings().max_sessions
    sessions: OrderedDict[str, SplitSession] = OrderedDict()
    app.state.sessions = sessions

    def _store(user_id: str) -> JsonDocumentStore:
        return JsonDocumentStore(user_id, paths or get_paths())

    def _session(session_id: str) -> SplitSession:
        session = sessions.get(session_id)
        if session is None:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        sessions.move_to_end(session_id)
        return session

    def _register(session: SplitSession) -> None:
        sessions[session.id] = session
        while len(sessions) > session_limit:
            evicted_id, _ = sessions.popitem(last=False)
            logger.info("Evicted idle session %s", evicted_id)

    def _require_bill(session: SplitSession) -> Bill:
        if session.bill is None:
            raise HTTPException(status_code=409, detail="No receipt captured yet")
        return session.bill

    @app.exception_handler(PhaseTransitionError)
    async def _phase_error(request: Request, exc: PhaseTransitionError) -> JSONResponse:
        return JSONResponse({"status": "error", "message": str(exc)}, status_code=409)

    @app.exception_handler(DocumentNotFound)
    async def _not_found(request: Request, exc: DocumentNotFound) -> JSONResponse:
        return JSONResponse({"status": "error", "message": str(exc)}, status_code=404)

    @app.exception_handler(InvalidUserId)
    async def _bad_user(request: Request, exc: InvalidUserId) -> JSONResponse:
        return JSONResponse({"status": "error", "message": str(exc)}, status_code=400)

    @app.exception_handler(StorageError)
    async def _storage_error(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("Storage failure on %s: %s", request.url.path, exc)
        return JSONResponse({"status": "error", "message": str(exc)}, status_code=503)

    @app.get("/health")
    def health() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok"}

    # --- session lifecycle ---
    @app.post("/sessions", status_code=201)
    def create_session(x_user_id: OptionalUserId = None) -> dict[str, Any]:
        store = _store(x_user_id) if x_user_id else None
        session = start_session(store)
        _register(session)
        logger.info("Started session %s", session.id)
        return session.to_dict()

    @app.get("/sessions/{session_id}")
    def get_session(session_id: str) -> dict[str, Any]:
        return _session(session_id).to_dict()

    @app.delete("/sessions/{session_id}", status_code=204)
    def delete_session(session_id: str) -> None:
        if sessions.pop(session_id, None) is None:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        logger.info("Closed session %s", session_id)

    @app.post("/sessions/{session_id}/capture")
    def capture(session_id: str, file: Annotated[UploadFile, File()]) -> JSONResponse:
        session = _session(session_id)
        contents = file.file.read()
        result = run_capture(
            session,
            CaptureRequest(
                image_bytes=contents,
                mime_type=file.content_type or "image/jpeg",
                extractor=extractor,
            ),
        )
        if result.status != "captured":
            return JSONResponse({"status": "error", "message": result.error}, status_code=422)
        return JSONResponse({"status": "success", "warnings": list(result.warnings), "session": session.to_dict()})

    @app.post("/sessions/{session_id}/reset")
    def reset(session_id: str) -> dict[str, Any]:
        session = _session(session_id)
        session.reset()
        return session.to_dict()

    @app.post("/sessions/{session_id}/phase")
    def change_phase(session_id: str, body: PhaseIn) -> dict[str, Any]:
        session = _session(session_id)
        if body.phase == "capture":
            session.reset()
        else:
            session.move_to(body.phase)
        return session.to_dict()

    # --- roster ---
    @app.post("/sessions/{session_id}/people", status_code=201)
    def add_person(session_id: str, body: PersonIn) -> dict[str, Any]:
        session = _session(session_id)
        try:
            person = session.add_person(body.name)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return person.to_dict()

    @app.delete("/sessions/{session_id}/people/{person_id}")
    def remove_person(session_id: str, person_id: str) -> dict[str, Any]:
        session = _session(session_id)
        session.remove_person(person_id)
        return session.to_dict()

    # --- assignment and bill edits ---
    @app.post("/sessions/{session_id}/items/{item_id}/toggle")
    def toggle(session_id: str, item_id: str, body: ToggleIn) -> dict[str, Any]:
        session = _session(session_id)
        _require_bill(session)
        session.toggle_assignment(item_id, body.person_id)
        return session.to_dict()

    @app.patch("/sessions/{session_id}/items/{item_id}")
    def edit_item(session_id: str, item_id: str, body: ItemUpdateIn) -> dict[str, Any]:
        session = _session(session_id)
        bill = _require_bill(session)
        assignment.update_item(bill, item_id, **body.model_dump(exclude_unset=True))
        return session.to_dict()

    @app.patch("/sessions/{session_id}/totals")
    def edit_totals(session_id: str, body: TotalsIn) -> dict[str, Any]:
        session = _session(session_id)
        bill = _require_bill(session)
        assignment.update_receipt_totals(bill, tax=body.tax, tip=body.tip, miscellaneous=body.miscellaneous)
        return session.to_dict()

    @app.post("/sessions/{session_id}/split-mode")
    def split_mode(session_id: str, body: SplitModeIn) -> dict[str, Any]:
        session = _session(session_id)
        _require_bill(session)
        session.set_split_mode(body.mode)
        return session.to_dict()

    # --- settlement and sharing ---
    @app.get("/sessions/{session_id}/settlement")
    def settlement(session_id: str, round_to_dollar: bool = False) -> dict[str, Any]:
        session = _session(session_id)
        bill = _require_bill(session)
        lines = calculate_settlement(bill, session.people, round_to_dollar=round_to_dollar)
        return _settlement_payload(lines, bill)

    @app.get("/sessions/{session_id}/share")
    def share(session_id: str, round_to_dollar: bool = False) -> dict[str, str]:
        session = _session(session_id)
        bill = _require_bill(session)
        lines = calculate_settlement(bill, session.people, round_to_dollar=round_to_dollar)
        message = format_whatsapp_message(lines, bill)
        return {
            "text": format_share_text(lines, bill),
            "whatsappText": message,
            "whatsappUrl": whatsapp_share_url(message),
        }

    # --- saved receipts ---
    @app.post("/sessions/{session_id}/save")
    def save(session_id: str, x_user_id: UserId) -> dict[str, Any]:
        session = _session(session_id)
        result = save_session_receipt(session, _store(x_user_id))
        if result.status == "nothing_to_save":
            raise HTTPException(status_code=409, detail="No receipt captured yet")
        return {"status": result.status, "receiptId": result.receipt_id}

    @app.post("/sessions/{session_id}/load/{receipt_id}")
    def load(session_id: str, receipt_id: str, x_user_id: UserId) -> dict[str, Any]:
        session = _session(session_id)
        load_saved_receipt(session, _store(x_user_id), receipt_id)
        return session.to_dict()

    @app.get("/receipts")
    def receipts(x_user_id: UserId) -> list[dict[str, Any]]:
        return [
            {
                "id": saved.id,
                "receipt": saved.bill.to_dict(),
                "people": [person.to_dict() for person in saved.people],
                "createdAt": saved.created_at.isoformat(),
            }
            for saved in list_saved_receipts(_store(x_user_id))
        ]

    @app.delete("/receipts/{receipt_id}", status_code=204)
    def delete_receipt(receipt_id: str, x_user_id: UserId) -> None:
        _store(x_user_id).delete_receipt(receipt_id)

    # --- groups and preferences ---
    @app.get("/groups")
    def groups(x_user_id: UserId) -> list[dict[str, Any]]:
        return [
            {
                "id": group.id,
                "name": group.name,
                "people": [person.to_dict() for person in group.people],
                "createdAt": group.created_at.isoformat(),
            }
            for group in _store(x_user_id).list_groups()
        ]

    @app.post("/groups", status_code=201)
    def create_group(body: GroupIn, x_user_id: UserId) -> dict[str, str]:
        session = _session(body.session_id)
        try:
            group_id = create_group_from_session(session, _store(x_user_id), body.name)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return {"id": group_id}

    @app.patch("/groups/{group_id}")
    def update_group(group_id: str, body: GroupUpdateIn, x_user_id: UserId) -> dict[str, str]:
        people = _session(body.session_id).people if body.session_id else None
        name = body.name.strip() if body.name is not None else None
        if name == "":
            raise HTTPException(status_code=422, detail="Group name must not be empty")
        _store(x_user_id).update_group(group_id, name=name, people=people)
        return {"id": group_id}

    @app.delete("/groups/{group_id}", status_code=204)
    def delete_group(group_id: str, x_user_id: UserId) -> None:
        _store(x_user_id).delete_group(group_id)

    @app.post("/sessions/{session_id}/groups/{group_id}/load")
    def load_group(session_id: str, group_id: str, x_user_id: UserId) -> dict[str, Any]:
        session = _session(session_id)
        load_group_into_session(session, _store(x_user_id), group_id)
        return session.to_dict()

    @app.get("/preferences")
    def preferences(x_user_id: UserId) -> dict[str, str | None]:
        return {"defaultGroupId": _store(x_user_id).get_preferences().default_group_id}

    @app.put("/preferences")
    def set_preferences(body: PreferencesIn, x_user_id: UserId) -> dict[str, str | None]:
        _store(x_user_id).set_default_group(body.default_group_id)
        return {"defaultGroupId": body.default_group_id}

    @app.post("/preferences/default-group/toggle")
    def toggle_default(body: DefaultGroupToggleIn, x_user_id: UserId) -> dict[str, str | None]:
        return {"defaultGroupId": toggle_default_group(_store(x_user_id), body.group_id)}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    configure_logging()
    uvicorn.run(app, host="0.0.0.0", port=8080)
