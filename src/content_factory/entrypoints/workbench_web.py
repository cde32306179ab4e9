from __future__ import annotations

import asyncio
import json
import socket
import sys
import threading
import webbrowser
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import uvicorn
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response, StreamingResponse
from starlette.routing import Route

from content_factory.domain.models import ProcessingStatus
from content_factory.dossier import render_dossier
from content_factory.errors import ChatError
from content_factory.transcript_input import MAX_TRANSCRIPT_BYTES, TranscriptInputError, load_transcript_bytes
from content_factory.workbench_state import InvalidTransitionError, Workbench, build_workbench

_SHUTDOWN_TIMEOUT_SECONDS = 60 * 60  # 1 hour
_WORKBENCH_HTML_PATH = Path(__file__).parent.parent / "static" / "workbench.html"
_SETTLED = frozenset({ProcessingStatus.IDLE, ProcessingStatus.COMPLETE, ProcessingStatus.ERROR})


def _start_daemon_thread(target: Callable[..., Any], *args: Any) -> None:
    thread = threading.Thread(target=target, args=args, daemon=True)
    thread.start()


def _run_generation(workbench: Workbench) -> None:
    try:
        workbench.run()
    except InvalidTransitionError as exc:
        print(f"Generation aborted: {exc}", file=sys.stderr)


class _WorkbenchApi:
    def __init__(
        self,
        *,
        workbench: Workbench,
        on_done: Callable[[], None] | None,
    ) -> None:
        self.workbench = workbench
        self.on_done = on_done

    async def _parse_json_object(self, request: Request) -> tuple[dict[str, Any] | None, Response | None]:
        raw = await request.body()
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            return None, JSONResponse({"error": "Invalid JSON"}, status_code=400)
        if not isinstance(payload, dict):
            return None, JSONResponse({"error": "Expected JSON object"}, status_code=400)
        return payload, None

    async def serve_html(self, _request: Request) -> Response:
        try:
            html = _WORKBENCH_HTML_PATH.read_text(encoding="utf-8")
        except OSError as exc:
            return PlainTextResponse(f"Failed to load workbench.html: {exc}", status_code=500)
        return HTMLResponse(html)

    async def serve_state(self, _request: Request) -> Response:
        return JSONResponse(self.workbench.state.to_json_data())

    async def serve_state_stream(self, request: Request) -> Response:
        async def event_generator() -> Any:
            last_status: ProcessingStatus | None = None
            while True:
                if await request.is_disconnected():
                    break
                state = self.workbench.state
                if state.status != last_status:
                    last_status = state.status
                    payload = {"type": "status", "status": state.status.value, "error": state.error}
                    yield f"data: {json.dumps(payload)}\n\n"
                if state.status in _SETTLED:
                    yield f"data: {json.dumps({'type': 'done', 'status': state.status.value})}\n\n"
                    break
                await asyncio.sleep(0.25)

        return StreamingResponse(
            event_generator(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
            },
        )

    async def handle_upload(self, request: Request) -> Response:
        raw = await request.body()
        try:
            transcript = load_transcript_bytes(raw)
        except TranscriptInputError as exc:
            status_code = 413 if len(raw) > MAX_TRANSCRIPT_BYTES else 400
            return JSONResponse({"error": str(exc)}, status_code=status_code)
        return JSONResponse({"transcript": transcript})

    async def handle_generate(self, request: Request) -> Response:
        payload, error_response = await self._parse_json_object(request)
        if error_response is not None:
            return error_response
        assert payload is not None

        transcript = payload.get("transcript")
        if not isinstance(transcript, str):
            return JSONResponse({"error": "transcript must be a string"}, status_code=400)

        try:
            state = self.workbench.begin(transcript)
        except TranscriptInputError as exc:
            return JSONResponse({"error": str(exc)}, status_code=400)
        except InvalidTransitionError as exc:
            return JSONResponse({"error": str(exc)}, status_code=409)

        _start_daemon_thread(_run_generation, self.workbench)
        return JSONResponse({"ok": True, "status": state.status.value})

    async def handle_chat(self, request: Request) -> Response:
        payload, error_response = await self._parse_json_object(request)
        if error_response is not None:
            return error_response
        assert payload is not None

        message = payload.get("message")
        if not isinstance(message, str) or not message.strip():
            return JSONResponse({"error": "message must be a non-empty string"}, status_code=400)

        try:
            reply = await asyncio.to_thread(self.workbench.send_chat, message)
        except ChatError as exc:
            return JSONResponse({"error": str(exc)}, status_code=409)

        history = self.workbench.state.chat_history
        return JSONResponse(
            {
                "reply": reply,
                "chat_history": [item.model_dump(mode="json") for item in history],
            },
        )

    async def handle_reset(self, _request: Request) -> Response:
        try:
            state = self.workbench.reset()
        except InvalidTransitionError as exc:
            return JSONResponse({"error": str(exc)}, status_code=409)
        return JSONResponse(state.to_json_data())

    async def serve_dossier(self, _request: Request) -> Response:
        bundle = self.workbench.state.bundle
        if bundle is None:
            return JSONResponse({"error": "No assets generated yet"}, status_code=409)
        return PlainTextResponse(render_dossier(bundle))

    async def handle_done(self, _request: Request) -> Response:
        if self.on_done is not None:
            _start_daemon_thread(self.on_done)
        return JSONResponse({"ok": True})


def create_workbench_app(
    *,
    workbench: Workbench,
    on_done: Callable[[], None] | None = None,
) -> Starlette:
    api = _WorkbenchApi(workbench=workbench, on_done=on_done)

    routes = [
        Route("/", api.serve_html, methods=["GET"]),
        Route("/api/state", api.serve_state, methods=["GET"]),
        Route("/api/state/stream", api.serve_state_stream, methods=["GET"]),
        Route("/api/transcript/upload", api.handle_upload, methods=["POST"]),
        Route("/api/generate", api.handle_generate, methods=["POST"]),
        Route("/api/chat", api.handle_chat, methods=["POST"]),
        Route("/api/reset", api.handle_reset, methods=["POST"]),
        Route("/api/dossier", api.serve_dossier, methods=["GET"]),
        Route("/api/done", api.handle_done, methods=["POST"]),
    ]

    return Starlette(routes=routes)


@dataclass
class LocalServer:
    """A workbench app bound to an ephemeral 127.0.0.1 port, not yet serving."""

    server: uvicorn.Server
    sock: socket.socket
    url: str

    def request_shutdown(self) -> None:
        self.server.should_exit = True

    def serve(self) -> None:
        try:
            self.server.run(sockets=[self.sock])
        finally:
            self.sock.close()


def bind_local_server(workbench: Workbench) -> LocalServer:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(128)
    host, port = sock.getsockname()[:2]

    def shutdown() -> None:
        server.should_exit = True

    app = create_workbench_app(workbench=workbench, on_done=shutdown)
    server = uvicorn.Server(uvicorn.Config(app=app, access_log=False, log_level="error"))
    return LocalServer(server=server, sock=sock, url=f"http://{host}:{port}/")


def run_workbench_web(*, dry_run: bool, open_browser: bool = True) -> None:
    """Launch the local workbench web UI."""
    local = bind_local_server(build_workbench(dry_run=dry_run))

    shutdown_timer = threading.Timer(_SHUTDOWN_TIMEOUT_SECONDS, local.request_shutdown)
    shutdown_timer.daemon = True
    shutdown_timer.start()

    print(f"Workbench: {local.url}", file=sys.stderr)
    if open_browser:
        webbrowser.open(local.url)
    try:
        local.serve()
    finally:
        shutdown_timer.cancel()
    print("Workbench closed.", file=sys.stderr)
