"""Feedback, profile and trigger endpoints served alongside the batch digest."""

import logging
import os
import secrets
import subprocess
import sys
from collections.abc import Callable
from html import escape
from pathlib import Path
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from pydantic import BaseModel

from hn_digest import __version__
from hn_digest.config import Settings
from hn_digest.core import ItemStore, Rating, ValidationError
from hn_digest.use_cases import FeedbackService

logger = logging.getLogger(__name__)

THANKS_PAGE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Feedback Recorded</title>
  <style>
    body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
           display: flex; justify-content: center; align-items: center; height: 100vh;
           margin: 0; background: #f5f5f5; }}
    .container {{ text-align: center; padding: 40px; background: white; border-radius: 12px;
                 box-shadow: 0 2px 8px rgba(0,0,0,0.1); max-width: 400px; }}
    .icon {{ font-size: 64px; margin-bottom: 20px; }}
    h1 {{ color: #333; margin: 0 0 10px 0; font-size: 24px; }}
    p {{ color: #666; line-height: 1.6; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="icon">{icon}</div>
    <h1>Thanks for your feedback!</h1>
    <p>Your preference for "{title}" has been recorded and will help improve future story recommendations.</p>
  </div>
</body>
</html>"""


class InterestsPayload(BaseModel):
    secret: Optional[str] = None
    interests: Any = None


class TermPayload(BaseModel):
    secret: Optional[str] = None
    interest: Any = None
    term: Any = None


def spawn_digest_process(config_path: Optional[Path] = None) -> None:
    """Start a digest run as a detached child process and return at once."""
    command = [sys.executable, "-m", "hn_digest.cli"]
    if config_path is not None:
        command.extend(["--config", str(config_path)])
    subprocess.Popen(command, env=os.environ.copy(), start_new_session=True)


def create_app(
    settings: Settings,
    store: ItemStore,
    trigger: Optional[Callable[[], None]] = None,
) -> FastAPI:
    """Build the API around an explicit settings object and store."""
    app = FastAPI(title="HN Digest", version=__version__)
    feedback_service = FeedbackService(store)
    start_digest = trigger or spawn_digest_process
    
    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})
    
    def authorize(secret: Optional[str]) -> None:
        """Shared-secret check in constant time; never echoes the secret."""
        expected = settings.cron_secret
        if not expected or not secret or not secrets.compare_digest(
            secret.encode("utf-8"), expected.encode("utf-8")
        ):
            raise HTTPException(status_code=401, detail="Unauthorized")
    
    def store_call(action: str, func: Callable[..., Any], *args: Any) -> Any:
        try:
            return func(*args)
        except ValidationError:
            raise
        except Exception:
            logger.exception("Store operation failed: %s", action)
            raise HTTPException(status_code=500, detail=f"Failed to {action}")
    
    @app.get("/feedback")
    def record_feedback(
        story: Optional[str] = None,
        rating: Optional[str] = None,
        title: Optional[str] = None,
        url: Optional[str] = None,
    ):
        try:
            ack = store_call(
                "save feedback", feedback_service.submit_feedback, story, rating, title, url
            )
        except ValidationError as e:
            return PlainTextResponse(str(e), status_code=400)
        
        logger.info("Feedback received: %s for story %s", ack.rating.value, ack.item_id)
        icon = "👍" if ack.rating is Rating.POSITIVE else "👎"
        return HTMLResponse(THANKS_PAGE.format(icon=icon, title=escape(title or "this story")))
    
    @app.get("/health")
    def health() -> dict[str, Any]:
        counts = store_call("load feedback", feedback_service.feedback_counts)
        return {"status": "ok", "feedbackCount": counts}
    
    @app.get("/trigger-digest")
    def trigger_digest(secret: Optional[str] = None) -> dict[str, str]:
        authorize(secret)
        logger.info("Digest triggered via endpoint")
        try:
            start_digest()
        except OSError:
            logger.exception("Could not start digest process")
            raise HTTPException(status_code=500, detail="Failed to start digest")
        return {"status": "started", "message": "Digest generation started in background"}
    
    @app.get("/interests")
    def list_interests() -> dict[str, Any]:
        interests = store_call("load interests", feedback_service.list_interests)
        return {"count": len(interests), "interests": interests}
    
    @app.post("/interests")
    def replace_interests(payload: InterestsPayload) -> dict[str, Any]:
        authorize(payload.secret)
        interests = store_call("save interests", feedback_service.replace_interests, payload.interests)
        return {
            "success": True,
            "message": f"Updated interests ({len(interests)} total)",
            "interests": interests,
        }
    
    @app.post("/interests/add")
    def add_interest(payload: TermPayload) -> dict[str, Any]:
        authorize(payload.secret)
        interests = store_call("add interest", feedback_service.add_interest, payload.interest)
        return {
            "success": True,
            "message": f"Added interest: {str(payload.interest).strip()}",
            "interests": interests,
        }
    
    @app.delete("/interests/{interest}")
    def remove_interest(interest: str, secret: Optional[str] = None) -> dict[str, Any]:
        authorize(secret)
        interests = store_call("remove interest", feedback_service.remove_interest, interest)
        return {"success": True, "message": f"Removed interest: {interest}", "interests": interests}
    
    @app.get("/excluded")
    def list_excluded() -> dict[str, Any]:
        excluded = store_call("load excluded terms", feedback_service.list_excluded)
        return {"count": len(excluded), "excluded": excluded}
    
    @app.post("/excluded/add")
    def add_excluded(payload: TermPayload) -> dict[str, Any]:
        authorize(payload.secret)
        excluded = store_call("add excluded term", feedback_service.add_excluded, payload.term)
        return {
            "success": True,
            "message": f"Added excluded term: {str(payload.term).strip()}",
            "excluded": excluded,
        }
    
    @app.delete("/excluded/{term}")
    def remove_excluded(term: str, secret: Optional[str] = None) -> dict[str, Any]:
        authorize(secret)
        excluded = store_call("remove excluded term", feedback_service.remove_excluded, term)
        return {"success": True, "message": f"Removed excluded term: {term}", "excluded": excluded}
    
    return app
