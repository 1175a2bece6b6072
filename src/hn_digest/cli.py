"""CLI entry points: one digest run, or the feedback server."""

import asyncio
import logging
from datetime import date
from pathlib import Path
from typing import Optional

import httpx
import typer

from hn_digest.adapters.digest import HTMLDigestGenerator
from hn_digest.adapters.llm import ClaudeClient
from hn_digest.adapters.notifications import FileNotifier, build_notifier
from hn_digest.adapters.sources import HackerNewsSource, HTMLArticleFetcher
from hn_digest.adapters.storage import build_store
from hn_digest.config import Settings, get_settings
from hn_digest.core import DigestError, ItemStore, RelevanceClassifier, StoryEnricher
from hn_digest.use_cases import DigestService


def build_digest_service(settings: Settings, store: ItemStore, dry_run: bool = False) -> DigestService:
    """Wire the digest service from settings."""
    llm_client = ClaudeClient(settings)
    notifier = FileNotifier(settings.delivery.output_dir) if dry_run else build_notifier(settings)
    
    return DigestService(
        store=store,
        source=HackerNewsSource(
            base_url=settings.source.base_url,
            comment_depth=settings.source.comment_depth,
            timeout=settings.source.timeout,
        ),
        article_fetcher=HTMLArticleFetcher(
            timeout=settings.article.timeout,
            max_chars=settings.article.max_chars,
            user_agent=settings.article.user_agent,
        ),
        classifier=RelevanceClassifier(llm_client),
        enricher=StoryEnricher(llm_client),
        digest_generator=HTMLDigestGenerator(settings.delivery.feedback_url),
        notification_service=notifier,
        quota=settings.quota,
        item_delay=settings.digest.item_delay,
        history_expiry_days=settings.history_expiry_days,
        max_candidates=settings.source.max_candidates,
        max_comments=settings.source.max_comments,
        email_to=settings.delivery.email_to,
        email_from=settings.delivery.email_from,
    )


def prepare_store(settings: Settings) -> ItemStore:
    """Create the schema and seed interests on first use."""
    store = build_store(settings.storage)
    store.initialize()
    if store.seed_interests(settings.interests):
        print(f"✓ Seeded {len(settings.interests)} interests from config")
    if settings.excluded and not store.load_excluded():
        store.replace_excluded(settings.excluded)
    return store


def main(
    config: Path = typer.Option(Path("config.yaml"), "--config", help="Path to config.yaml"),
    quota: Optional[int] = typer.Option(None, "--quota", help="Maximum stories in the digest"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Write the digest to a file instead of sending it"),
) -> None:
    """Build today's Hacker News digest and deliver it."""
    try:
        asyncio.run(async_run(config, quota, dry_run))
    except (DigestError, httpx.HTTPError) as e:
        print(f"\n❌ {type(e).__name__}: {e}")
        raise typer.Exit(code=1)


async def async_run(config: Path, quota: Optional[int], dry_run: bool) -> None:
    """Async implementation of run command."""
    settings = get_settings(config)
    
    print("\n" + "=" * 70)
    print("🟧  HN DIGEST")
    print("=" * 70)
    
    if not settings.anthropic_api_key:
        print("  ⚠️  ANTHROPIC_API_KEY not set, classification will fail")
    
    store = prepare_store(settings)
    service = build_digest_service(settings, store, dry_run=dry_run)
    
    entries = await service.generate_and_deliver(quota=quota, digest_date=date.today())
    
    print("\n" + "=" * 70)
    print(f"✅ Done! {len(entries)} stories in the digest")
    print("=" * 70)


def serve(
    config: Path = typer.Option(Path("config.yaml"), "--config", help="Path to config.yaml"),
    host: Optional[str] = typer.Option(None, "--host"),
    port: Optional[int] = typer.Option(None, "--port"),
) -> None:
    """Run the feedback and trigger server."""
    import uvicorn
    
    from hn_digest.api import create_app, spawn_digest_process
    
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    
    settings = get_settings(config)
    store = prepare_store(settings)
    if not settings.cron_secret:
        logging.getLogger(__name__).warning("CRON_SECRET not set, protected endpoints will reject all calls")
    
    api = create_app(settings, store, trigger=lambda: spawn_digest_process(config))
    uvicorn.run(api, host=host or settings.server.host, port=port or settings.server.port)


def app() -> None:
    """CLI entry point."""
    typer.run(main)


def server_app() -> None:
    """Server entry point."""
    typer.run(serve)


if __name__ == "__main__":
    app()
