"""Business logic service for Linfy short links."""

import asyncio
import logging
import uuid
from typing import Optional, Dict, Any, List, Tuple
from datetime import datetime, timezone

from .shortcode import ShortCodeGenerator
from .qrcodes import QRCodeRenderer
from .database.base import LinfyDBBase, DuplicateKeyError
from .database.cache import RedisCache
from .database.models import Link
from .errors import InternalError, NotFoundError, ValidationError
from .common.validators import is_valid_url
from .common.url_builder import build_short_url


class LinkService:
    """Service layer for link creation, redirects and metrics."""

    def __init__(
        self,
        db: LinfyDBBase,
        base_url: str,
        path_prefix: str = "",
        cache: Optional[RedisCache] = None,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        qr_renderer: Optional[QRCodeRenderer] = None,
        logger: Optional[logging.Logger] = None,
        max_collision_retries: int = 5,
    ):
        """Initialize link service.

        Args:
            db: Database instance
            base_url: Origin used to build short URLs
            path_prefix: Path prefix the redirect route is mounted under
            cache: Optional Redis connection (health reporting)
            short_code_generator: Optional short code generator
            qr_renderer: Optional QR renderer
            logger: Optional logger
            max_collision_retries: Maximum retries on collision
        """
        self.db = db
        self.base_url = base_url
        self.path_prefix = path_prefix
        self.cache = cache
        self.generator = short_code_generator or ShortCodeGenerator()
        self.qr_renderer = qr_renderer or QRCodeRenderer()
        self.logger = logger or logging.getLogger(__name__)
        self.max_collision_retries = max_collision_retries
        self.started_at = datetime.now(timezone.utc)

    async def shorten(
        self,
        original_url: str,
        owner_id: Optional[str],
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[Link, bool]:
        """Create a short link, or return the owner's existing one.

        Args:
            original_url: The original long URL
            owner_id: Id of the creating user
            ip_address: Requester address (provenance)
            user_agent: Requester User-Agent (provenance)

        Returns:
            Tuple of (link, created); created is False for a dedup hit

        Raises:
            ValidationError: If the URL is invalid
            InternalError: If no unique code could be generated
        """
        # Validate URL
        is_valid, error = is_valid_url(original_url)
        if not is_valid:
            raise ValidationError(f"Invalid URL format. {error}")

        # Dedup per owner (exact string match)
        if owner_id:
            existing = await self.db.get_link_by_owner_url(owner_id, original_url)
            if existing:
                self.logger.debug(f"Existing link for owner {owner_id}: {existing.url_code}")
                return existing, False

        for code in self._candidate_codes():
            short_url = build_short_url(code, self.base_url, self.path_prefix)
            qr_code = await asyncio.to_thread(self.qr_renderer.render_data_uri, short_url)
            now = datetime.now(timezone.utc)
            link = Link(
                id=uuid.uuid4().hex,
                original_url=original_url,
                url_code=code,
                short_url=short_url,
                qr_code=qr_code,
                created_at=now,
                last_accessed=now,
                clicks=0,
                ip_address=ip_address,
                user_agent=user_agent,
                user_id=owner_id,
            )

            try:
                created = await self.db.create_link(link)
            except DuplicateKeyError as e:
                if e.field == "owner_url":
                    # A concurrent request from the same owner won
                    existing = await self.db.get_link_by_owner_url(owner_id, original_url)
                    if existing:
                        return existing, False
                    raise InternalError("Failed to create short URL")
                self.logger.debug(f"Short code collision on {code}, regenerating")
                continue

            self.logger.info(f"Created short URL: {code} -> {original_url}")
            return created, True

        raise InternalError("Unable to generate unique short code after multiple attempts")

    def _candidate_codes(self):
        """Random codes, then a UUID-derived last resort."""
        for _ in range(self.max_collision_retries):
            yield self.generator.generate_random()
        yield self.generator.generate_from_uuid()

    async def redirect(self, code: str) -> Link:
        """Count a visit and return the link to redirect to.

        Raises:
            NotFoundError: Unknown code; nothing is written
        """
        link = await self.db.increment_clicks(code, datetime.now(timezone.utc))
        if not link:
            self.logger.warning(f"Short code not found: {code}")
            raise NotFoundError("URL not found")

        self.logger.debug(f"Redirect {code} -> {link.original_url} (clicks={link.clicks})")
        return link

    async def history(self, owner_id: str) -> List[Link]:
        """List the owner's links, newest first."""
        return await self.db.list_links_by_owner(owner_id)

    async def stats(self, code: str) -> Link:
        """Get the full public record of a link.

        Raises:
            NotFoundError: Unknown code
        """
        link = await self.db.get_link_by_code(code)
        if not link:
            raise NotFoundError("URL not found")
        return link

    async def metrics(self) -> Dict[str, int]:
        """Get service-wide totals, computed on demand.

        Returns:
            Dictionary with total_users, total_urls, total_clicks
        """
        db_stats = await self.db.get_statistics()

        return {
            "total_users": db_stats["total_users"],
            "total_urls": db_stats["total_links"],
            "total_clicks": db_stats["total_clicks"] or 0,
        }

    async def health_check(self) -> Dict[str, Any]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        db_healthy = await self.db.health_check()
        cache_healthy = await self.cache.ping() if self.cache else True

        return {
            "database": db_healthy,
            "cache": cache_healthy,
            "overall": db_healthy and cache_healthy,
            "uptime": (datetime.now(timezone.utc) - self.started_at).total_seconds(),
        }

    async def close(self) -> None:
        """Close service connections."""
        await self.db.close()
        if self.cache:
            await self.cache.close()
