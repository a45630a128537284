# src/player/services.py
"""Credential exporters consumed by media players.

Both adapters defer to `EntitlementEngine` for every access decision and read
the same active channel catalog.
"""
import calendar
import logging
from datetime import datetime
from urllib.parse import quote
from fastapi import Request
from sqlalchemy.orm import Session
from typing import List, Optional, Tuple, Union
from admin.models import ActorType
from admin.services import AuditLog
from catalog.models import Channel
from catalog.services import ChannelService
from config import settings
from subscription.entitlement import EntitlementDecision, EntitlementEngine, Outcome, DenialReason
from subscription.models import Subscriber
from subscription.services import SubscriberService

logger = logging.getLogger(__name__)

PLAYLIST_MEDIA_TYPE = "audio/x-mpegurl"
LIVE_CATEGORY_ID = "1"


def _epoch(value: Optional[datetime]) -> Optional[int]:
    if value is None:
        return None
    return calendar.timegm(value.utctimetuple())


def _line(value: Optional[str]) -> str:
    """Keep a value on one playlist line."""
    return " ".join((value or "").splitlines()).strip()


def _attr(value: Optional[str]) -> str:
    """Make a value safe inside a double-quoted #EXTINF attribute."""
    return _line(value).replace('"', "'")


def content_disposition(username: str) -> str:
    """Attachment header for `<username>.m3u`; non-ASCII names go in the RFC 5987 `filename*` parameter."""
    filename = f"{username}.m3u"
    fallback = "".join(c for c in filename if " " <= c <= "~" and c not in '"\\')
    if fallback == filename:
        return f'attachment; filename="{filename}"'
    if fallback.startswith("."):
        fallback = "playlist" + fallback
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


class PlaylistExporter:
    def __init__(self, db: Session, audit: Optional[AuditLog] = None):
        self.db = db
        self.audit = audit or AuditLog(db)
        self.engine = EntitlementEngine(db, self.audit)
        self.channels = ChannelService(db, self.audit)
        self.subscribers = SubscriberService(db, self.audit)

    def authorize(self, username: str, auth: Optional[str], now: Optional[datetime] = None) -> EntitlementDecision:
        if settings.PLAYLIST_REQUIRE_AUTH:
            return self.engine.evaluate(username, auth, now)
        return self.engine.evaluate_without_password(username, now)

    @staticmethod
    def denial(decision: EntitlementDecision) -> Tuple[int, str]:
        """HTTP status and text body for a refused playlist request."""
        if decision.outcome is Outcome.NOT_FOUND:
            return 404, "User not found"
        if decision.outcome is Outcome.INVALID_CREDENTIALS:
            return 403, "Invalid credentials"
        if decision.reason is DenialReason.SUSPENDED:
            return 403, "User account is not active"
        return 403, "Subscription expired"

    @staticmethod
    def render(subscriber: Subscriber, channels: List[Channel]) -> str:
        lines = [
            "#EXTM3U",
            f'#EXTINF:-1 tvg-logo="" group-title="Info",User: {_line(subscriber.username)}',
            "http://",
        ]
        for channel in channels:
            lines.append(
                f'#EXTINF:-1 tvg-id="{_attr(channel.epg_id)}" tvg-logo="{_attr(channel.logo_url)}" '
                f'group-title="{_attr(channel.category)}",{_line(channel.name)}'
            )
            lines.append(_line(channel.stream_url))
        return "\n".join(lines) + "\n"

    def document(self, subscriber: Subscriber) -> str:
        return self.render(subscriber, self.channels.get_channels(active_only=True))

    def trace(self, subscriber: Subscriber, request: Request) -> None:
        """Record a delivered download: device connection plus audit entry."""
        ip_address = request.client.host if request.client else None
        self.subscribers.record_agent(subscriber, request)
        self.audit.record(ActorType.USER, subscriber.id, "Playlist Downloaded", ip_address=ip_address)
        logger.info(f"Playlist downloaded by {subscriber.username} from {ip_address}")


class PlayerApiService:
    """Xtream-Codes style player API.

    Every answer is JSON; failures are reported through an `error` field.
    """

    def __init__(self, db: Session, audit: Optional[AuditLog] = None):
        self.db = db
        self.engine = EntitlementEngine(db, audit)
        self.channels = ChannelService(db, audit)
        self.subscribers = SubscriberService(db, audit)

    def handle(
            self,
            username: Optional[str],
            password: Optional[str],
            action: Optional[str],
            request: Request,
            now: Optional[datetime] = None
    ) -> Union[dict, list]:
        decision = self.engine.authenticate(username, password)
        if not decision.granted:
            return {"error": "Invalid credentials"}
        subscriber = decision.subscriber

        if action == "get_live_categories":
            return self.live_categories()
        if action == "get_live_streams":
            return self.live_streams()
        return self.account_info(subscriber, password, request, now)

    def live_categories(self) -> List[dict]:
        categories: List[str] = []
        for channel in self.channels.get_channels(active_only=True):
            name = channel.category or "Uncategorized"
            if name not in categories:
                categories.append(name)
        return [
            {"category_id": str(i), "category_name": name, "parent_id": 0}
            for i, name in enumerate(categories, start=1)
        ]

    def live_streams(self) -> List[dict]:
        return [
            {
                "num": i,
                "name": channel.name,
                "stream_type": "live",
                "stream_id": channel.id,
                "stream_icon": channel.logo_url or "",
                "epg_channel_id": channel.epg_id,
                "added": str(_epoch(channel.created_at) or ""),
                "category_id": LIVE_CATEGORY_ID,
                "direct_source": channel.stream_url,
            }
            for i, channel in enumerate(self.channels.get_channels(active_only=True), start=1)
        ]

    def account_info(self, subscriber: Subscriber, password: str, request: Request, now: Optional[datetime] = None) -> dict:
        now = now or datetime.utcnow()
        assessment = self.engine.assess(subscriber, now)
        if assessment.granted:
            status = "Active"
        elif assessment.reason is DenialReason.EXPIRED:
            status = "Expired"
        else:
            status = "Banned"

        active_cons = self.subscribers.touch_session(subscriber, request) if assessment.granted else 0
        url = request.url
        return {
            "user_info": {
                "username": subscriber.username,
                "password": password,
                "message": "",
                "auth": 1,
                "status": status,
                "exp_date": _epoch(subscriber.expiry_date),
                "is_trial": "0",
                "active_cons": str(active_cons),
                "created_at": _epoch(subscriber.created_at),
                "max_connections": str(subscriber.max_connections),
                "allowed_output_formats": ["m3u8", "ts"],
            },
            "server_info": {
                "url": url.hostname,
                "port": str(url.port or ""),
                "https_port": "",
                "server_protocol": url.scheme,
                "rtmp_port": "",
                "timezone": settings.SERVER_TIMEZONE,
                "timestamp_now": _epoch(now),
                "time_now": now.strftime("%Y-%m-%d %H:%M:%S"),
            },
        }
