# pdf_tools/usage.py
"""
Free-tier conversion tally kept on the client.

The store lives in a signed cookie and is handed to the views that show the
remaining free conversions and the upsell. Deleting the cookie resets it, so
it is a nudge, not an entitlement check.
"""
from dataclasses import asdict, dataclass

from fastapi import Request, Response
from itsdangerous import BadSignature, URLSafeSerializer

from . import config

usage_serializer = URLSafeSerializer(config.SECRET_KEY, salt="pdf-tools-usage")


@dataclass
class UsageStore:
    conversion_count: int = 0
    subscribed: bool = False
    limit: int = config.MAX_FREE_CONVERSIONS

    @property
    def remaining(self) -> int:
        return max(0, self.limit - self.conversion_count)

    @property
    def limit_reached(self) -> bool:
        return not self.subscribed and self.conversion_count >= self.limit

    def record_conversion(self) -> None:
        self.conversion_count += 1

    def subscribe(self) -> None:
        self.subscribed = True

    def to_dict(self) -> dict:
        data = asdict(self)
        data.update(remaining=self.remaining, limit_reached=self.limit_reached)
        return data

    @classmethod
    def from_request(cls, request: Request) -> "UsageStore":
        token = request.cookies.get(config.USAGE_COOKIE_NAME)
        if not token:
            return cls()
        try:
            data = usage_serializer.loads(token)
        except BadSignature:
            return cls()
        return cls(
            conversion_count=int(data.get("count", 0)),
            subscribed=bool(data.get("subscribed", False)),
        )

    def save(self, response: Response) -> None:
        response.set_cookie(
            config.USAGE_COOKIE_NAME,
            usage_serializer.dumps({"count": self.conversion_count, "subscribed": self.subscribed}),
            httponly=True,
            samesite="lax",
            secure=config.COOKIE_SECURE,
            max_age=60 * 60 * 24 * 365,
            path="/",
        )
