import argparse
import logging

from collage_api.security import issue_admin_token
from collage_api.settings import settings

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Mint an admin token for the collage API")
    ap.add_argument(
        "--ttl",
        type=int,
        default=settings.ADMIN_TOKEN_TTL_SECONDS,
        help="token lifetime in seconds",
    )
    ap.add_argument("--sub", default=None, help="optional subject claim")
    return ap


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    claims = {"sub": args.sub} if args.sub else {}
    try:
        token = issue_admin_token(settings.ADMIN_JWT_SECRET, args.ttl, **claims)
    except ValueError as e:
        logger.error(f"Cannot issue token: {e}")
        return 1
    print(token)
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    raise SystemExit(main())
