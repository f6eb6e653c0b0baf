"""
Send a correctly signed test delivery to a hookrelay receiving URL.

Usage:
    python scripts/send_signed_webhook.py --url http://localhost:8080/hooks/<token> --provider github --secret s3cret
    python scripts/send_signed_webhook.py --url ... --provider stripe --secret whsec_x --body '{"type": "charge.succeeded"}'
    python scripts/send_signed_webhook.py --url ... --provider github --secret wrong --tamper
"""
import argparse
import asyncio
import logging

import httpx

from hookrelay.models.endpoint import ProviderKind
from hookrelay.providers import sign_payload

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def send(url: str, provider: str, secret: str, body: bytes, tamper: bool) -> httpx.Response:
    headers = sign_payload(provider, secret, body)
    headers["Content-Type"] = "application/json"
    if tamper:
        # Flip the last byte of the body after signing
        body = body[:-1] + bytes([body[-1] ^ 0x01]) if body else b"x"
    async with httpx.AsyncClient(timeout=30) as client:
        resp = await client.post(url, content=body, headers=headers)
        logger.info("%s delivery response: %s %s", provider, resp.status_code, resp.text)
        return resp


async def main():
    parser = argparse.ArgumentParser(description="Send a signed webhook delivery")
    parser.add_argument("--url", required=True)
    parser.add_argument("--provider", required=True, choices=[k.value for k in ProviderKind])
    parser.add_argument("--secret", required=True)
    parser.add_argument("--body", default='{"event": "test", "data": {"a": 1}}')
    parser.add_argument("--tamper", action="store_true", help="Corrupt the body after signing")
    args = parser.parse_args()

    await send(args.url, args.provider, args.secret, args.body.encode("utf-8"), args.tamper)


if __name__ == "__main__":
    asyncio.run(main())
