"""Generate an HS256 identity token for the expense dashboard API (no external deps).

Usage:
  export EXP_JWT_SECRET="your-secret"
  python scripts/generate_jwt.py --sub u-1 --email owner@acme.test \
      --global-role company_admin --company acme:admin --company globex:viewer
"""

from __future__ import annotations

import argparse
import base64
import hashlib
import hmac
import json
import os
import time


GLOBAL_ROLES = ["super_admin", "company_owner", "company_admin", "member"]
COMPANY_ROLES = {"owner", "admin", "manager", "member", "viewer"}


def b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def make_jwt(*, claims: dict, secret: str, exp_seconds: int) -> str:
    header = {"alg": "HS256", "typ": "JWT"}
    payload = dict(claims, exp=int(time.time()) + exp_seconds)

    header_b64 = b64url(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = b64url(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    sig = hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()
    return f"{header_b64}.{payload_b64}.{b64url(sig)}"


def _company_role(raw: str) -> dict:
    company_id, sep, role = raw.partition(":")
    if not sep or not company_id or role not in COMPANY_ROLES:
        raise argparse.ArgumentTypeError(f"expected COMPANY_ID:ROLE with ROLE in {sorted(COMPANY_ROLES)}")
    return {"company_id": company_id, "role": role}


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--sub", required=True)
    ap.add_argument("--email", default="")
    ap.add_argument("--global-role", default="member", choices=GLOBAL_ROLES)
    ap.add_argument("--company", action="append", type=_company_role, default=[])
    ap.add_argument("--exp-seconds", type=int, default=60 * 60 * 12)  # 12h
    args = ap.parse_args()

    secret = os.environ.get("EXP_JWT_SECRET")
    if not secret:
        raise SystemExit("Missing EXP_JWT_SECRET in environment.")

    seen = [c["company_id"] for c in args.company]
    if len(seen) != len(set(seen)):
        raise SystemExit("Each company may be given only once.")

    claims = {
        "sub": args.sub,
        "email": args.email,
        "global_role": args.global_role,
        "company_roles": args.company,
    }
    print(make_jwt(claims=claims, secret=secret, exp_seconds=args.exp_seconds))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
