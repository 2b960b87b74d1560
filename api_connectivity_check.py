"""
Quick connectivity checker for the survey REST API.

Usage (examples):
  python api_connectivity_check.py                                   # anonymous GET checks
  python api_connectivity_check.py --username admin1 --password x    # log in first, then authenticated checks
  python api_connectivity_check.py --survey-id 3                     # also probe one survey, its share link and analytics
  python api_connectivity_check.py --base-url https://localhost:7126 --insecure

Notes:
- Only read requests are sent, apart from the login call.
- The share probe mints a share token locally and fetches the survey with it,
  the same way a visitor opening a shared link does.
"""
import argparse
import json
import sys
import textwrap
import time
from typing import Any, Dict, List, Optional, Tuple

import requests

from survey_site import config
from survey_site.api_client import COMPLETED_SURVEY_ENDPOINTS
from survey_site.share import SHARE_HEADER, mint_share_token


def shorten(obj: Any, length: int = 320) -> str:
    try:
        payload = json.dumps(obj, ensure_ascii=False)
    except (TypeError, ValueError):
        payload = str(obj)
    return textwrap.shorten(payload, width=length, placeholder=" ...")


def format_response(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = resp.text.strip()
    return shorten(body)


def run_request(
    session: requests.Session,
    base_url: str,
    method: str,
    path: str,
    *,
    timeout: float,
    **kwargs: Any,
) -> Tuple[bool, Dict[str, Any]]:
    url = base_url.rstrip("/") + path
    started = time.time()
    try:
        resp = session.request(method, url, timeout=timeout, **kwargs)
    except requests.RequestException as exc:
        return False, {
            "status_code": None,
            "duration_ms": round((time.time() - started) * 1000, 1),
            "preview": f"{type(exc).__name__}: {exc}",
        }
    return resp.ok, {
        "status_code": resp.status_code,
        "duration_ms": round((time.time() - started) * 1000, 1),
        "preview": format_response(resp),
    }


def login(session: requests.Session, args: argparse.Namespace) -> Optional[str]:
    """Log in and install the bearer token on the session; returns the role"""
    url = args.base_url.rstrip("/") + "/api/auth/login"
    try:
        resp = session.post(url, json={"username": args.username, "password": args.password},
                            timeout=args.timeout)
    except requests.RequestException as exc:
        print(f"[FAIL] {'Login':32} POST /api/auth/login  -> {type(exc).__name__}: {exc}")
        return None
    print(f"[{'OK' if resp.ok else 'FAIL':4}] {'Login':32} POST /api/auth/login  -> {resp.status_code}")
    if not resp.ok:
        print(f"       preview: {format_response(resp)}")
        return None
    try:
        data = resp.json() if resp.content else {}
    except ValueError:
        data = {}
    token = data.get("token")
    if token:
        session.headers["Authorization"] = f"Bearer {token}"
    return data.get("role")


def build_tests(args: argparse.Namespace, role: Optional[str]) -> List[Dict[str, Any]]:
    tests: List[Dict[str, Any]] = []

    def add(name: str, method: str, path: str, *, run: bool = True, **kwargs: Any) -> None:
        if run:
            tests.append({"name": name, "method": method, "path": path, "kwargs": kwargs})

    authenticated = role is not None
    survey_id = args.survey_id

    add("List surveys", "GET", "/api/surveys")
    for path in COMPLETED_SURVEY_ENDPOINTS:
        add(f"Completed surveys {path.rsplit('/', 2)[-2]}", "GET", path, run=authenticated)

    add("Survey detail", "GET", f"/api/surveys/{survey_id}", run=bool(survey_id))
    if survey_id:
        token = mint_share_token(survey_id)
        add("Survey via share link", "GET", f"/api/surveys/{survey_id}",
            params={"share": token}, headers={SHARE_HEADER: token})
    add("My answers", "GET", f"/api/surveys/{survey_id}/responses/user/me/answers",
        run=bool(survey_id) and authenticated)
    add("Responses", "GET", f"/api/surveys/{survey_id}/responses",
        run=bool(survey_id) and role == "Admin")
    add("Analytics", "GET", f"/api/analytics/{survey_id}",
        run=bool(survey_id) and role == "Admin")
    return tests


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Survey API connectivity smoke tester")
    parser.add_argument(
        "--base-url",
        default=config.API_BASE_URL,
        help=f"API base URL (default: {config.API_BASE_URL})",
    )
    parser.add_argument("--timeout", type=float, default=config.API_TIMEOUT, help="Request timeout seconds")
    parser.add_argument("--insecure", action="store_true", help="Skip TLS verification (self-signed dev certs)")
    parser.add_argument("--username", default="", help="Log in with this user before the checks")
    parser.add_argument("--password", default="", help="Password for --username")
    parser.add_argument("--survey-id", default="", help="Existing survey id for detail/share/analytics checks")

    args = parser.parse_args(argv)

    session = requests.Session()
    session.headers.update({"Accept": "application/json"})
    session.verify = config.API_VERIFY_TLS and not args.insecure

    print(f"Base URL: {args.base_url}")
    role = login(session, args) if args.username else None
    tests = build_tests(args, role)
    results: List[Tuple[str, bool, Dict[str, Any]]] = []
    print(f"Running {len(tests)} checks ({'as ' + role if role else 'anonymous'})\n")

    for test in tests:
        name = test["name"]
        method = test["method"]
        path = test["path"]
        ok, detail = run_request(session, args.base_url, method, path, timeout=args.timeout, **test["kwargs"])
        status = "OK" if ok else "FAIL"
        results.append((name, ok, detail))
        print(f"[{status:4}] {name:32} {method} {path}  -> {detail['status_code']} ({detail['duration_ms']} ms)")
        print(f"       preview: {detail['preview']}")

    total = len(results)
    passed = sum(1 for (_, ok, _) in results if ok)
    failed = total - passed
    print("\nSummary")
    print(f"  Passed: {passed}/{total}")
    if failed:
        for name, ok, detail in results:
            if not ok:
                print(f"  - {name} failed ({detail['status_code']}): {detail['preview']}")

    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
