#!/usr/bin/env python3
"""Smoke check for a CodeForge deployment - verifies the token, triggers a run and waits for it.

Usage: python smoke_api.py SPEC_ID API_TOKEN [API_URL] [--no-wait]
"""

import asyncio
import sys
from typing import Optional

from codeforge_action.client import CodeForgeClient, get_api_url
from codeforge_action.errors import CodeForgeError
from codeforge_action.models import GenerationRequest, GenerationResult


async def check_token(client: CodeForgeClient, token: str) -> bool:
    """Check the token endpoint."""
    print("1️⃣ Verifying API token...")
    valid = await client.verify_token(token)
    if valid:
        print("   ✅ Token accepted")
    else:
        print("   ❌ Token rejected (or the auth endpoint is unreachable)")
    return valid


async def check_trigger(client: CodeForgeClient, spec_id: str, token: str) -> Optional[GenerationResult]:
    """Trigger a run without uploading a spec."""
    print(f"\n2️⃣ Triggering generation for {spec_id}...")
    try:
        result = await client.trigger_generation(
            GenerationRequest(spec_id=spec_id, commit_message="smoke check"), token
        )
    except CodeForgeError as e:
        print(f"   ❌ Trigger failed: {e}")
        return None
    print(f"   ✅ Run created: {result.generation_run_id} ({result.status})")
    return result


async def check_poll(client: CodeForgeClient, run_id: str, token: str) -> bool:
    """Wait for the run to finish."""
    print(f"\n3️⃣ Waiting for run {run_id}...")
    try:
        result = await client.poll_generation_status(run_id, token, max_attempts=60, interval_ms=5000)
    except CodeForgeError as e:
        print(f"   ❌ Polling failed: {e}")
        return False
    for sdk in result.sdks:
        package = sdk.published_package
        published = f" -> {package.name}@{package.version}" if package else ""
        print(f"   📄 {sdk.name}: {sdk.status}{published}")
    if result.status == "completed":
        print("   🎉 Run completed!")
        return True
    print(f"   ❌ Run failed. Logs: {', '.join(result.logs_urls)}")
    return False


async def smoke(spec_id: str, token: str, api_url: str, wait: bool) -> int:
    print(f"🧪 Checking CodeForge API at: {api_url}\n")
    print("=" * 60)

    results = []
    async with CodeForgeClient(api_url) as client:
        results.append(await check_token(client, token))
        run = await check_trigger(client, spec_id, token) if results[0] else None
        results.append(run is not None)
        if run is not None and wait:
            results.append(await check_poll(client, run.generation_run_id, token))

    print("\n" + "=" * 60)
    passed = sum(results)
    total = len(results)
    print(f"\n📊 Results: {passed}/{total} checks passed")

    if passed == total:
        print("✅ All checks passed! The deployment is working.")
        return 0
    print("⚠️  Some checks failed. See the output above for details.")
    return 1


def main() -> int:
    args = [arg for arg in sys.argv[1:] if arg != "--no-wait"]
    if len(args) < 2:
        print(__doc__)
        return 2
    spec_id, token = args[0], args[1]
    api_url = get_api_url(args[2] if len(args) > 2 else None)
    return asyncio.run(smoke(spec_id, token, api_url, wait="--no-wait" not in sys.argv))


if __name__ == "__main__":
    sys.exit(main())
