# scripts/smoke_providers.py
import asyncio
import os
from pathlib import Path

from dotenv import load_dotenv

# Resolve .env relative to the repo root so this script works from any cwd.
load_dotenv(Path(__file__).parent.parent / ".env", override=True)

from promptenhancer.config import ENV_KEY_MAP, load_config  # noqa: E402
from promptenhancer.providers import SUPPORTED_PROVIDERS, create_provider  # noqa: E402
from promptenhancer.services import EnhancementService, EnhanceOptions  # noqa: E402

PROMPT = "write a function that reverses a string"


async def smoke_provider(service: EnhancementService, name: str) -> None:
    """Enhance one prompt with a single provider"""

    # openai-compatible endpoints may run without a key
    if name != "openai-compatible" and not os.getenv(ENV_KEY_MAP[name]):
        print(f"⏭️  Skipping {name} (no API key)")
        return

    try:
        backend = create_provider(name, service.config)
    except Exception as e:
        print(f"⏭️  Skipping {name} ({e})")
        return

    print(f"\n🧪 Testing {name} ({backend.model})...")
    try:
        result = await service.enhance(EnhanceOptions(text=PROMPT, provider=name))
        print(f"   Response: {result.enhanced_text[:200]}")
        print(f"   ✅ {name} working!")
    except Exception as e:
        print(f"   ❌ Error: {type(e).__name__}: {e}")


async def main():
    print("=" * 60)
    print("Provider Smoke Test")
    print("=" * 60)

    service = EnhancementService(load_config())
    for name in SUPPORTED_PROVIDERS:
        await smoke_provider(service, name)

    print("\n" + "=" * 60)
    print("Testing complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
