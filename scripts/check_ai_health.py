#!/usr/bin/env python3
"""
GRC AI Assist - Local AI health check
Verifies the Ollama service is running, the configured model is pulled, and a
tiny generation succeeds.
"""

import argparse
import asyncio
import sys
from dataclasses import replace

import dotenv
dotenv.load_dotenv()

from src.ai.dispatcher import InferenceError, PromptDispatcher
from src.ai.types import InferenceRequest, TaskKind
from src.core.config import get_ollama_settings
from util.logging import logger

PROBE_PROMPT = 'Say "AI is working" in exactly 3 words.'


async def check_ai_health(dispatcher: PromptDispatcher) -> bool:
    """Run the three-step check and print a report. Returns overall success."""
    print("🔍 Checking Local AI Health...\n")

    print("1. Checking Ollama service...")
    health = await dispatcher.check_health()
    if not health.reachable:
        print("   ❌ Health check failed")
        print(f"\n🚨 {health.error}")
        print("   Start it with: ollama serve")
        return False
    print("   ✅ Ollama is running")

    print("2. Checking model availability...")
    if not health.model_available:
        print(f"   ❌ Model '{health.model}' not found")
        print(f"   Available models: {', '.join(health.available_models)}")
        print(f"   Run: ollama pull {health.model}")
        return False
    print(f"   ✅ Model '{health.model}' is available")

    print("3. Testing AI generation...")
    request = InferenceRequest(
        task=TaskKind.FREE_TEXT_INSIGHT,
        prompt_text=PROBE_PROMPT,
        expect_structured=False,
        model_id=dispatcher.model_id,
    )
    try:
        text = await dispatcher.send(request)
    except InferenceError as e:
        print("   ❌ AI generation failed")
        print(f"\n🚨 {e} ({e.detail})")
        return False

    if not text.strip():
        print("   ❌ AI generation returned an empty response")
        return False

    print("   ✅ AI generation successful")
    print(f'   Response: "{text.strip()}"')

    print("\n🎉 All systems operational!")
    print("📊 Configuration:")
    print(f"   • Ollama URL: {dispatcher.settings.base_url}")
    print(f"   • Model: {dispatcher.model_id}")
    print(f"   • Available models: {len(health.available_models)}")
    return True


def main():
    parser = argparse.ArgumentParser(description="Check the local Ollama endpoint used by GRC AI Assist")
    parser.add_argument("--url", help="Override OLLAMA_URL")
    parser.add_argument("--model", help="Override OLLAMA_MODEL")
    args = parser.parse_args()

    settings = get_ollama_settings()
    settings = replace(
        settings,
        base_url=(args.url or settings.base_url).rstrip("/"),
        model=args.model or settings.model,
        temperature=0.1,
    )

    success = asyncio.run(check_ai_health(PromptDispatcher(settings)))
    logger.log_operation("health_check.ollama", "success" if success else "failed", {"model": settings.model})
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
