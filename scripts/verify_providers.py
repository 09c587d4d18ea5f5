"""
One-shot smoke test: send a short prompt to every routable model and report
which backends answer. Talks to the providers directly (no server needed).

    python -m scripts.verify_providers
    python -m scripts.verify_providers --model gpt-4o-mini --model grok-2-latest
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time

from turbocontent.config import settings
from turbocontent.core.domain.exceptions import ProviderError, TurboContentError
from turbocontent.infra.llm.factory import build_dispatcher
from turbocontent.infra.media import ImageStore

logging.basicConfig(level=logging.INFO, format="%(levelname)-5s %(message)s")
log = logging.getLogger("verify")

PROMPT = "Reply with the single word: ready"


async def _check(dispatcher, model_id: str) -> tuple[str, str, int]:
    t0 = time.perf_counter()
    try:
        text = await dispatcher.generate(PROMPT, model_id)
    except ProviderError as exc:
        return model_id, f"FAIL ({exc.failure or 'unknown'})", int((time.perf_counter() - t0) * 1000)
    preview = text.strip().replace("\n", " ")[:40]
    return model_id, f"OK   {preview!r}", int((time.perf_counter() - t0) * 1000)


async def main(models: list[str]) -> int:
    media = ImageStore(settings.media_dir, url_prefix=settings.media_url_prefix)
    media.ensure_dir()
    try:
        dispatcher = build_dispatcher(media=media)
    except TurboContentError as exc:
        log.error("%s", exc)
        return 2

    targets = models or [r.model_id for r in dispatcher.routes]
    failed = 0
    for model_id in targets:
        try:
            mid, outcome, ms = await _check(dispatcher, model_id)
        except TurboContentError as exc:
            log.error("%-40s %s", model_id, exc)
            failed += 1
            continue
        if outcome.startswith("FAIL"):
            failed += 1
        log.info("%-40s %-50s %6dms", mid, outcome, ms)

    log.info("%d/%d model(s) answered", len(targets) - failed, len(targets))
    return 1 if failed else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Smoke-test configured AI backends")
    parser.add_argument("--model", action="append", default=[], help="modelId to check (repeatable)")
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.model)))
