"""Integration tests: real API calls, no mocks. Requires .env keys for every routed model."""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

from config.config_loader import load_config

load_dotenv()

_CONFIG = load_config()
_MISSING_KEYS = sorted({
    _CONFIG.models[target].api_key_env
    for target in _CONFIG.routing.values()
    if not os.environ.get(_CONFIG.models[target].api_key_env, "").strip()
})

pytestmark = pytest.mark.integration

if _MISSING_KEYS:
    pytestmark = pytest.mark.skip(reason=f"Missing API keys for routed models: {', '.join(_MISSING_KEYS)}")


async def test_full_roundtable_pipeline(tmp_path: Path):
    """Run a real roundtable with the shipped routing, verify the artifact is usable."""
    from roundtable.cli import build_engine
    from roundtable.models import RoundtableInput
    from roundtable.output import save_to_file
    from roundtable.roundtable import run_roundtable

    engine = build_engine(_CONFIG, "short_form")
    roundtable_input = RoundtableInput(
        brief="A barista pours latte art for a regular customer on a rainy morning",
        platform="tiktok",
    )

    result = await run_roundtable(
        roundtable_input, engine.invoker, engine.synthesizer, should_challenge=lambda: True,
    )

    assert len(result.discussion.round1) == 5
    assert len(result.discussion.round2) == 3
    for resp in result.discussion.round1 + result.discussion.round2:
        assert resp.response, f"Empty content from {resp.agent}"
        assert resp.latency_sec > 0

    assert result.optimized_prompt, "Synthesis produced no prompt"
    assert result.character_count > 0
    assert [s.order for s in result.suggested_shots] == list(range(1, len(result.suggested_shots) + 1))

    saved = save_to_file(result, tmp_path / "output")
    content = saved.read_text(encoding="utf-8")
    assert "## Round 2: Discussion" in content
    assert result.optimized_prompt in content
