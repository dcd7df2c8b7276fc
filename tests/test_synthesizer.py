"""
Tests for answer synthesis paths.
"""

import pytest

from council.core.messages import OracleReply, TokenUsage
from council.core.oracle import MockOracle
from council.swarm.synthesizer import NO_DATA_MESSAGE, SynthesisPath, Synthesizer, SynthesizerConfig

from tests.conftest import make_answer


@pytest.fixture
def synthesizer() -> Synthesizer:
    return Synthesizer()


@pytest.fixture
def two_answers():
    return [
        make_answer("Weather Expert", "weather", "Sunny and warm", 0.9),
        make_answer("Math Expert", "mathematics", "15 + 27 = 42", 0.7),
    ]


class TestEmptyAndSingle:

    @pytest.mark.asyncio
    async def test_no_answers(self, synthesizer):
        result = await synthesizer.merge("q", [])

        assert result.content == NO_DATA_MESSAGE
        assert result.confidence == 0.0
        assert not result.synthesized
        assert result.path == SynthesisPath.EMPTY
        assert result.experts == []

    @pytest.mark.asyncio
    async def test_single_answer_passes_through(self, synthesizer):
        answer = make_answer(content="Only me", confidence=0.6)
        oracle = MockOracle(["should not be used"])

        result = await synthesizer.merge("q", [answer], oracle=oracle)

        assert result.content == "Only me"
        assert result.confidence == 0.6
        assert not result.synthesized
        assert result.path == SynthesisPath.PASSTHROUGH
        assert result.token_usage == answer.token_usage
        assert oracle.calls == []

    @pytest.mark.asyncio
    async def test_passthrough_is_idempotent(self, synthesizer):
        answer = make_answer(content="Stable content")

        first = await synthesizer.merge("q", [answer])
        second = await synthesizer.merge("q", [answer])

        assert first.content == second.content == "Stable content"
        assert not first.synthesized and not second.synthesized


class TestConcatenation:

    @pytest.mark.asyncio
    async def test_format(self, synthesizer, two_answers):
        result = await synthesizer.merge("q", two_answers)

        assert result.path == SynthesisPath.CONCATENATED
        assert result.synthesized
        assert result.content == (
            "I consulted 2 experts to answer your query:\n\n"
            "Weather Expert (weather): Sunny and warm\n\n"
            "Math Expert (mathematics): 15 + 27 = 42"
        )

    @pytest.mark.asyncio
    async def test_names_appear_in_selection_order(self, synthesizer):
        answers = [make_answer(f"Expert {c}", "d", f"content {c}") for c in "CAB"]

        result = await synthesizer.merge("q", answers)

        positions = [result.content.index(a.expert_name) for a in answers]
        assert positions == sorted(positions)

    @pytest.mark.asyncio
    async def test_confidence_is_mean_and_usage_summed(self, synthesizer, two_answers):
        result = await synthesizer.merge("q", two_answers)

        assert result.confidence == pytest.approx(0.8)
        assert result.token_usage.input_tokens == 20
        assert result.token_usage.output_tokens == 10
        assert result.experts == ["Weather Expert", "Math Expert"]

    @pytest.mark.asyncio
    async def test_oracle_disabled_by_config(self, two_answers):
        oracle = MockOracle(["composed"])
        synthesizer = Synthesizer(SynthesizerConfig(use_oracle=False))

        result = await synthesizer.merge("q", two_answers, oracle=oracle)

        assert result.path == SynthesisPath.CONCATENATED
        assert oracle.calls == []


class TestComposition:

    @pytest.mark.asyncio
    async def test_oracle_composes(self, synthesizer, two_answers):
        oracle = MockOracle([OracleReply(content="Unified answer", input_tokens=100, output_tokens=20, model="m1")])

        result = await synthesizer.merge("What is up?", two_answers, oracle=oracle)

        assert result.content == "Unified answer"
        assert result.path == SynthesisPath.COMPOSED
        assert result.synthesized
        assert result.confidence == pytest.approx(0.8)
        assert result.token_usage.input_tokens == 120
        assert result.token_usage.output_tokens == 30
        assert result.metadata["synthesis_model"] == "m1"
        assert result.metadata["expert_domains"] == ["weather", "mathematics"]

        prompt = oracle.calls[0]["message"]
        assert '"What is up?"' in prompt
        assert "Weather Expert (weather)" in prompt
        assert "Confidence: 90%" in prompt

    @pytest.mark.asyncio
    async def test_oracle_failure_falls_back(self, synthesizer, two_answers, failing_oracle):
        result = await synthesizer.merge("q", two_answers, oracle=failing_oracle)

        assert result.path == SynthesisPath.CONCATENATED
        assert "Weather Expert" in result.content
        assert "Math Expert" in result.content

    @pytest.mark.asyncio
    async def test_cost_dropped_when_unknown(self, synthesizer):
        answers = [
            make_answer("A", "a", "x", usage=TokenUsage(1, 1, cost=0.5)),
            make_answer("B", "b", "y", usage=TokenUsage(1, 1)),
        ]
        result = await synthesizer.merge("q", answers)
        assert result.token_usage.cost is None

    @pytest.mark.asyncio
    async def test_to_dict(self, synthesizer, two_answers):
        data = (await synthesizer.merge("q", two_answers)).to_dict()
        assert data["path"] == "concatenated"
        assert data["experts"] == ["Weather Expert", "Math Expert"]
        assert len(data["expert_answers"]) == 2
