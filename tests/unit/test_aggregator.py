"""Tests for the Aggregator: summaries, alerts and the daily report."""

import pytest

from classpulse.domain.entities import Snapshot
from classpulse.domain.errors import SessionNotFound
from classpulse.domain.services.aggregator import (
    ATTENTIVE_ADVISORY,
    BORED_ADVISORY,
    CONFUSED_ADVISORY,
    Aggregator,
    advisory_for,
    round_half_up,
)


def live_table(**states_by_count):
    """Build a most-recent-per-student table, e.g. live_table(bored=17, confused=3)."""
    table = {}
    index = 0
    for state, count in states_by_count.items():
        for _ in range(count):
            index += 1
            table[f"s{index}"] = Snapshot(student_id=f"s{index}", attention=50, state=state)
    return table


class TestRoundHalfUp:

    @pytest.mark.parametrize("numerator,denominator,expected", [
        (280, 4, 70),
        (5, 2, 3),
        (3, 2, 2),
        (7, 3, 2),
        (8, 3, 3),
        (0, 5, 0),
        (-5, 2, -3),
        (1, 0, 0),
    ])
    def test_rounds_half_away_from_zero(self, numerator, denominator, expected):
        assert round_half_up(numerator, denominator) == expected


class TestSummarize:

    @pytest.mark.asyncio
    async def test_end_to_end_single_student(self, registry, event_log, aggregator, teacher):
        session = await registry.open("math", teacher)
        assert session.id == "sess_1"
        for _ in range(3):
            await event_log.append("sess_1", "s1", 80, "attentive")
        await event_log.append("sess_1", "s1", 40, "bored")

        result = aggregator.summarize("sess_1")

        assert result.session.id == "sess_1"
        assert len(result.summary) == 1
        row = result.summary[0]
        assert row.student_id == "s1"
        assert row.mean_attention == 70
        assert row.histogram == {"attentive": 3, "bored": 1}

    @pytest.mark.asyncio
    async def test_mean_is_rounded_and_histogram_sums_to_count(self, registry, event_log, aggregator, teacher):
        session = await registry.open("math", teacher)
        values = [71, 72, 72, 90, 55]
        states = ["attentive", "neutral", "neutral", "confused", "bored"]
        for attention, state in zip(values, states):
            await event_log.append(session.id, "s1", attention, state)

        row = aggregator.summarize(session.id).summary[0]

        assert row.mean_attention == round_half_up(sum(values), len(values))
        assert sum(row.histogram.values()) == len(values)

    @pytest.mark.asyncio
    async def test_groups_by_student(self, registry, event_log, aggregator, teacher):
        session = await registry.open("math", teacher)
        await event_log.append(session.id, "s1", 10, "bored")
        await event_log.append(session.id, "s2", 90, "attentive")
        await event_log.append(session.id, "s1", 21, "bored")

        rows = {row.student_id: row for row in aggregator.summarize(session.id).summary}

        assert rows["s1"].mean_attention == 16
        assert rows["s2"].mean_attention == 90

    @pytest.mark.asyncio
    async def test_empty_session_has_empty_summary(self, registry, aggregator, teacher):
        session = await registry.open("math", teacher)

        assert aggregator.summarize(session.id).summary == []

    @pytest.mark.asyncio
    async def test_closed_session_still_summarized(self, registry, event_log, aggregator, teacher):
        session = await registry.open("math", teacher)
        await event_log.append(session.id, "s1", 60, "neutral")
        await registry.close(session.id)

        result = aggregator.summarize(session.id)

        assert result.session.ended_at is not None
        assert result.summary[0].mean_attention == 60

    def test_unknown_session(self, aggregator):
        with pytest.raises(SessionNotFound):
            aggregator.summarize("nope")

    @pytest.mark.asyncio
    async def test_summary_wire_format(self, registry, event_log, aggregator, teacher):
        session = await registry.open("math", teacher)
        await event_log.append(session.id, "s1", 60, "neutral")

        data = aggregator.summarize(session.id).model_dump(mode="json", by_alias=True)

        assert data["session"]["id"] == session.id
        assert data["summary"] == [{"studentId": "s1", "meanAttention": 60, "histogram": {"neutral": 1}}]


class TestAlert:

    def test_bored_wins_over_confused(self):
        assert advisory_for({"bored": 85, "confused": 60}) == BORED_ADVISORY

    def test_confused_wins_over_attentive(self):
        assert advisory_for({"confused": 51, "attentive": 95}) == CONFUSED_ADVISORY

    def test_no_threshold_exceeded(self):
        assert advisory_for({"bored": 80, "confused": 50, "attentive": 90}) == ""

    def test_priority_order_is_bored_confused_attentive(self):
        assert Aggregator.alert(live_table(bored=9, attentive=1)).alert == BORED_ADVISORY
        assert Aggregator.alert(live_table(confused=6, bored=4)).alert == CONFUSED_ADVISORY
        assert Aggregator.alert(live_table(attentive=19, neutral=1)).alert == ATTENTIVE_ADVISORY

    def test_thresholds_are_strict(self):
        assert Aggregator.alert(live_table(bored=4, neutral=1)).alert == ""
        assert Aggregator.alert(live_table(confused=1, neutral=1)).alert == ""
        assert Aggregator.alert(live_table(attentive=9, neutral=1)).alert == ""

    def test_empty_table_has_no_advisory(self):
        result = Aggregator.alert({})

        assert result.alert == ""
        assert result.students == 0

    def test_counts_every_state(self):
        result = Aggregator.alert(live_table(attentive=2, confused=1))

        assert result.students == 3
        assert result.counts == {"attentive": 2, "neutral": 0, "bored": 0, "confused": 1}


class TestDailyAggregate:

    @pytest.mark.asyncio
    async def test_covers_open_and_closed_sessions(self, registry, event_log, aggregator, teacher):
        first = await registry.open("math", teacher)
        second = await registry.open("art", teacher)
        await event_log.append(first.id, "s1", 80, "attentive")
        await event_log.append(first.id, "s1", 41, "bored")
        await event_log.append(second.id, "s2", 30, "bored")
        await registry.close(first.id)

        report = aggregator.daily_aggregate()

        assert [entry.session_id for entry in report] == [first.id, second.id]
        assert report[0].course_id == "math"
        assert [(r.student_id, r.mean_attention) for r in report[0].rows] == [("s1", 61)]
        assert [(r.student_id, r.mean_attention) for r in report[1].rows] == [("s2", 30)]

    @pytest.mark.asyncio
    async def test_owner_email_not_serialized(self, registry, aggregator, teacher):
        await registry.open("math", teacher)

        data = aggregator.daily_aggregate()[0].model_dump(mode="json", by_alias=True)

        assert data == {"sessionId": "sess_1", "courseId": "math", "rows": []}
