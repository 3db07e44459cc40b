from dartmacro.engine.guards import CooldownTracker, FireRateLimiter
from dartmacro.engine.matcher import (
    TriggerMatcher,
    match_alias,
    match_aliases,
    match_trigger,
    strip_ansi,
)
from tests.conftest import FakeClock, make_alias, make_trigger


class TestAliasMatching:
    def test_exact_is_byte_for_byte(self):
        alias = make_alias("look", "l", match_mode="exact")
        assert match_alias("look", alias) is not None
        assert match_alias(" look", alias) is None
        assert match_alias("look ", alias) is None
        assert match_alias("LOOK", alias) is None

    def test_prefix_arguments(self):
        found = match_alias("aa a b c", make_alias("aa", ""))
        assert found is not None
        assert found.args == ["a", "b", "c"]

    def test_prefix_needs_word_boundary(self):
        alias = make_alias("aa", "")
        assert match_alias("aab", alias) is None
        assert match_alias("AA", alias) is not None

    def test_prefix_collapses_whitespace_runs(self):
        found = match_alias("aa   x    y", make_alias("aa", ""))
        assert found.args == ["x", "y"]

    def test_arguments_past_nine_only_via_all(self):
        words = [str(n) for n in range(1, 13)]
        found = match_alias("go " + " ".join(words), make_alias("go", ""))
        assert len(found.args) == 12
        assert found.captures == words[:9]

    def test_regex_anchored_to_whole_line(self):
        alias = make_alias(r"k (\w+)", "", match_mode="regex")
        assert match_alias("k orc", alias).args == ["orc"]
        assert match_alias("K ORC", alias) is not None
        assert match_alias("k orc now", alias) is None

    def test_regex_without_groups_uses_tail_words(self):
        alias = make_alias(r"tt.*", "", match_mode="regex")
        assert match_alias("tt one two", alias).args == ["one", "two"]

    def test_invalid_regex_never_matches(self):
        assert match_alias("anything", make_alias("(unclosed", "", match_mode="regex")) is None

    def test_first_enabled_match_wins(self):
        rules = [
            make_alias("kk", "first", enabled=False, id="1"),
            make_alias("kk", "second", id="2"),
            make_alias("kk", "third", id="3"),
        ]
        found = match_aliases("kk rat", rules)
        assert [m.rule.id for m in found] == ["2"]
        assert match_aliases("nothing", rules) == []


class TestTriggerMatching:
    def test_substring_case_insensitive_span(self):
        found = match_trigger("You are HUNGRY now", "raw", make_trigger("hungry"))
        assert found.captured_text == "HUNGRY"
        assert found.raw_line == "raw"

    def test_exact(self):
        trigger = make_trigger("You die.", match_mode="exact")
        assert match_trigger("You die.", "", trigger) is not None
        assert match_trigger("You die. ", "", trigger) is None

    def test_regex_search_with_groups(self):
        trigger = make_trigger(r"(\w+) tells you '(.+)'", match_mode="regex")
        found = match_trigger("Bob tells you 'hi'", "", trigger)
        assert found.captures == ["Bob", "hi"]
        assert found.captured_text == "Bob tells you 'hi'"

    def test_non_exclusive(self):
        matcher = TriggerMatcher()
        rules = [make_trigger("orc", id="1"), make_trigger("arrives", id="2")]
        found = matcher.match_triggers("An orc arrives.", "An orc arrives.", rules)
        assert [m.rule.id for m in found] == ["1", "2"]

    def test_cooldown_suppresses_second_fire(self):
        clock = FakeClock()
        matcher = TriggerMatcher(CooldownTracker(clock), FireRateLimiter(clock=clock))
        rules = [make_trigger("orc", cooldown_ms=1000)]
        assert len(matcher.match_triggers("orc", "orc", rules)) == 1
        clock.advance(999)
        assert matcher.match_triggers("orc", "orc", rules) == []
        clock.advance(1)
        assert len(matcher.match_triggers("orc", "orc", rules)) == 1

    def test_cooldown_only_recorded_on_emitted_match(self):
        clock = FakeClock()
        matcher = TriggerMatcher(CooldownTracker(clock), FireRateLimiter(clock=clock))
        rules = [make_trigger("orc", cooldown_ms=1000)]
        assert matcher.match_triggers("goblin", "goblin", rules) == []
        clock.advance(10)
        assert len(matcher.match_triggers("orc", "orc", rules)) == 1

    def test_global_rate_limit(self):
        clock = FakeClock()
        matcher = TriggerMatcher(CooldownTracker(clock), FireRateLimiter(3, clock=clock))
        rules = [make_trigger("x", id=str(n)) for n in range(5)]
        assert len(matcher.match_triggers("x", "x", rules)) == 3
        assert matcher.match_triggers("x", "x", rules) == []
        clock.advance(1000)
        assert len(matcher.match_triggers("x", "x", rules)) == 3

    def test_reset_clears_cooldowns(self):
        clock = FakeClock()
        matcher = TriggerMatcher(CooldownTracker(clock), FireRateLimiter(clock=clock))
        rules = [make_trigger("orc", cooldown_ms=60_000)]
        matcher.match_triggers("orc", "orc", rules)
        matcher.reset()
        assert len(matcher.match_triggers("orc", "orc", rules)) == 1


def test_strip_ansi():
    assert strip_ansi("\x1b[1;31mDanger\x1b[0m!\r\n") == "Danger!"
