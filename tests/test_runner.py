import io

import pytest

from ly_gherkin.discovery import find_feature_files
from ly_gherkin.model import Scenario, Step, StepOutcome
from ly_gherkin.parser import MalformedTable
from ly_gherkin.report import Report
from ly_gherkin.runner import FeatureFileError, Runner
from ly_gherkin.steps import CaptureError, World, pending

FEATURE_TEXT = """Feature: My Feature
    Scenario: Scenario 1
        Given the first setup
        When the first action
        Then the first result
        But not the other first result
    Scenario: Scenario 2
        Given the second setup
        When the second action
        Then the second result
        And the other second result
    This is ignored"""


def _was_called(text: str, pattern: str) -> bool:
    calls: list[str] = []
    runner = Runner()
    runner.register_step_def(pattern, lambda world: calls.append(pattern))
    runner.execute(text)
    return bool(calls)


def test_executes_matching_method():
    assert _was_called(FEATURE_TEXT, ".")
    assert _was_called(FEATURE_TEXT, "^the first setup$")
    assert _was_called(FEATURE_TEXT, "^not the other first result$")
    assert _was_called(FEATURE_TEXT, "^the other second result$")


def test_avoids_non_matching_method():
    assert not _was_called(FEATURE_TEXT, "^A")


def test_three_passing_steps():
    runner = Runner()
    for pattern in ["^the first setup$", "^the first action$", "^the first result$"]:
        runner.register_step_def(pattern, lambda world: None)

    report = runner.execute("Given the first setup\nWhen the first action\nThen the first result")
    assert report == Report(scenario_count=1, passed_steps=3)


def test_pending_skips_rest_of_scenario():
    flags: list[str] = []
    runner = Runner()
    runner.register_step_def("^the first setup$", lambda world: pending())
    runner.register_step_def("^the first action$", lambda world: flags.append("action"))
    runner.register_step_def("^the first result$", lambda world: flags.append("result"))

    report = runner.execute("Given the first setup\nWhen the first action\nThen the first result")
    assert flags == []
    assert report == Report(scenario_count=1, pending_steps=1, skipped_steps=2)


def test_pending_does_not_skip_second_scenario():
    called: list[str] = []
    runner = Runner()
    runner.register_step_def("^the first setup$", lambda world: pending())
    runner.register_step_def("^the second action$", lambda world: called.append("second"))
    runner.register_step_def(".", lambda world: None)

    report = runner.execute(FEATURE_TEXT)
    assert called == ["second"]
    assert report == Report(scenario_count=2, passed_steps=4, pending_steps=1, skipped_steps=3)


def test_table_is_passed_to_multi_line_step():
    data: list[list[dict[str, str]]] = []
    runner = Runner()
    runner.register_step_def(".", lambda world: data.append(world.rows))
    runner.execute(
        """Feature:
        Scenario:
            Then you should see these people
                |name|email|
                |Bob |bob@bob.com|
        """
    )
    assert data == [[{"name": "Bob", "email": "bob@bob.com"}]]


def test_too_few_fields_runs_nothing():
    called: list[str] = []
    runner = Runner()
    runner.register_step_def("given", lambda world: called.append("given"))
    runner.register_step_def("then", lambda world: called.append("then"))

    with pytest.raises(MalformedTable):
        runner.execute(
            """Feature:
            Scenario:
                Given given
                    |name|addr|
                    |bob|
                Then then"""
        )
    assert called == []


def test_first_regex_capture():
    captured: list[str] = []
    runner = Runner()

    @runner.given("(thing)")
    def capture(world: World):
        captured.append(world.param())

    runner.execute("Feature:\n    Scenario:\n        Given thing\n")
    assert captured == ["thing"]


def test_out_of_bounds_capture_is_fatal():
    runner = Runner()

    @runner.step("(thing)")
    def twice(world: World):
        world.param()
        world.param()

    with pytest.raises(CaptureError, match=r"param\(\) called too many times."):
        runner.execute("Feature:\n    Scenario:\n        Given thing\n")


def test_other_handler_errors_are_fatal():
    torn_down: list[bool] = []
    runner = Runner()
    runner.tear_down(lambda: torn_down.append(True))

    @runner.step("boom")
    def boom(world: World):
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError, match="boom"):
        runner.execute("Scenario: one\n    Given boom\nScenario: two\n    Given boom\n")
    assert torn_down == [True]


def test_error_marks_step_failed_and_continues():
    called: list[str] = []
    runner = Runner()
    runner.register_step_def("^bad$", lambda world: world.error("not good"))
    runner.register_step_def("^good$", lambda world: called.append("good"))

    report = runner.execute("Scenario:\n    Given bad\n    Then good\n")
    assert called == ["good"]
    assert report == Report(scenario_count=1, failed_steps=1, passed_steps=1)


def test_undefined_steps_are_counted():
    runner = Runner()
    runner.register_step_def("^known$", lambda world: None)

    report = runner.execute("Scenario:\n    Given known\n    When unknown\n    Then known\n")
    assert report == Report(scenario_count=1, passed_steps=2, undefined_steps=1)


def test_background_runs_before_each_scenario():
    order: list[str] = []
    runner = Runner()
    runner.set_up(lambda: order.append("set up"))
    runner.tear_down(lambda: order.append("tear down"))
    runner.register_step_def("^background$", lambda world: order.append("background"))
    runner.register_step_def("^this$", lambda world: order.append("this"))

    report = runner.execute(
        """Feature:
        Background:
            Given background
        Scenario: one
            Then this
        Scenario: two
            Then this
        """
    )
    assert order == ["set up", "background", "this", "tear down"] * 2
    assert report == Report(scenario_count=2, passed_steps=4)


def test_pending_background_skips_only_its_scenario():
    called: list[str] = []
    runner = Runner()
    state = {"first": True}

    @runner.step("^background$")
    def background(world: World):
        if state.pop("first", False):
            pending()

    runner.register_step_def("^after$", lambda world: called.append("after"))
    runner.register_step_def("^this$", lambda world: called.append("this"))

    report = runner.execute(
        """Background:
            Given background
            And after
        Scenario: one
            Then this
        Scenario: two
            Then this
        """
    )
    assert called == ["after", "after", "this"]
    assert report == Report(scenario_count=2, pending_steps=1, skipped_steps=1, passed_steps=4)


def test_set_up_is_called_before_steps():
    set_up: list[bool] = []
    seen: list[bool] = []
    runner = Runner()
    runner.set_up(lambda: set_up.append(True))
    runner.register_step_def(".", lambda world: seen.append(bool(set_up)))

    runner.execute("Feature:\n    Scenario:\n        Then this")
    assert seen == [True]


def test_tear_down_is_called_after_pending():
    torn_down: list[bool] = []
    runner = Runner()
    runner.tear_down(lambda: torn_down.append(True))
    runner.register_step_def(".", lambda world: pending())

    runner.execute("Feature:\n    Scenario:\n        Then this")
    assert torn_down == [True]


def test_outline_runs_once_per_example():
    seen: list[str] = []
    runner = Runner()

    @runner.step(r"^the scenario is (\w+)$")
    def scenario_num(world: World):
        seen.append(world.param())

    report = runner.execute(
        """Feature:
        Scenario Outline:
            Given the scenario is <scenario num>
        Examples:
            |scenario num|
            |first|
            |second|
        """
    )
    assert seen == ["first", "second"]
    assert report == Report(scenario_count=2, passed_steps=2)


def test_outline_without_examples_does_not_execute():
    assert not _was_called("Feature:\n    Scenario Outline:\n        Given .\n", ".")


def test_running_twice_doubles_counts():
    def run() -> Report:
        runner = Runner()
        runner.register_step_def("^background$", lambda world: None)
        runner.register_step_def("^pending$", lambda world: pending())
        runner.register_step_def("^bad$", lambda world: world.error("bad"))
        return runner.execute(
            """Background:
                Given background
            Scenario:
                Given pending
                Then bad
            Scenario:
                Given bad
                Then unknown
            """
        )

    once = run()
    assert once == Report(
        scenario_count=2,
        passed_steps=2,
        pending_steps=1,
        skipped_steps=1,
        failed_steps=1,
        undefined_steps=1,
    )
    assert once + run() == Report(
        scenario_count=4,
        passed_steps=4,
        pending_steps=2,
        skipped_steps=2,
        failed_steps=2,
        undefined_steps=2,
    )


def test_execute_scenario_records_outcomes():
    runner = Runner()
    runner.register_step_def("^pending$", lambda world: pending())
    scenario = Scenario(steps=[Step("pending"), Step("pending")])

    report = runner.execute_scenario(scenario)
    assert [step.outcome for step in scenario.steps] == [StepOutcome.PENDING, StepOutcome.SKIPPED]
    assert scenario.steps[0].is_pending
    assert report == Report(scenario_count=1, pending_steps=1, skipped_steps=1)


def test_trace_output():
    output = io.StringIO()
    runner = Runner(output=output)
    runner.register_step_def("^ok$", lambda world: None)
    runner.register_step_def("^bad$", lambda world: world.error("it broke"))
    runner.register_step_def("^later$", lambda world: pending())

    runner.execute(
        """Feature: Tracing
        Scenario: traced
            Given ok
            When bad
            And missing
            Then later
            And ok
        """
    )
    assert output.getvalue().splitlines() == [
        "Scenario: traced",
        "        - Given ok",
        "FAILED  - When bad",
        "it broke",
        "UNDEFINED - And missing",
        'Could not find step definition for "And missing"',
        "PENDING - Then later",
        "Skipped - And ok",
    ]


def test_no_output_same_report():
    text = "Scenario:\n    Given ok\n    Then later\n    And ok\n"

    def run(output) -> Report:
        runner = Runner(output=output)
        runner.register_step_def("^ok$", lambda world: None)
        runner.register_step_def("^later$", lambda world: pending())
        return runner.execute(text)

    assert run(None) == run(io.StringIO())


def test_run_discovers_feature_files(tmp_path):
    (tmp_path / "nested").mkdir()
    (tmp_path / "one.feature").write_text("Scenario:\n    Given ok\n")
    (tmp_path / "nested" / "two.feature").write_text("Scenario:\n    Given ok\n")
    (tmp_path / "notes.txt").write_text("Scenario:\n    Given ok\n")
    runner = Runner()
    runner.register_step_def("^ok$", lambda world: None)

    assert runner.run([tmp_path]) == Report(scenario_count=2, passed_steps=2)


def test_empty_diagnostic_is_traced():
    output = io.StringIO()
    runner = Runner(output=output)
    runner.register_step_def("^blank$", lambda world: world.error(""))

    report = runner.execute("Given blank\nThen blank\n")
    assert report == Report(scenario_count=1, failed_steps=2)
    assert output.getvalue() == "FAILED  - Given blank\n\nFAILED  - Then blank\n\n"


def test_run_names_the_malformed_feature_file(tmp_path):
    good = tmp_path / "a.feature"
    bad = tmp_path / "b.feature"
    good.write_text("Scenario:\n    Given ok\n")
    bad.write_text("Scenario:\n    Given ok\n        |a|b|\n        |1|\n")
    runner = Runner()
    runner.register_step_def("^ok$", lambda world: None)

    with pytest.raises(FeatureFileError, match="expected 2 fields but found 1") as excinfo:
        runner.run([tmp_path])
    assert excinfo.value.path == bad
    assert str(excinfo.value).startswith(bad.as_posix())
    assert isinstance(excinfo.value.error, MalformedTable)


def test_run_accepts_discovered_files(tmp_path):
    feature = tmp_path / "one.feature"
    feature.write_text("Scenario:\n    Given ok\n")
    runner = Runner()
    runner.register_step_def("^ok$", lambda world: None)

    assert runner.run(find_feature_files([tmp_path])) == Report(scenario_count=1, passed_steps=1)
