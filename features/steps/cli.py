from pathlib import Path

from behave import given, then, when

from features.steps.gherkin_env import GherkinContext

here = Path(__file__).parent


@given("a new python project")
def step_new_project(context: GherkinContext):
    context.gherkin.project_files["pyproject.toml"] = (here / "data" / "pyproject.toml").read_text()


@given("there is no project file")
def step_no_project(_context: GherkinContext):
    pass


@given('the example file "{name}" as "{rel_path}"')
def step_example_file(context: GherkinContext, name: str, rel_path: str):
    context.gherkin.project_files[rel_path] = (here / "data" / name).read_text()


@given('the file "{rel_path}" containing')
def step_file_containing(context: GherkinContext, rel_path: str):
    context.gherkin.project_files[rel_path] = context.text + "\n"


@when('I run gherkin with "{args}"')
def step_run_gherkin(context: GherkinContext, args: str):
    context.result = context.gherkin.run(*args.split())


@when("I run gherkin with no arguments")
def step_run_gherkin_no_args(context: GherkinContext):
    context.result = context.gherkin.run()


@then("the exit code is {exit_code}")
def step_exit_code(context: GherkinContext, exit_code: str):
    assert context.result
    assert context.result.exit_code == int(exit_code), context.result.output


@then("the output contains the text")
def step_output_contains_text(context: GherkinContext):
    assert context.result
    assert context.text.strip() in context.result.output, context.result.output


@then('the output contains "{message}"')
def step_output_contains_message(context: GherkinContext, message: str):
    assert context.result
    assert message in context.result.output, context.result.output


@then('the output does not contain "{message}"')
def step_output_does_not_contain_message(context: GherkinContext, message: str):
    assert context.result
    assert message not in context.result.output, context.result.output
