"""Step definitions for the calculator example."""
from __future__ import annotations

from dataclasses import dataclass

from ly_gherkin import Runner, World


@dataclass
class Calculator:
    result: int = 0

    def add(self, a: int, b: int):
        self.result = a + b

    def multiply(self, a: int, b: int):
        self.result = a * b


def register(runner: Runner):
    calculators: list[Calculator] = []

    @runner.set_up
    def forget_calculators():
        calculators.clear()

    @runner.given("^a calculator$")
    def step_calculator(_world: World):
        calculators.append(Calculator())

    @runner.when(r"^I add (\d+) and (\d+)$")
    def step_add(world: World):
        calculators[-1].add(int(world.param()), int(world.param()))

    @runner.when(r"^I multiply (\d+) and (\d+)$")
    def step_multiply(world: World):
        calculators[-1].multiply(int(world.param()), int(world.param()))

    @runner.when(r"^I add up the numbers$")
    def step_add_up(world: World):
        calculators[-1].result = sum(int(row["number"]) for row in world.rows)

    @runner.then(r"^the result is (\d+)$")
    def step_result(world: World):
        expected = int(world.param())
        if calculators[-1].result != expected:
            world.error("expected %d but got %d", expected, calculators[-1].result)
