"""Run Gherkin feature files against regex step definitions."""
from .model import Document, Scenario, ScenarioOutline, Step, StepOutcome
from .parser import MalformedTable, parse
from .report import Report
from .runner import FeatureFileError, Runner
from .steps import CaptureError, StepPending, StepRegistry, World, pending

__version__ = "0.1.0"

__all__ = [
    "CaptureError",
    "Document",
    "FeatureFileError",
    "MalformedTable",
    "Report",
    "Runner",
    "Scenario",
    "ScenarioOutline",
    "Step",
    "StepOutcome",
    "StepPending",
    "StepRegistry",
    "World",
    "parse",
    "pending",
]
