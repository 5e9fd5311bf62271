"""Version comparison engine and tagging workflow.

Key Components:
    - FetchOrchestrator: Reads the manifest version at two references and
      renders a tag caption when it changed
    - FetchOutcome: Result of one comparison
    - TaggingWorkflow: Webhook and CI entry logic around the orchestrator
"""

from autotag.engine.orchestrator import FetchOrchestrator
from autotag.engine.types import FetchOutcome
from autotag.engine.workflow import TaggingWorkflow

__all__ = ["FetchOrchestrator", "FetchOutcome", "TaggingWorkflow"]
